"""Migration engine - main entry point for migration operations."""

from typing import Optional

from loguru import logger

from ..api.github import GitHubClient
from ..api.gitlab import GitLabClient, GitLabReader
from ..config.config import Config
from ..utils.progress import ProgressReporter
from .destination import DryRunDestination, GitHubDestination
from .milestone_index import MilestoneIndex
from .orchestrator import MigrationOrchestrator, MigrationPlan, MigrationSummary
from .rate_governor import RateGovernor
from .retry import RetryPolicy


class MigrationEngine:
    """Builds the clients and components for one run and executes it."""

    def __init__(self, config: Config, progress: Optional[ProgressReporter] = None):
        """Initialize migration engine.

        Args:
            config: Migration configuration
            progress: Progress reporter shared by every component
        """
        self.config = config
        self.progress = progress or ProgressReporter()
        self.logger = logger.bind(component='MigrationEngine')

        self.source_client = GitLabClient(config.source)
        self.destination_client = GitHubClient(config.destination)

        self.source = GitLabReader(self.source_client, config.source.project_id)
        self.destination = self._create_destination()
        self.orchestrator = MigrationOrchestrator(self.progress)

    def _create_destination(self):
        settings = self.config.migration
        if settings.dry_run:
            return DryRunDestination(self.progress)

        governor = RateGovernor(
            self.destination_client.get_quota_status,
            base_cooldown=settings.secondary_pause_ms / 1000.0,
            progress=self.progress,
        )
        retry = RetryPolicy(
            governor, max_attempts=settings.max_retry_attempts, progress=self.progress
        )
        return GitHubDestination(
            self.destination_client,
            governor,
            retry,
            milestone_index=MilestoneIndex(self.destination_client.list_milestones),
            progress=self.progress,
            check_quota_on_all_writes=settings.check_quota_on_all_writes,
            strict_milestones=settings.strict_milestones,
        )

    def _create_plan(self) -> MigrationPlan:
        return MigrationPlan(
            migrate_labels=self.config.migration.labels,
            migrate_milestones=self.config.migration.milestones,
            migrate_issues=self.config.migration.issues,
        )

    def migrate(self, plan: Optional[MigrationPlan] = None) -> MigrationSummary:
        """Execute migration with the given plan.

        Args:
            plan: Migration plan (built from configuration if not provided)

        Returns:
            Migration summary
        """
        plan = plan or self._create_plan()
        mode = 'dry run' if self.config.migration.dry_run else 'migration'
        self.logger.info(
            f'Starting {mode}: GitLab project {self.config.source.project_id} -> '
            f'GitHub {self.config.destination.owner}/{self.config.destination.repo}'
        )

        try:
            return self.orchestrator.execute(self.source, self.destination, plan)
        finally:
            self.close()

    def test_connectivity(self) -> None:
        """Test connectivity to both services.

        Raises:
            ConnectionError: If connectivity test fails
        """
        self.logger.info('Testing connectivity to GitLab and GitHub')

        if not self.source_client.test_connection():
            raise ConnectionError('Cannot connect to source GitLab instance')

        if not self.destination_client.test_connection():
            raise ConnectionError('Cannot connect to destination GitHub API')

        self.logger.info('Connectivity tests passed')

    def close(self) -> None:
        self.source_client.close()
        self.destination_client.close()
