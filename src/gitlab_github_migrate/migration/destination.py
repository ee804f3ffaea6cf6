"""Per-entity create operations against GitHub."""

from typing import Optional

from loguru import logger

from ..api.exceptions import UnresolvedMilestoneError
from ..api.github import GitHubClient
from ..models import (
    Issue,
    IssueCreate,
    Label,
    LabelCreate,
    Milestone,
    MilestoneCreate,
)
from ..utils.progress import CLOSED, DONE, NO_RESULT, OK, ProgressReporter
from .milestone_index import MilestoneIndex
from .rate_governor import RateGovernor
from .retry import RetryPolicy


class GitHubDestination:
    """Creates labels, milestones and issues on GitHub, one at a time.

    Every create runs under the retry policy and reports a status token to
    the progress output. None of the ``create_*`` methods raise for a failed
    write; they return False instead.
    """

    def __init__(
        self,
        client: GitHubClient,
        governor: RateGovernor,
        retry: RetryPolicy,
        milestone_index: Optional[MilestoneIndex] = None,
        progress: Optional[ProgressReporter] = None,
        check_quota_on_all_writes: bool = True,
        strict_milestones: bool = False,
    ):
        """Initialize GitHub destination.

        Args:
            client: Destination API client
            governor: Primary quota checks and secondary cooldowns
            retry: Retry policy wrapping each write
            milestone_index: Title to number cache, built from the client if omitted
            progress: Progress reporter
            check_quota_on_all_writes: Also check the primary quota before
                label and milestone writes; issue writes are always checked
            strict_milestones: Fail an issue whose milestone title is not
                found on GitHub instead of creating it without a milestone
        """
        self.client = client
        self.governor = governor
        self.retry = retry
        self.milestone_index = milestone_index or MilestoneIndex(client.list_milestones)
        self.progress = progress or ProgressReporter()
        self.check_quota_on_all_writes = check_quota_on_all_writes
        self.strict_milestones = strict_milestones
        self.logger = logger.bind(component='GitHubDestination')

    def create_label(self, label: Label) -> bool:
        payload = LabelCreate.from_gitlab(label)
        created = {}

        def operation():
            if self.check_quota_on_all_writes:
                self.governor.check_quota()
            created['label'] = self.client.create_label(payload)

        self.progress.begin_write()
        success = self.retry.invoke(operation, f'create label {label.name!r}')
        if success:
            self.progress.token(OK + DONE if created['label'] else NO_RESULT)
        self.progress.end_item()
        return success

    def create_milestone(self, milestone: Milestone) -> bool:
        payload = MilestoneCreate.from_gitlab(milestone)
        created = {}

        def operation():
            if self.check_quota_on_all_writes:
                self.governor.check_quota()
            try:
                created['number'] = self.client.create_milestone(payload)
            finally:
                # The write's effect is unknown on failure, so always refetch
                self.milestone_index.invalidate()

        self.progress.begin_write()
        success = self.retry.invoke(operation, f'create milestone {milestone.title!r}')
        if success:
            self.progress.token(OK + DONE if created['number'] is not None else NO_RESULT)
        self.progress.end_item()
        return success

    def create_issue(self, issue: Issue) -> bool:
        """Create an issue and, if it is closed on GitLab, close it on GitHub.

        The close is retried on its own so that a failed close never creates
        the issue a second time.
        """
        created = {}

        def create():
            self.governor.check_quota()
            payload = IssueCreate.from_gitlab(issue, self._resolve_milestone(issue))
            created['number'] = self.client.create_issue(payload)
            self.governor.cooldown()

        def close():
            self.governor.check_quota()
            self.client.close_issue(created['number'])
            self.governor.cooldown()

        self.progress.begin_write()
        success = self.retry.invoke(create, f'create issue {issue.title!r}')

        if success:
            number = created['number']
            self.progress.token(OK if number is not None else NO_RESULT)

            if number is not None and issue.is_closed:
                success = self.retry.invoke(close, f'close issue #{number}')
                if success:
                    self.progress.token(CLOSED)

            if success:
                self.progress.token(DONE)

        self.progress.end_item()
        return success

    def _resolve_milestone(self, issue: Issue) -> Optional[int]:
        title = issue.milestone_title
        if title is None:
            return None

        number = self.milestone_index.resolve(title)
        if number is None:
            if self.strict_milestones:
                raise UnresolvedMilestoneError(title)
            self.logger.warning(
                f'Milestone {title!r} not found on GitHub; '
                f'creating issue {issue.title!r} without it'
            )
        return number


class DryRunDestination:
    """Stands in for GitHubDestination when nothing may be written."""

    def __init__(self, progress: Optional[ProgressReporter] = None):
        self.progress = progress or ProgressReporter()
        self.logger = logger.bind(component='DryRunDestination')

    def _skip(self, kind: str, name: str) -> bool:
        self.logger.info(f'Dry run: would create {kind} {name!r}')
        self.progress.begin_write()
        self.progress.token(NO_RESULT)
        self.progress.end_item()
        return True

    def create_label(self, label: Label) -> bool:
        return self._skip('label', label.name)

    def create_milestone(self, milestone: Milestone) -> bool:
        return self._skip('milestone', milestone.title)

    def create_issue(self, issue: Issue) -> bool:
        return self._skip('issue', issue.title)
