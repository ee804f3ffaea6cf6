"""Migration orchestrator for coordinating entity migrations."""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from ..models import InvalidSourceItem
from ..utils.progress import ProgressReporter

LABELS = 'Labels'
MILESTONES = 'Milestones'
ISSUES = 'Issues'

# Issues reference milestones, so milestones must exist first
EXECUTION_ORDER = (LABELS, MILESTONES, ISSUES)


class MigrationPlan(BaseModel):
    """Which entity kinds to migrate. The order is not configurable."""

    migrate_labels: bool = Field(default=True, description='Migrate labels')
    migrate_milestones: bool = Field(default=True, description='Migrate milestones')
    migrate_issues: bool = Field(default=True, description='Migrate issues')

    def includes(self, entity_kind: str) -> bool:
        flags = {
            LABELS: self.migrate_labels,
            MILESTONES: self.migrate_milestones,
            ISSUES: self.migrate_issues,
        }
        return flags.get(entity_kind, False)


class BatchResult(BaseModel):
    """Outcome of one entity-kind pass."""

    entity_kind: str = Field(..., description='Labels, Milestones or Issues')
    total: int = Field(default=0, description='Items fetched from the source')
    successful: int = Field(default=0, description='Items created')
    failed: int = Field(default=0, description='Items that exhausted their retries')
    failed_items: List[str] = Field(
        default_factory=list, description='Display keys of failed items'
    )
    fetch_error: Optional[str] = Field(
        default=None, description='Error raised while reading the source'
    )

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.fetch_error is None


class MigrationSummary(BaseModel):
    """Summary of migration results."""

    started_at: datetime = Field(..., description='Migration start time')
    completed_at: Optional[datetime] = Field(
        default=None, description='Migration completion time'
    )
    batches: List[BatchResult] = Field(
        default_factory=list, description='Results per entity kind, in run order'
    )

    @property
    def total_entities(self) -> int:
        return sum(b.total for b in self.batches)

    @property
    def successful_migrations(self) -> int:
        return sum(b.successful for b in self.batches)

    @property
    def failed_migrations(self) -> int:
        return sum(b.failed for b in self.batches)

    @property
    def failed_batches(self) -> List[str]:
        return [b.entity_kind for b in self.batches if b.fetch_error is not None]

    @property
    def failed(self) -> bool:
        return any(not b.ok for b in self.batches)

    @property
    def results_by_type(self) -> Dict[str, Dict[str, int]]:
        return {
            b.entity_kind: {
                'total': b.total,
                'successful': b.successful,
                'failed': b.failed,
            }
            for b in self.batches
        }


class MigrationOrchestrator:
    """Runs the label, milestone and issue passes in order."""

    def __init__(self, progress: Optional[ProgressReporter] = None):
        self.progress = progress or ProgressReporter()
        self.logger = logger.bind(component='MigrationOrchestrator')

    def run(
        self,
        entity_kind: str,
        fetch_all: Callable[[], Sequence[Any]],
        display_key: Callable[[Any], str],
        create: Callable[[Any], Optional[bool]],
    ) -> BatchResult:
        """Migrate one collection, item by item, in source order.

        A failing item never stops the batch. ``create`` signals failure by
        returning False; an exception escaping it is logged and counted the
        same way. Source records that failed to parse arrive as
        ``InvalidSourceItem``, are never passed to ``create`` and count as
        failed.

        Args:
            entity_kind: Plural display name, e.g. ``Labels``
            fetch_all: Reads the whole source collection
            display_key: Human-readable identifier of an item
            create: Writes one item to the destination

        Returns:
            Batch result with success and failure counts
        """
        result = BatchResult(entity_kind=entity_kind)
        self.progress.batch_header(entity_kind)

        try:
            items = list(fetch_all())
        except Exception as e:
            self.logger.error(f'Failed to fetch {entity_kind.lower()}: {e}')
            self.progress.batch_error(entity_kind, str(e))
            result.fetch_error = str(e)
            return result

        result.total = len(items)
        self.progress.batch_count(result.total)
        self.logger.info(f'Starting {entity_kind.lower()} migration ({result.total} items)')

        for item in items:
            if isinstance(item, InvalidSourceItem):
                key = item.display_key
                self.progress.item(entity_kind, key)
                self._report_invalid(item)
                result.failed += 1
                result.failed_items.append(key)
                continue

            key = display_key(item)
            self.progress.item(entity_kind, key)

            try:
                success = create(item) is not False
            except Exception as e:
                self.logger.exception(f'Unexpected error migrating {key!r}: {e}')
                self.progress.failure(str(e))
                self.progress.end_item()
                success = False

            if success:
                result.successful += 1
            else:
                result.failed += 1
                result.failed_items.append(key)

        self.logger.info(
            f'Completed {entity_kind.lower()} migration: '
            f'{result.successful} successful, {result.failed} failed'
        )
        return result

    def _report_invalid(self, item: InvalidSourceItem) -> None:
        self.logger.error(
            f'Skipping {item.resource[:-1]} {item.display_key!r}: invalid source data'
        )
        self.progress.begin_write()
        self.progress.failure(f'Invalid source data: {item.error}')
        self.progress.end_item()

    def execute(
        self, source, destination, plan: Optional[MigrationPlan] = None
    ) -> MigrationSummary:
        """Run every enabled batch in dependency order.

        Args:
            source: Provides ``list_labels``, ``list_milestones``, ``list_issues``
            destination: Provides ``create_label``, ``create_milestone``,
                ``create_issue``
            plan: Entity kinds to migrate, all by default

        Returns:
            Migration summary
        """
        plan = plan or MigrationPlan()
        summary = MigrationSummary(started_at=datetime.now())

        batches = {
            LABELS: (source.list_labels, lambda l: l.name, destination.create_label),
            MILESTONES: (
                source.list_milestones,
                lambda m: m.title,
                destination.create_milestone,
            ),
            ISSUES: (source.list_issues, lambda i: i.title, destination.create_issue),
        }

        for entity_kind in EXECUTION_ORDER:
            if not plan.includes(entity_kind):
                self.logger.info(f'Skipping {entity_kind.lower()} (disabled in plan)')
                continue

            fetch_all, display_key, create = batches[entity_kind]
            summary.batches.append(self.run(entity_kind, fetch_all, display_key, create))

        summary.completed_at = datetime.now()

        self.logger.info(
            f'Migration completed: {summary.successful_migrations} successful, '
            f'{summary.failed_migrations} failed'
        )
        return summary
