"""Migration engine, orchestrator and write policies."""

from .milestone_index import MilestoneIndex
from .rate_governor import RateGovernor
from .retry import RetryPolicy
from .destination import DryRunDestination, GitHubDestination
from .orchestrator import (
    BatchResult,
    MigrationOrchestrator,
    MigrationPlan,
    MigrationSummary,
)
from .engine import MigrationEngine

__all__ = [
    'MilestoneIndex',
    'RateGovernor',
    'RetryPolicy',
    'DryRunDestination',
    'GitHubDestination',
    'BatchResult',
    'MigrationOrchestrator',
    'MigrationPlan',
    'MigrationSummary',
    'MigrationEngine',
]
