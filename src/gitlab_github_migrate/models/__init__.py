"""Data models for migrated entities."""

from .label import Label, LabelCreate
from .milestone import Milestone, MilestoneCreate
from .issue import Issue, IssueCreate, MilestoneRef
from .quota import QuotaStatus
from .invalid import InvalidSourceItem

__all__ = [
    'Label',
    'LabelCreate',
    'Milestone',
    'MilestoneCreate',
    'Issue',
    'IssueCreate',
    'MilestoneRef',
    'QuotaStatus',
    'InvalidSourceItem',
]
