"""Issue entity models."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class MilestoneRef(BaseModel):
    """Milestone reference embedded in a GitLab issue."""

    id: Optional[int] = Field(default=None, description='Milestone ID')
    title: str = Field(..., description='Milestone title')


class Issue(BaseModel):
    """GitLab project issue."""

    id: Optional[int] = Field(default=None, description='Issue ID')
    iid: Optional[int] = Field(default=None, description='Project-scoped ID')
    title: str = Field(..., description='Issue title')
    description: Optional[str] = Field(default=None, description='Issue body')
    labels: List[str] = Field(default_factory=list, description='Label names')
    milestone: Optional[MilestoneRef] = Field(
        default=None, description='Milestone the issue belongs to'
    )
    state: str = Field(default='opened', description='Issue state')

    @field_validator('labels', mode='before')
    @classmethod
    def validate_labels(cls, v):
        """GitLab may return null instead of an empty list."""
        return v or []

    @field_validator('state')
    @classmethod
    def validate_state(cls, v):
        """Validate issue state."""
        valid_states = ['opened', 'closed']
        if v not in valid_states:
            raise ValueError(f'State must be one of: {valid_states}')
        return v

    @property
    def is_closed(self) -> bool:
        return self.state == 'closed'

    @property
    def milestone_title(self) -> Optional[str]:
        return self.milestone.title if self.milestone else None


class IssueCreate(BaseModel):
    """Model for creating an issue on GitHub."""

    title: str = Field(..., description='Issue title')
    body: Optional[str] = Field(default=None, description='Issue body')
    labels: List[str] = Field(default_factory=list, description='Label names')
    milestone: Optional[int] = Field(
        default=None, description='Destination milestone number'
    )

    @classmethod
    def from_gitlab(
        cls, issue: Issue, milestone_number: Optional[int] = None
    ) -> 'IssueCreate':
        """Build the GitHub payload for a GitLab issue."""
        return cls(
            title=issue.title,
            body=issue.description,
            labels=list(issue.labels),
            milestone=milestone_number,
        )
