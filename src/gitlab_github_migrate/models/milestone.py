"""Milestone entity models."""

from datetime import date, datetime, time, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Milestone(BaseModel):
    """GitLab project milestone."""

    id: Optional[int] = Field(default=None, description='Milestone ID')
    iid: Optional[int] = Field(default=None, description='Project-scoped ID')
    title: str = Field(..., description='Milestone title')
    description: Optional[str] = Field(
        default=None, description='Milestone description'
    )
    due_date: Optional[date] = Field(default=None, description='Due date')
    state: str = Field(default='active', description='Milestone state')

    @field_validator('state')
    @classmethod
    def validate_state(cls, v):
        """Validate milestone state."""
        valid_states = ['active', 'closed']
        if v not in valid_states:
            raise ValueError(f'State must be one of: {valid_states}')
        return v

    @property
    def is_active(self) -> bool:
        return self.state == 'active'


class MilestoneCreate(BaseModel):
    """Model for creating a milestone on GitHub."""

    title: str = Field(..., description='Milestone title')
    state: str = Field(default='open', description='open or closed')
    description: Optional[str] = Field(
        default=None, description='Milestone description'
    )
    due_on: Optional[str] = Field(
        default=None, description='ISO 8601 due timestamp (YYYY-MM-DDTHH:MM:SSZ)'
    )

    @field_validator('state')
    @classmethod
    def validate_state(cls, v):
        """Validate GitHub milestone state."""
        if v not in ('open', 'closed'):
            raise ValueError('State must be open or closed')
        return v

    @classmethod
    def from_gitlab(cls, milestone: Milestone) -> 'MilestoneCreate':
        """Build the GitHub payload for a GitLab milestone."""
        due_on = None
        if milestone.due_date is not None:
            due_on = (
                datetime.combine(milestone.due_date, time.min, tzinfo=timezone.utc)
                .isoformat()
                .replace('+00:00', 'Z')
            )

        return cls(
            title=milestone.title,
            state='open' if milestone.is_active else 'closed',
            description=milestone.description,
            due_on=due_on,
        )
