"""Destination rate limit status."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class QuotaStatus(BaseModel):
    """Primary rate limit status reported by GitHub."""

    limit: int = Field(default=0, description='Requests allowed per window')
    remaining: int = Field(..., description='Requests left in the current window')
    reset_at: datetime = Field(..., description='UTC time the window resets')

    @classmethod
    def from_core(cls, core: dict) -> 'QuotaStatus':
        """Build from the ``resources.core`` object of ``GET /rate_limit``."""
        return cls(
            limit=core.get('limit', 0),
            remaining=core['remaining'],
            reset_at=datetime.fromtimestamp(int(core['reset']), tz=timezone.utc),
        )

    @property
    def exhausted(self) -> bool:
        return self.remaining <= 0
