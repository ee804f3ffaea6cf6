"""Placeholder for source data that could not be parsed."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class InvalidSourceItem(BaseModel):
    """A GitLab record rejected by its model.

    Kept in the fetched collection so the item is listed and counted as
    failed instead of silently disappearing from the batch.
    """

    resource: str = Field(..., description='GitLab resource, e.g. labels')
    data: Dict[str, Any] = Field(default_factory=dict, description='Raw record')
    error: str = Field(..., description='Validation problems, one line')

    @property
    def display_key(self) -> str:
        for key in ('name', 'title'):
            if self.data.get(key):
                return str(self.data[key])
        for key in ('iid', 'id'):
            if self.data.get(key) is not None:
                return f'#{self.data[key]}'
        return '<unknown>'
