"""Label entity models."""

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

_HEX_COLOR = re.compile(r'^[0-9a-fA-F]{6}$')


class Label(BaseModel):
    """GitLab project label."""

    id: Optional[int] = Field(default=None, description='Label ID')
    name: str = Field(..., description='Label name, unique within a project')
    color: str = Field(..., description='Hex color, e.g. #428BCA')
    description: Optional[str] = Field(default=None, description='Label description')

    @field_validator('color')
    @classmethod
    def validate_color(cls, v):
        """Validate hex color format."""
        if not _HEX_COLOR.match(v.lstrip('#')):
            raise ValueError(f'Color must be a hex triplet: {v}')
        return v


class LabelCreate(BaseModel):
    """Model for creating a label on GitHub."""

    name: str = Field(..., description='Label name')
    color: str = Field(..., description='Hex color without leading #')
    description: Optional[str] = Field(default=None, description='Label description')

    @field_validator('color')
    @classmethod
    def strip_hash(cls, v):
        """GitHub rejects colors with a leading #."""
        return v.lstrip('#').lower()

    @classmethod
    def from_gitlab(cls, label: Label) -> 'LabelCreate':
        """Build the GitHub payload for a GitLab label."""
        return cls(name=label.name, color=label.color, description=label.description)
