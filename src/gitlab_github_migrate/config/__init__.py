"""Configuration models."""

from .config import (
    Config,
    GitHubDestinationConfig,
    GitLabSourceConfig,
    LoggingConfig,
    MigrationConfig,
)

__all__ = [
    'Config',
    'GitHubDestinationConfig',
    'GitLabSourceConfig',
    'LoggingConfig',
    'MigrationConfig',
]
