"""Configuration management for the GitLab to GitHub migration tool."""

from typing import Optional, Dict, Any, Union
from pathlib import Path
import os

from pydantic import BaseModel, ConfigDict, Field, field_validator
import yaml
from dotenv import load_dotenv


class GitLabSourceConfig(BaseModel):
    """Configuration for the source GitLab project."""

    url: str = Field(..., description='GitLab instance URL')
    token: str = Field(..., description='Personal access token')
    project_id: Union[int, str] = Field(
        ..., description='Project ID or full path (namespace/project)'
    )
    timeout: int = Field(default=30, description='Request timeout in seconds')

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        """Validate GitLab URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @field_validator('token')
    @classmethod
    def validate_token(cls, v):
        """Reject empty tokens."""
        if not v.strip():
            raise ValueError('GitLab token must not be empty')
        return v

    @field_validator('project_id')
    @classmethod
    def validate_project_id(cls, v):
        """Accept numeric IDs given as strings."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError('GitLab project id must not be empty')
            if v.isdigit():
                return int(v)
        return v


class GitHubDestinationConfig(BaseModel):
    """Configuration for the destination GitHub repository."""

    owner: str = Field(..., description='Repository owner (user or organization)')
    repo: str = Field(..., description='Repository name')
    token: str = Field(..., description='Personal access token')
    api_url: str = Field(
        default='https://api.github.com', description='GitHub REST API base URL'
    )
    timeout: int = Field(default=30, description='Request timeout in seconds')

    @field_validator('owner', 'repo', 'token')
    @classmethod
    def validate_not_empty(cls, v, info):
        """Reject empty identifiers and tokens."""
        if not v.strip():
            raise ValueError(f'GitHub {info.field_name} must not be empty')
        return v.strip()

    @field_validator('api_url')
    @classmethod
    def validate_api_url(cls, v):
        """Validate API URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('API URL must start with http:// or https://')
        return v.rstrip('/')


class MigrationConfig(BaseModel):
    """Migration-specific configuration."""

    labels: bool = Field(default=True, description='Migrate labels')
    milestones: bool = Field(default=True, description='Migrate milestones')
    issues: bool = Field(default=True, description='Migrate issues')

    max_retry_attempts: int = Field(
        default=3, description='Maximum attempts per destination write'
    )
    secondary_pause_ms: int = Field(
        default=1000,
        description='Base cooldown after issue writes, in milliseconds',
    )
    check_quota_on_all_writes: bool = Field(
        default=True,
        description='Check the primary quota before label and milestone writes too',
    )
    strict_milestones: bool = Field(
        default=False,
        description='Fail an issue whose milestone cannot be found on GitHub',
    )

    dry_run: bool = Field(default=False, description='Perform dry run without changes')

    @field_validator('max_retry_attempts')
    @classmethod
    def validate_max_retry_attempts(cls, v):
        """Validate at least one attempt is made."""
        if v < 1:
            raise ValueError('Max retry attempts must be at least 1')
        return v

    @field_validator('secondary_pause_ms')
    @classmethod
    def validate_secondary_pause(cls, v):
        """Validate pause is not negative."""
        if v < 0:
            raise ValueError('Secondary pause must not be negative')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default='INFO', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: Optional[str] = Field(default=None, description='Console log format')

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class for the migration tool."""

    model_config = ConfigDict(extra='forbid')

    source: GitLabSourceConfig = Field(..., description='Source GitLab project')
    destination: GitHubDestinationConfig = Field(
        ..., description='Destination GitHub repository'
    )
    migration: MigrationConfig = Field(
        default_factory=MigrationConfig, description='Migration settings'
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if not isinstance(config_data, dict):
            raise ValueError(f'Configuration file is not a mapping: {config_path}')

        return cls(**config_data)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        # Load .env file if it exists
        load_dotenv()

        config_data = {
            'source': {
                'url': os.getenv('GITLAB_URL'),
                'token': os.getenv('GITLAB_TOKEN'),
                'project_id': os.getenv('GITLAB_PROJECT_ID'),
            },
            'destination': {
                'owner': os.getenv('GITHUB_OWNER'),
                'repo': os.getenv('GITHUB_REPO'),
                'token': os.getenv('GITHUB_TOKEN'),
                'api_url': os.getenv('GITHUB_API_URL'),
            },
            'migration': {
                'labels': os.getenv('MIGRATION_LABELS'),
                'milestones': os.getenv('MIGRATION_MILESTONES'),
                'issues': os.getenv('MIGRATION_ISSUES'),
                'max_retry_attempts': os.getenv('MIGRATION_MAX_RETRY_ATTEMPTS'),
                'secondary_pause_ms': os.getenv('MIGRATION_SECONDARY_PAUSE_MS'),
                'check_quota_on_all_writes': os.getenv(
                    'MIGRATION_CHECK_QUOTA_ON_ALL_WRITES'
                ),
                'strict_milestones': os.getenv('MIGRATION_STRICT_MILESTONES'),
                'dry_run': os.getenv('MIGRATION_DRY_RUN'),
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        # Remove None values
        config_data = cls._remove_none_values(config_data)

        return cls(**config_data)

    @staticmethod
    def _remove_none_values(data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    def to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                self.model_dump(),
                f,
                default_flow_style=False,
                indent=2,
                sort_keys=False,
            )

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file."""
        template_config = {
            'source': {
                'url': 'https://gitlab.example.com',
                'token': 'your-gitlab-personal-access-token',
                'project_id': 42,
                'timeout': 30,
            },
            'destination': {
                'owner': 'your-github-owner',
                'repo': 'your-github-repo',
                'token': 'your-github-personal-access-token',
                'api_url': 'https://api.github.com',
                'timeout': 30,
            },
            'migration': {
                'labels': True,
                'milestones': True,
                'issues': True,
                'max_retry_attempts': 3,
                'secondary_pause_ms': 1000,
                'check_quota_on_all_writes': True,
                'strict_milestones': False,
                'dry_run': False,
            },
            'logging': {
                'level': 'INFO',
                'file': 'migration.log',
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )
