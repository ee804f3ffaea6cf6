"""GitLab and GitHub API clients."""

from .client import APIResponse, RESTClient
from .gitlab import GitLabClient, GitLabReader
from .github import GitHubClient

__all__ = [
    'APIResponse',
    'RESTClient',
    'GitLabClient',
    'GitLabReader',
    'GitHubClient',
]
