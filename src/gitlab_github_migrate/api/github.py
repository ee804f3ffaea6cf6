"""GitHub API client (destination writer)."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import requests
from loguru import logger

from ..config.config import GitHubDestinationConfig
from ..models import IssueCreate, LabelCreate, MilestoneCreate, QuotaStatus
from .client import RESTClient
from .exceptions import AuthenticationError, RateLimitError, SecondaryRateLimitError

RATE_LIMIT_STATUSES = (403, 429)


class GitHubClient(RESTClient):
    """GitHub REST API client scoped to one repository."""

    def __init__(self, config: GitHubDestinationConfig):
        """Initialize GitHub client.

        Args:
            config: GitHub destination configuration
        """
        if not config.token:
            raise AuthenticationError('No GitHub authentication token provided')

        super().__init__(
            config.api_url,
            headers={
                'Authorization': f'Bearer {config.token}',
                'Accept': 'application/vnd.github+json',
                'X-GitHub-Api-Version': '2022-11-28',
            },
            timeout=config.timeout,
        )
        self.config = config
        self.owner = config.owner
        self.repo = config.repo

        logger.info(f'Initialized GitHub client for {self.owner}/{self.repo}')

    @property
    def repo_path(self) -> str:
        return f'/repos/{self.owner}/{self.repo}'

    def _raise_for_status(self, response: requests.Response, message: str) -> None:
        """Classify GitHub's primary and secondary rate limit responses."""
        if response.status_code not in RATE_LIMIT_STATUSES:
            return

        headers = response.headers
        if headers.get('X-RateLimit-Remaining') == '0':
            reset_at = None
            if headers.get('X-RateLimit-Reset'):
                reset_at = datetime.fromtimestamp(
                    int(headers['X-RateLimit-Reset']), tz=timezone.utc
                )
            raise RateLimitError(
                f'Rate limit exceeded: {message}',
                reset_at=reset_at,
                status_code=response.status_code,
            )

        if 'secondary rate limit' in message.lower() or 'Retry-After' in headers:
            retry_after = int(headers.get('Retry-After', 60))
            raise SecondaryRateLimitError(
                f'Secondary rate limit exceeded: {message}',
                retry_after=retry_after,
                status_code=response.status_code,
            )

    def get_all(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Follow ``Link: rel="next"`` headers and collect every item."""
        params = dict(params or {})
        params.setdefault('per_page', 100)

        items = []
        response = self.get(endpoint, params=params)
        while True:
            items.extend(response.data or [])
            if not response.next_url:
                break
            # The next link already carries the query string
            response = self.get(response.next_url)

        return items

    def create_label(self, label: LabelCreate) -> Optional[Dict[str, Any]]:
        """Create a label, returning the created object."""
        response = self.post(
            f'{self.repo_path}/labels', data=label.model_dump(exclude_none=True)
        )
        return response.data or None

    def create_milestone(self, milestone: MilestoneCreate) -> Optional[int]:
        """Create a milestone, returning its number."""
        response = self.post(
            f'{self.repo_path}/milestones',
            data=milestone.model_dump(exclude_none=True),
        )
        return (response.data or {}).get('number')

    def create_issue(self, issue: IssueCreate) -> Optional[int]:
        """Create an issue, returning its number."""
        response = self.post(
            f'{self.repo_path}/issues', data=issue.model_dump(exclude_none=True)
        )
        return (response.data or {}).get('number')

    def close_issue(self, number: int) -> None:
        self.patch(f'{self.repo_path}/issues/{number}', data={'state': 'closed'})

    def list_milestones(self, state: str = 'all') -> List[Tuple[int, str]]:
        """List ``(number, title)`` pairs of the repository's milestones."""
        milestones = self.get_all(
            f'{self.repo_path}/milestones', params={'state': state}
        )
        return [(m['number'], m['title']) for m in milestones]

    def get_quota_status(self) -> QuotaStatus:
        """Query the core (primary) rate limit."""
        response = self.get('/rate_limit')
        return QuotaStatus.from_core(response.data['resources']['core'])
