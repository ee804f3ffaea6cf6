"""GitLab API client and source reader."""

from typing import Any, Dict, List, Optional, Type, TypeVar, Union
from urllib.parse import quote

from loguru import logger
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..config.config import GitLabSourceConfig
from ..models import InvalidSourceItem, Issue, Label, Milestone
from .client import RESTClient
from .exceptions import AuthenticationError

ModelType = TypeVar('ModelType', bound=BaseModel)


class GitLabClient(RESTClient):
    """GitLab REST API v4 client."""

    def __init__(self, config: GitLabSourceConfig):
        """Initialize GitLab client.

        Args:
            config: GitLab source configuration
        """
        if not config.token:
            raise AuthenticationError('No GitLab authentication token provided')

        super().__init__(
            config.url + '/api/v4',
            headers={
                'Private-Token': config.token,
                'Content-Type': 'application/json',
            },
            timeout=config.timeout,
        )
        self.config = config

        logger.info(f'Initialized GitLab client for {config.url}')

    def get_paginated(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        per_page: int = 100,
    ) -> List[Dict[str, Any]]:
        """Get all pages of a paginated endpoint.

        Args:
            endpoint: API endpoint
            params: Query parameters
            per_page: Items per page

        Returns:
            List of all items from all pages
        """
        all_items = []
        page = 1

        params = dict(params or {})
        params['per_page'] = per_page

        while True:
            params['page'] = page
            response = self.get(endpoint, params=params)

            items = response.data
            if not items:
                break

            all_items.extend(items)

            total_pages = response.headers.get('X-Total-Pages')
            if total_pages and page >= int(total_pages):
                break

            if len(items) < per_page:
                break

            page += 1

        logger.debug(f'Retrieved {len(all_items)} items from {endpoint}')
        return all_items


class GitLabReader:
    """Reads the labels, milestones and issues of one GitLab project."""

    def __init__(self, client: GitLabClient, project_id: Union[int, str]):
        self.client = client
        self.project_id = project_id
        self.logger = logger.bind(component='GitLabReader')

    @property
    def project_path(self) -> str:
        return f'/projects/{quote(str(self.project_id), safe="")}'

    def list_labels(self) -> List[Union[Label, InvalidSourceItem]]:
        return self._list('labels', Label)

    def list_milestones(self) -> List[Union[Milestone, InvalidSourceItem]]:
        return self._list('milestones', Milestone)

    def list_issues(self) -> List[Union[Issue, InvalidSourceItem]]:
        """List every issue, oldest first, open and closed alike."""
        return self._list(
            'issues',
            Issue,
            params={'scope': 'all', 'state': 'all', 'order_by': 'created_at', 'sort': 'asc'},
        )

    def _list(
        self,
        resource: str,
        model: Type[ModelType],
        params: Optional[Dict[str, Any]] = None,
    ) -> List[Union[ModelType, InvalidSourceItem]]:
        """Fetch and parse one collection.

        Records the model rejects stay in the result, in source order, as
        ``InvalidSourceItem`` so they are reported and counted as failures.
        """
        items_data = self.client.get_paginated(
            f'{self.project_path}/{resource}', params=params
        )

        items = []
        invalid = 0
        for item_data in items_data:
            try:
                items.append(model(**item_data))
            except PydanticValidationError as e:
                item = InvalidSourceItem(
                    resource=resource, data=item_data, error=_summarize(e)
                )
                self.logger.warning(
                    f'Failed to parse {resource[:-1]} {item.display_key!r}: {item.error}'
                )
                items.append(item)
                invalid += 1

        self.logger.info(
            f'Fetched {len(items)} {resource} from GitLab ({invalid} invalid)'
        )
        return items


def _summarize(error: PydanticValidationError) -> str:
    return '; '.join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
        for err in error.errors()
    )
