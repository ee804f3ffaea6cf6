"""Shared REST API client implementation."""

from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests
from loguru import logger
from pydantic import BaseModel

from .. import __version__
from .exceptions import (
    APIError,
    AuthenticationError,
    NotFoundError,
    ValidationError,
)

USER_AGENT = f'gitlab-github-migrate/{__version__}'


class APIResponse(BaseModel):
    """Standard API response wrapper."""

    status_code: int
    data: Any
    headers: Dict[str, str]
    success: bool
    next_url: Optional[str] = None


class RESTClient:
    """Base client holding an authenticated requests session."""

    def __init__(self, base_url: str, headers: Dict[str, str], timeout: int = 30):
        """Initialize REST client.

        Args:
            base_url: API root, requests are resolved against it
            headers: Authentication and content headers for every request
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({'User-Agent': USER_AGENT})
        self.session.headers.update(headers)

    def _build_url(self, endpoint: str) -> str:
        """Build full API URL from endpoint.

        Args:
            endpoint: API endpoint path, or an absolute URL (pagination links)

        Returns:
            Full API URL
        """
        if endpoint.startswith(('http://', 'https://')):
            return endpoint
        return urljoin(self.base_url + '/', endpoint.lstrip('/'))

    def _raise_for_status(self, response: requests.Response, message: str) -> None:
        """Hook for service-specific error classification.

        Called before the generic mapping for every response with status >= 400.
        """

    def _handle_response(self, response: requests.Response) -> APIResponse:
        """Handle API response and convert to standard format.

        Args:
            response: Raw HTTP response

        Returns:
            Standardized API response

        Raises:
            APIError: For various API errors
        """
        headers = dict(response.headers)

        if response.status_code >= 400:
            error_data = None
            try:
                error_data = response.json()
                message = error_data.get('message', f'HTTP {response.status_code}')
            except (ValueError, AttributeError):
                message = f'HTTP {response.status_code}: {response.text}'

            self._raise_for_status(response, str(message))

            if response.status_code == 401:
                raise AuthenticationError(
                    'Authentication failed', status_code=401, response_data=error_data
                )

            if response.status_code == 404:
                raise NotFoundError(
                    'Resource not found', status_code=404, response_data=error_data
                )

            if response.status_code == 422:
                raise ValidationError(
                    f'Validation failed: {message}',
                    status_code=422,
                    response_data=error_data,
                )

            raise APIError(
                f'API request failed: {message}',
                status_code=response.status_code,
                response_data=error_data,
            )

        # Parse response data
        try:
            data = response.json() if response.content else None
        except ValueError:
            data = response.text

        return APIResponse(
            status_code=response.status_code,
            data=data,
            headers=headers,
            success=200 <= response.status_code < 300,
            next_url=self._next_page_url(response),
        )

    def _next_page_url(self, response: requests.Response) -> Optional[str]:
        """Return the URL of the next page, if the service paginates with links."""
        links = getattr(response, 'links', None) or {}
        if not isinstance(links, dict):
            return None
        return links.get('next', {}).get('url')

    def _request(self, method: str, endpoint: str, **kwargs) -> APIResponse:
        url = self._build_url(endpoint)
        kwargs.setdefault('timeout', self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f'Network error during {method} request: {e}')
            raise APIError(f'Network error: {e}')

        return self._handle_response(response)

    def get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs
    ) -> APIResponse:
        """Make GET request.

        Args:
            endpoint: API endpoint
            params: Query parameters
            **kwargs: Additional request arguments

        Returns:
            API response
        """
        return self._request('GET', endpoint, params=params, **kwargs)

    def post(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None, **kwargs
    ) -> APIResponse:
        """Make POST request.

        Args:
            endpoint: API endpoint
            data: Request body data
            **kwargs: Additional request arguments

        Returns:
            API response
        """
        return self._request('POST', endpoint, json=data, **kwargs)

    def patch(
        self, endpoint: str, data: Optional[Dict[str, Any]] = None, **kwargs
    ) -> APIResponse:
        """Make PATCH request.

        Args:
            endpoint: API endpoint
            data: Request body data
            **kwargs: Additional request arguments

        Returns:
            API response
        """
        return self._request('PATCH', endpoint, json=data, **kwargs)

    def test_connection(self) -> bool:
        """Test connection to the service.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            response = self.get('/user')
            return response.success
        except Exception as e:
            logger.error(f'Connection test failed: {e}')
            return False

    def close(self):
        """Close the client session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
