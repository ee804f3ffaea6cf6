"""API and migration exceptions."""

from datetime import datetime
from typing import Optional


class APIError(Exception):
    """Base exception for GitLab and GitHub API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[dict] = None,
    ):
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_data: Response data from API
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class AuthenticationError(APIError):
    """Authentication error with the API."""

    pass


class NotFoundError(APIError):
    """Resource not found error."""

    pass


class ValidationError(APIError):
    """Validation error for API requests (duplicate names, bad payloads)."""

    pass


class RateLimitError(APIError):
    """Primary rate limit exceeded by a response."""

    def __init__(self, message: str, reset_at: Optional[datetime] = None, **kwargs):
        """Initialize rate limit error.

        Args:
            message: Error message
            reset_at: UTC time at which the quota resets
            **kwargs: Additional arguments for base class
        """
        super().__init__(message, **kwargs)
        self.reset_at = reset_at


class SecondaryRateLimitError(APIError):
    """Secondary (abuse) rate limit exceeded."""

    def __init__(self, message: str, retry_after: int = 60, **kwargs):
        """Initialize secondary rate limit error.

        Args:
            message: Error message
            retry_after: Seconds suggested by the server before retrying
            **kwargs: Additional arguments for base class
        """
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class QuotaExhaustedError(Exception):
    """Raised after waiting out an exhausted primary quota, to force a retry."""

    def __init__(self, message: str, reset_at: Optional[datetime] = None):
        super().__init__(message)
        self.reset_at = reset_at


class UnresolvedMilestoneError(Exception):
    """Issue references a milestone that does not exist on the destination."""

    def __init__(self, title: str):
        super().__init__(f'Milestone not found on destination: {title}')
        self.title = title


class ConfigurationError(Exception):
    """Configuration is missing or malformed."""

    pass
