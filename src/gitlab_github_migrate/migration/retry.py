"""Bounded retry of destination writes."""

from typing import Callable, Optional

from loguru import logger

from ..api.exceptions import (
    QuotaExhaustedError,
    RateLimitError,
    SecondaryRateLimitError,
)
from ..utils.progress import ProgressReporter
from .rate_governor import RateGovernor

DEFAULT_MAX_ATTEMPTS = 3


class RetryPolicy:
    """Runs an operation up to ``max_attempts`` times.

    Every exception counts as one failed attempt. Rate limit failures block
    before the next attempt; anything else is retried straight away. When
    the attempts run out the failure is reported and swallowed: the caller
    gets ``False`` and moves on to the next item.
    """

    def __init__(
        self,
        governor: RateGovernor,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        progress: Optional[ProgressReporter] = None,
    ):
        if max_attempts < 1:
            raise ValueError('max_attempts must be at least 1')

        self.governor = governor
        self.max_attempts = max_attempts
        self.progress = progress
        self.last_error: Optional[Exception] = None
        self.logger = logger.bind(component='RetryPolicy')

    def invoke(self, operation: Callable[[], None], description: str = 'operation') -> bool:
        """Run ``operation`` until it succeeds or the attempts are spent.

        Args:
            operation: Re-run from the top on every attempt, so it must be
                safe to repeat
            description: Used in log messages

        Returns:
            True if an attempt succeeded, False once retries are exhausted
        """
        self.last_error = None
        attempts = 0

        while True:
            try:
                operation()
                return True
            except Exception as e:
                attempts += 1
                self.last_error = e

                if attempts >= self.max_attempts:
                    self.logger.error(
                        f'Giving up on {description} after {attempts} attempts: {e}'
                    )
                    if self.progress:
                        self.progress.failure(self.describe(e))
                    return False

                self.logger.warning(
                    f'{description} failed (attempt {attempts}/{self.max_attempts}): {e}'
                )
                self._handle_failure(e)

    def _handle_failure(self, error: Exception) -> None:
        """Block as the failure kind requires before the next attempt."""
        if isinstance(error, QuotaExhaustedError):
            # The governor already waited out the reset
            return

        if isinstance(error, RateLimitError):
            self.governor.wait_until(error.reset_at, reason='Rate limit exceeded')
            return

        if isinstance(error, SecondaryRateLimitError):
            try:
                self.governor.wait_for_reset()
            except Exception as e:
                self.logger.warning(
                    f'Could not query quota reset ({e}); '
                    f'falling back to Retry-After of {error.retry_after}s'
                )
                self.governor.wait_seconds(
                    error.retry_after, reason='Second rate limit exceeded'
                )

    @staticmethod
    def describe(error: Exception) -> str:
        return str(error) or error.__class__.__name__
