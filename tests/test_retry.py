"""Tests for the retry policy."""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from gitlab_github_migrate.api.exceptions import (
    APIError,
    QuotaExhaustedError,
    RateLimitError,
    SecondaryRateLimitError,
)
from gitlab_github_migrate.migration.rate_governor import RateGovernor
from gitlab_github_migrate.migration.retry import RetryPolicy
from gitlab_github_migrate.models import QuotaStatus

from fakes import START


class TestRetryPolicy:
    """Test attempt bounds and failure classification."""

    def setup_method(self):
        """Set up test fixtures."""
        self.governor = Mock(spec=RateGovernor)
        self.progress = Mock()
        self.policy = RetryPolicy(self.governor, max_attempts=3, progress=self.progress)

    def test_first_attempt_success_invokes_once(self):
        """Test a successful operation runs exactly once."""
        operation = Mock()

        assert self.policy.invoke(operation) is True
        operation.assert_called_once()
        self.progress.failure.assert_not_called()

    def test_success_after_generic_failures(self):
        """Test generic failures are retried without waiting."""
        operation = Mock(side_effect=[APIError('boom'), APIError('boom'), None])

        assert self.policy.invoke(operation) is True
        assert operation.call_count == 3
        self.governor.wait_until.assert_not_called()
        self.governor.wait_for_reset.assert_not_called()

    def test_exhaustion_stops_at_max_attempts(self):
        """Test an always-failing operation runs max_attempts times and reports."""
        operation = Mock(side_effect=ValueError('payload rejected'))

        assert self.policy.invoke(operation) is False
        assert operation.call_count == 3
        self.progress.failure.assert_called_once_with('payload rejected')
        assert isinstance(self.policy.last_error, ValueError)

    def test_exhaustion_does_not_raise(self):
        """Test the terminal failure is swallowed."""
        operation = Mock(side_effect=RuntimeError('nope'))

        # Must not raise
        self.policy.invoke(operation)

    def test_exhaustion_message_falls_back_to_class_name(self):
        """Test an exception without a message still reports something."""
        operation = Mock(side_effect=RuntimeError())

        self.policy.invoke(operation)

        self.progress.failure.assert_called_once_with('RuntimeError')

    def test_single_attempt_policy(self):
        """Test max_attempts=1 never retries."""
        policy = RetryPolicy(self.governor, max_attempts=1, progress=self.progress)
        operation = Mock(side_effect=RateLimitError('limit', reset_at=START))

        assert policy.invoke(operation) is False
        operation.assert_called_once()
        self.governor.wait_until.assert_not_called()

    def test_invalid_max_attempts(self):
        """Test max_attempts below one is rejected."""
        with pytest.raises(ValueError):
            RetryPolicy(self.governor, max_attempts=0)

    def test_rate_limit_error_waits_until_reset(self):
        """Test a primary rate limit response waits for its reset time."""
        reset_at = START + timedelta(minutes=5)
        operation = Mock(side_effect=[RateLimitError('limit', reset_at=reset_at), None])

        assert self.policy.invoke(operation) is True
        self.governor.wait_until.assert_called_once_with(
            reset_at, reason='Rate limit exceeded'
        )

    def test_secondary_rate_limit_waits_for_primary_reset(self):
        """Test a secondary throttle re-queries the quota reset."""
        operation = Mock(side_effect=[SecondaryRateLimitError('slow down'), None])

        assert self.policy.invoke(operation) is True
        self.governor.wait_for_reset.assert_called_once()
        self.governor.wait_seconds.assert_not_called()

    def test_secondary_rate_limit_falls_back_to_retry_after(self):
        """Test Retry-After is used when the quota cannot be queried."""
        self.governor.wait_for_reset.side_effect = APIError('quota unavailable')
        operation = Mock(
            side_effect=[SecondaryRateLimitError('slow down', retry_after=42), None]
        )

        assert self.policy.invoke(operation) is True
        self.governor.wait_seconds.assert_called_once_with(
            42, reason='Second rate limit exceeded'
        )

    def test_quota_exhausted_retries_without_second_wait(self):
        """Test the pre-check already waited, so no extra wait happens."""
        operation = Mock(side_effect=[QuotaExhaustedError('spent'), None])

        assert self.policy.invoke(operation) is True
        assert operation.call_count == 2
        self.governor.wait_until.assert_not_called()
        self.governor.wait_for_reset.assert_not_called()

    def test_quota_exhaustion_consumes_an_attempt(self):
        """Test each quota wait counts against the attempt bound."""
        operation = Mock(side_effect=QuotaExhaustedError('spent'))

        assert self.policy.invoke(operation) is False
        assert operation.call_count == 3

    def test_no_wait_after_final_attempt(self):
        """Test rate limit handling is skipped once attempts are exhausted."""
        operation = Mock(side_effect=RateLimitError('limit', reset_at=START))

        self.policy.invoke(operation)

        # Waits happen between attempts only
        assert self.governor.wait_until.call_count == 2

    def test_last_error_reset_between_invocations(self):
        """Test a later success clears the previous failure."""
        self.policy.invoke(Mock(side_effect=RuntimeError('x')))
        self.policy.invoke(Mock())

        assert self.policy.last_error is None


class TestQuotaCheckedWrite:
    """Test a quota-checked operation against a real governor and fake clock."""

    def test_second_attempt_happens_after_reset(self, github, clock, governor, retry):
        """Test remaining=0 blocks until reset_at before the retried write."""
        reset_at = START + timedelta(seconds=900)
        github.quota_statuses = [
            QuotaStatus(limit=5000, remaining=0, reset_at=reset_at),
            QuotaStatus(limit=5000, remaining=5000, reset_at=reset_at + timedelta(hours=1)),
        ]
        write_times = []

        def operation():
            governor.check_quota()
            write_times.append(clock())

        assert retry.invoke(operation) is True
        assert write_times == [reset_at]
        assert clock.sleeps == [900]
