"""Rate limit governance for destination writes."""

import random
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from ..api.exceptions import QuotaExhaustedError
from ..models import QuotaStatus
from ..utils.progress import ProgressReporter

# Cooldown bounds as multiples of the base pause
COOLDOWN_MIN_FACTOR = 0.9
COOLDOWN_MAX_FACTOR = 5.5


class RateGovernor:
    """Waits on GitHub's primary quota and paces writes against the secondary limit.

    The primary quota is queryable and carries a reset timestamp. The
    secondary limit is undocumented and burst sensitive, so every issue write
    is followed by a randomized cooldown instead.
    """

    def __init__(
        self,
        quota_status: Callable[[], QuotaStatus],
        base_cooldown: float = 1.0,
        progress: Optional[ProgressReporter] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize rate governor.

        Args:
            quota_status: Queries the destination's primary quota
            base_cooldown: Base secondary cooldown in seconds
            progress: Progress reporter for wait notices
            sleep: Blocking sleep, injectable for tests
            clock: Returns the current UTC time, injectable for tests
            rng: Random source for cooldown durations
        """
        self.quota_status = quota_status
        self.base_cooldown = base_cooldown
        self.progress = progress
        self.sleep = sleep
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.rng = rng or random.Random()
        self.logger = logger.bind(component='RateGovernor')

    def check_quota(self) -> None:
        """Block until reset if the primary quota is spent.

        Raises:
            QuotaExhaustedError: After the wait, so the caller retries the
                whole operation against a fresh quota window
        """
        status = self.quota_status()
        if not status.exhausted:
            self.logger.debug(f'Primary quota: {status.remaining}/{status.limit}')
            return

        self.wait_until(status.reset_at, reason='Rate limit exceeded')
        raise QuotaExhaustedError(
            f'Primary quota exhausted until {status.reset_at.isoformat()}',
            reset_at=status.reset_at,
        )

    def wait_until(self, reset_at: Optional[datetime], reason: str) -> float:
        """Block until ``reset_at``. Returns the seconds slept."""
        if reset_at is None:
            return 0.0

        delay = (reset_at - self.clock()).total_seconds()
        if delay <= 0:
            return 0.0

        self.logger.warning(f'{reason}. Waiting {delay:.0f}s until {reset_at.isoformat()}')
        if self.progress:
            self.progress.waiting(delay, reason)
        self.sleep(delay)
        return delay

    def wait_for_reset(self, reason: str = 'Second rate limit exceeded') -> float:
        """Re-query the primary quota and block until its reset time."""
        status = self.quota_status()
        return self.wait_until(status.reset_at, reason=reason)

    def wait_seconds(self, seconds: float, reason: str) -> float:
        if seconds <= 0:
            return 0.0
        self.logger.warning(f'{reason}. Waiting {seconds:.0f}s')
        if self.progress:
            self.progress.waiting(seconds, reason)
        self.sleep(seconds)
        return seconds

    def cooldown_duration(self) -> float:
        return self.rng.uniform(
            self.base_cooldown * COOLDOWN_MIN_FACTOR,
            self.base_cooldown * COOLDOWN_MAX_FACTOR,
        )

    def cooldown(self) -> float:
        """Sleep a random duration in [0.9, 5.5] x base. Returns the duration."""
        duration = self.cooldown_duration()
        self.logger.debug(f'Cooling down for {duration:.2f}s')
        self.sleep(duration)
        return duration
