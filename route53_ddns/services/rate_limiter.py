"""Rate limiting and brute-force lockout backed by shared DynamoDB counters."""

import time
from collections.abc import Callable
from typing import Optional, Tuple

from pydantic import BaseModel, Field

from route53_ddns.config import settings
from route53_ddns.exceptions import StoreError
from route53_ddns.logging.config import get_logger
from route53_ddns.repositories.counter_repository import CounterRepository
from route53_ddns.utils.timestamps import window_start

logger = get_logger(__name__)


class RateLimitStatus(BaseModel):
    """Result of counting one request against a fixed window."""

    allowed: bool = Field(..., description="Request is within the limit")
    limit: int = Field(..., description="Requests permitted per window")
    remaining: int = Field(..., ge=0, description="Requests left in this window")
    reset_at: int = Field(..., description="Unix timestamp the window resets")
    retry_after: int = Field(..., ge=1, description="Seconds until the window resets")


class AbuseLimiter:
    """
    Fixed-window request limiter and consecutive-failure lockout tracker.

    State lives in the shared table so limits hold across process
    instances. The checking methods fail open: a storage error is logged
    and the request is treated as not limited. The raw increment and
    failure-recording calls raise StoreError for callers that need it.
    """

    def __init__(
        self,
        repository: CounterRepository | None = None,
        limit: int | None = None,
        window_seconds: int | None = None,
        lockout_threshold: int | None = None,
        lockout_duration_seconds: int | None = None,
        lockout_record_ttl_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize AbuseLimiter.

        Args:
            repository: CounterRepository instance (creates new if None)
            limit: Requests permitted per window
            window_seconds: Fixed window length
            lockout_threshold: Consecutive failures that trigger a lockout
            lockout_duration_seconds: Lockout length
            lockout_record_ttl_seconds: Retention of failure counters
            clock: Unix time source
        """
        self.repository = repository or CounterRepository()
        self.limit = limit or settings.rate_limit_per_window
        self.window_seconds = window_seconds or settings.rate_limit_window_seconds
        self.lockout_threshold = lockout_threshold or settings.lockout_threshold
        self.lockout_duration_seconds = (
            lockout_duration_seconds or settings.lockout_duration_seconds
        )
        self.lockout_record_ttl_seconds = (
            lockout_record_ttl_seconds or settings.lockout_record_ttl_seconds
        )
        self._clock = clock

    async def increment(self, key: str) -> Tuple[int, int]:
        """
        Count one request for key in the current window.

        Args:
            key: Limiter key

        Returns:
            Tuple of (count in current window, unix time the window resets)

        Raises:
            StoreError: If the counter could not be updated
        """
        start = window_start(self._clock(), self.window_seconds)
        reset_at = start + self.window_seconds
        count = await self.repository.increment(
            key, start, expires_at=reset_at + self.window_seconds
        )
        return count, reset_at

    async def check(self, key: str) -> Optional[RateLimitStatus]:
        """
        Count a request and decide whether it is within the limit.

        Args:
            key: Limiter key

        Returns:
            RateLimitStatus, or None if the limiter is unavailable (fail open)
        """
        try:
            count, reset_at = await self.increment(key)
        except StoreError as exc:
            logger.warning(
                "Rate limiter unavailable, allowing request",
                exc_info=exc,
                extra={"context": {"key": key}},
            )
            return None

        status = RateLimitStatus(
            allowed=count <= self.limit,
            limit=self.limit,
            remaining=max(0, self.limit - count),
            reset_at=reset_at,
            retry_after=max(1, reset_at - int(self._clock())),
        )
        if not status.allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"context": {"key": key, "count": count, "limit": self.limit}},
            )
        return status

    async def locked_until(self, key: str) -> int:
        """
        Return the unix time an active lockout ends, or 0 when not locked.

        Fails open: a storage error is logged and reported as not locked.
        """
        try:
            state = await self.repository.get_lockout(key)
        except StoreError as exc:
            logger.warning(
                "Lockout check unavailable, allowing request",
                exc_info=exc,
                extra={"context": {"key": key}},
            )
            return 0

        if state is None or not state.is_locked(self._clock()):
            return 0
        return state.locked_until

    async def is_locked_out(self, key: str) -> bool:
        """Return True while key is locked out."""
        return await self.locked_until(key) > 0

    async def record_auth_failure(self, key: str) -> Tuple[bool, int]:
        """
        Record a failed authentication and lock the key at the threshold.

        Reaching the threshold sets a lockout and resets the failure count,
        so failures do not compound while locked.

        Args:
            key: Lockout key

        Returns:
            Tuple of (now locked, unix time the lockout ends or 0)
        """
        now = int(self._clock())
        try:
            state = await self.repository.add_failure(
                key, now, expires_at=now + self.lockout_record_ttl_seconds
            )
            if state.failed_count < self.lockout_threshold:
                return False, 0

            locked_until = now + self.lockout_duration_seconds
            won = await self.repository.lock(
                key,
                locked_until,
                threshold=self.lockout_threshold,
                expires_at=max(locked_until, now + self.lockout_record_ttl_seconds),
            )
            if not won:
                # A concurrent failure set the lockout first; report its state
                winner = await self.repository.get_lockout(key)
                if winner is None or not winner.is_locked(now):
                    return False, 0
                return True, winner.locked_until
        except StoreError as exc:
            logger.warning(
                "Could not record authentication failure",
                exc_info=exc,
                extra={"context": {"key": key}},
            )
            return False, 0

        logger.warning(
            "Lockout triggered",
            extra={
                "context": {
                    "key": key,
                    "threshold": self.lockout_threshold,
                    "locked_until": locked_until,
                }
            },
        )
        return True, locked_until

    async def record_auth_success(self, key: str) -> None:
        """Clear failures and any lockout for key."""
        try:
            await self.repository.clear_lockout(key)
        except StoreError as exc:
            logger.warning(
                "Could not clear lockout state",
                exc_info=exc,
                extra={"context": {"key": key}},
            )
