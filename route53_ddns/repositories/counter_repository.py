"""Abuse counter and lockout repository for DynamoDB operations."""

from typing import Any, Optional

from botocore.exceptions import ClientError

from route53_ddns.exceptions import StoreError
from route53_ddns.models.limits import LockoutState
from route53_ddns.repositories.base import BaseRepository, is_conditional_check_failure

RATE_LIMIT_PARTITION_KEY = "RATELIMIT"
LOCKOUT_PARTITION_KEY = "LOCKOUT"


class CounterRepository(BaseRepository):
    """
    Shared counters for rate limiting and brute-force lockout.

    Every mutation is a single conditional UpdateItem so counting stays
    correct across concurrent Lambda invocations without in-process locks.
    """

    @staticmethod
    def _rate_key(key: str) -> dict[str, str]:
        return {"PK": RATE_LIMIT_PARTITION_KEY, "SK": key}

    @staticmethod
    def _lockout_key(key: str) -> dict[str, str]:
        return {"PK": LOCKOUT_PARTITION_KEY, "SK": key}

    async def increment(self, key: str, window_start: int, expires_at: int) -> int:
        """
        Atomically count one request in the fixed window starting at window_start.

        The counter item carries the start of its window. Increments only
        apply while that matches; a stale window is reset to 1 only if no
        concurrent request has already opened the new window, in which
        case the increment is retried against it.

        Args:
            key: Limiter key
            window_start: Unix timestamp of the current window boundary
            expires_at: Unix timestamp for TTL

        Returns:
            The request count within the current window
        """
        names = {"#count": "count", "#expires_at": "expires_at"}

        for _ in range(2):
            try:
                attributes = await self.update_item(
                    self._rate_key(key),
                    "ADD #count :one SET #expires_at = :expires_at",
                    {
                        ":one": 1,
                        ":window_start": window_start,
                        ":expires_at": expires_at,
                    },
                    expression_names=names,
                    condition_expression="window_start = :window_start",
                )
                return int(attributes["count"])
            except ClientError as exc:
                if not is_conditional_check_failure(exc):
                    raise

            try:
                await self.update_item(
                    self._rate_key(key),
                    "SET #count = :one, window_start = :window_start, "
                    "#expires_at = :expires_at",
                    {
                        ":one": 1,
                        ":window_start": window_start,
                        ":expires_at": expires_at,
                    },
                    expression_names=names,
                    condition_expression=(
                        "attribute_not_exists(window_start) "
                        "OR window_start < :window_start"
                    ),
                )
                return 1
            except ClientError as exc:
                if not is_conditional_check_failure(exc):
                    raise
                # Another request opened this window first; count against it

        raise StoreError(
            message=f"Could not increment rate counter for {key}",
            details={"key": key},
        )

    async def get_lockout(self, key: str) -> Optional[LockoutState]:
        """
        Get lockout state for a client key.

        Args:
            key: Lockout key

        Returns:
            LockoutState if any failures are tracked, None otherwise
        """
        item = await self.get_item(self._lockout_key(key))
        if not item:
            return None
        return self._deserialize_lockout(item)

    async def add_failure(self, key: str, now: int, expires_at: int) -> LockoutState:
        """
        Atomically record one authentication failure.

        Args:
            key: Lockout key
            now: Unix timestamp of the attempt
            expires_at: Unix timestamp for TTL

        Returns:
            Lockout state after the increment
        """
        attributes = await self.update_item(
            self._lockout_key(key),
            "ADD failed_count :one "
            "SET last_attempt = :now, #expires_at = :expires_at, "
            "locked_until = if_not_exists(locked_until, :zero)",
            {":one": 1, ":now": now, ":expires_at": expires_at, ":zero": 0},
            expression_names={"#expires_at": "expires_at"},
        )
        return self._deserialize_lockout(attributes)

    async def lock(
        self, key: str, locked_until: int, threshold: int, expires_at: int
    ) -> bool:
        """
        Set a lockout and reset the failure counter.

        Only the request that observes the counter at or above threshold
        wins; concurrent losers see the condition fail.

        Args:
            key: Lockout key
            locked_until: Unix timestamp the lockout ends
            threshold: Failure count that triggers the lockout
            expires_at: Unix timestamp for TTL

        Returns:
            True if this call set the lockout
        """
        try:
            await self.update_item(
                self._lockout_key(key),
                "SET locked_until = :locked_until, failed_count = :zero, "
                "#expires_at = :expires_at",
                {
                    ":locked_until": locked_until,
                    ":zero": 0,
                    ":threshold": threshold,
                    ":expires_at": expires_at,
                },
                expression_names={"#expires_at": "expires_at"},
                condition_expression="failed_count >= :threshold",
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                return False
            raise
        return True

    async def clear_lockout(self, key: str) -> None:
        """
        Clear failures and any lockout for a client key.

        Args:
            key: Lockout key
        """
        await self.delete_item(self._lockout_key(key))

    def _deserialize_lockout(self, item: dict[str, Any]) -> LockoutState:
        return LockoutState(
            key=item["SK"],
            failed_count=int(item.get("failed_count", 0)),
            last_attempt=int(item.get("last_attempt", 0)),
            locked_until=int(item.get("locked_until", 0)),
            expires_at=int(item.get("expires_at", 0)),
        )
