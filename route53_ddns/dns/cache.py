"""Short-lived cache for hosted zone listings."""

import time
from collections.abc import Callable
from typing import List, Optional

from route53_ddns.dns.base import HostedZone


class ZoneCache:
    """
    Holds the most recent zone listing until it expires.

    Owned by whoever constructs the DNS backend; there is no module-level
    instance.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize zone cache.

        Args:
            ttl_seconds: Seconds a listing stays valid
            clock: Monotonic time source
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._zones: Optional[List[HostedZone]] = None
        self._expires_at = 0.0

    def get(self) -> Optional[List[HostedZone]]:
        """Return the cached listing, or None if empty or expired."""
        if self._zones is None:
            return None
        if self._clock() >= self._expires_at:
            self.invalidate()
            return None
        return list(self._zones)

    def set(self, zones: List[HostedZone]) -> None:
        """Store a fresh listing."""
        self._zones = list(zones)
        self._expires_at = self._clock() + self.ttl_seconds

    def invalidate(self) -> None:
        """Drop the cached listing."""
        self._zones = None
        self._expires_at = 0.0
