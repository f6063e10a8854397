"""Lockout state model for DynamoDB."""

from pydantic import BaseModel, Field


class LockoutState(BaseModel):
    """
    Consecutive authentication failures for one client key.

    Attributes:
        key: Lockout key (client identity)
        failed_count: Failures since the last success or lockout
        last_attempt: Unix timestamp of the latest failure
        locked_until: Unix timestamp the lockout ends (0 when not locked)
        expires_at: Unix timestamp for TTL
    """

    key: str = Field(..., description="Lockout key")
    failed_count: int = Field(default=0, ge=0, description="Consecutive failures")
    last_attempt: int = Field(default=0, description="Last failure (unix)")
    locked_until: int = Field(default=0, description="Lockout end (unix)")
    expires_at: int = Field(..., description="Unix timestamp for TTL")

    def is_locked(self, now: float) -> bool:
        """Return True while the lockout window is still in the future."""
        return self.locked_until > 0 and now < self.locked_until
