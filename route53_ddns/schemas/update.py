"""Update pipeline outcomes and their DynDNS2 wire rendering."""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from route53_ddns.services.rate_limiter import RateLimitStatus

SERVER_ERROR_SENTINEL = "911"


class UpdateOutcome(str, Enum):
    """Terminal outcome of one update request."""

    GOOD = "good"
    NOCHG = "nochg"
    NOHOST = "nohost"
    BADAUTH = "badauth"
    ABUSE = "abuse"
    INVALID = "invalid"
    ERROR = "error"


OUTCOME_STATUS_CODES: Dict[UpdateOutcome, int] = {
    UpdateOutcome.GOOD: 200,
    UpdateOutcome.NOCHG: 200,
    UpdateOutcome.NOHOST: 200,
    UpdateOutcome.BADAUTH: 401,
    UpdateOutcome.ABUSE: 429,
    UpdateOutcome.INVALID: 200,
    UpdateOutcome.ERROR: 200,
}


class UpdateRequest(BaseModel):
    """
    One inbound update request, after transport decoding.

    Attributes:
        hostname: Target hostname as sent by the client
        claimed_address: Address the client asked for (myip), may be empty
        source_address: Trusted source address of the connection
        credential: Plaintext credential from the Basic-Auth password slot
        user_agent: Client-supplied identifier string
    """

    hostname: str = Field(default="", description="Target hostname")
    claimed_address: str = Field(default="", description="Requested address (myip)")
    source_address: str = Field(default="", description="Trusted source address")
    credential: str = Field(default="", repr=False, description="Update credential")
    user_agent: Optional[str] = Field(None, description="Client identifier")


class UpdateResult(BaseModel):
    """
    Outcome of the update pipeline.

    Attributes:
        outcome: Terminal outcome tag
        address: Bound address for good/nochg
        rate_limit: Limiter counters, when the limiter was consulted
        retry_after: Seconds the client should wait, for abuse caused by
            rate limiting or lockout
    """

    outcome: UpdateOutcome = Field(..., description="Terminal outcome")
    address: Optional[str] = Field(None, description="Bound address")
    rate_limit: Optional[RateLimitStatus] = Field(None, description="Limiter state")
    retry_after: Optional[int] = Field(None, description="Retry-After seconds")

    @property
    def status_code(self) -> int:
        """HTTP status accompanying the outcome."""
        return OUTCOME_STATUS_CODES[self.outcome]

    def render(self) -> str:
        """Render the single-line DynDNS2 response body."""
        if self.outcome in (UpdateOutcome.GOOD, UpdateOutcome.NOCHG):
            return f"{self.outcome.value} {self.address}"
        if self.outcome in (UpdateOutcome.INVALID, UpdateOutcome.ERROR):
            return SERVER_ERROR_SENTINEL
        return self.outcome.value

    def headers(self) -> Dict[str, str]:
        """Rate-limit and Retry-After headers for the response."""
        headers: Dict[str, str] = {}
        if self.rate_limit is not None:
            headers["X-RateLimit-Limit"] = str(self.rate_limit.limit)
            headers["X-RateLimit-Remaining"] = str(self.rate_limit.remaining)
            headers["X-RateLimit-Reset"] = str(self.rate_limit.reset_at)
        if self.retry_after is not None:
            headers["Retry-After"] = str(self.retry_after)
        return headers
