"""Update event (audit log) model for DynamoDB."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class UpdateStatus(str, Enum):
    """Status tag recorded for each processed update attempt."""

    GOOD = "good"
    NOCHG = "nochg"
    BADAUTH = "badauth"
    LOCKED_OUT = "locked_out"
    DISABLED = "disabled"
    IP_MISMATCH = "ip_mismatch"
    INVALID_IP = "invalid_ip"
    DNS_ERROR = "route53_error"
    STORE_ERROR = "db_error"
    CONFLICT = "conflict"


class UpdateEvent(BaseModel):
    """
    Immutable record of one processed update attempt.

    Attributes:
        hostname: Hostname the request targeted
        timestamp: ISO 8601 time the attempt was processed
        previous_address: Address bound before the attempt
        new_address: Address the attempt asked for
        source_address: Address the request originated from
        user_agent: Client-supplied identifier string
        status: Outcome status tag
        expires_at: Unix timestamp for DynamoDB TTL pruning
    """

    hostname: str = Field(..., description="Target hostname")
    timestamp: str = Field(..., description="ISO 8601 event timestamp")
    previous_address: Optional[str] = Field(None, description="Previous address")
    new_address: Optional[str] = Field(None, description="Requested address")
    source_address: str = Field(..., description="Request source address")
    user_agent: Optional[str] = Field(None, description="Client identifier")
    status: UpdateStatus = Field(..., description="Outcome status tag")
    expires_at: int = Field(..., description="Unix timestamp for TTL")

    class Config:
        """Pydantic configuration."""

        frozen = True
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "hostname": "home.example.com",
                "timestamp": "2025-11-11T12:00:00.000000Z",
                "previous_address": "203.0.113.4",
                "new_address": "203.0.113.5",
                "source_address": "203.0.113.5",
                "user_agent": "RouterOS/7.12",
                "status": "good",
                "expires_at": 1765454400,
            }
        }
