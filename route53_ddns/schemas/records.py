"""Pydantic schemas for the administrative record API."""

from typing import List, Optional

from pydantic import BaseModel, Field

from route53_ddns.dns.base import DNSRecordSet, HostedZone
from route53_ddns.models.record import ManagedRecord
from route53_ddns.models.update_event import UpdateEvent


class CreateRecordRequest(BaseModel):
    """
    Request schema for creating a managed record.

    Attributes:
        hostname: Hostname to manage (must lie inside the zone)
        zone_id: Route 53 hosted zone ID
        ttl: DNS TTL in seconds (server default if omitted)
    """

    hostname: str = Field(..., min_length=1, max_length=253, description="Hostname")
    zone_id: str = Field(..., min_length=1, description="Hosted zone ID")
    ttl: Optional[int] = Field(None, description="DNS TTL in seconds")

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "hostname": "home.example.com",
                "zone_id": "Z0123456789ABCDEFGHIJ",
                "ttl": 60,
            }
        }


class UpdateRecordRequest(BaseModel):
    """Request schema for changing a record's TTL or enabled flag."""

    ttl: Optional[int] = Field(None, description="New DNS TTL in seconds")
    enabled: Optional[bool] = Field(None, description="Accept updates")


class RecordResponse(BaseModel):
    """A managed record as returned to the operator (no credential hash)."""

    hostname: str
    zone_id: str
    zone_name: str
    ttl: int
    current_address: Optional[str] = None
    enabled: bool
    created_at: str
    last_updated: str

    @classmethod
    def from_record(cls, record: ManagedRecord) -> "RecordResponse":
        """Build a response from a stored record."""
        return cls(**record.model_dump(exclude={"credential_hash"}))


class CredentialResponse(BaseModel):
    """
    Response carrying a freshly minted update credential.

    The credential is shown exactly once and cannot be retrieved later.
    """

    record: RecordResponse = Field(..., description="The managed record")
    credential: str = Field(..., description="Plaintext update credential")
    message: str = Field(
        default="Store this credential now; it cannot be shown again.",
        description="Operator notice",
    )


class RecordListResponse(BaseModel):
    """List of managed records."""

    records: List[RecordResponse]


class HistoryResponse(BaseModel):
    """Update history for one hostname, most recent first."""

    hostname: str
    events: List[UpdateEvent]


class ZoneListResponse(BaseModel):
    """Hosted zones available for managed records."""

    zones: List[HostedZone]


class ZoneRecordsResponse(BaseModel):
    """Record sets of a hosted zone (alias records excluded)."""

    zone_id: str
    records: List[DNSRecordSet]
