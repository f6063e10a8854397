"""DNS backend contract consumed by the update pipeline and record service."""

from typing import List, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class HostedZone(BaseModel):
    """A hosted zone as listed by the DNS provider."""

    zone_id: str = Field(..., description="Zone identifier without provider prefix")
    name: str = Field(..., description="Zone name without trailing dot")
    record_count: int = Field(default=0, description="Number of record sets")
    is_private: bool = Field(default=False, description="Private zone flag")
    comment: Optional[str] = Field(None, description="Provider comment")


class DNSRecordSet(BaseModel):
    """A non-alias record set as listed by the DNS provider."""

    name: str = Field(..., description="Record name without trailing dot")
    type: str = Field(..., description="Record type (A, AAAA, ...)")
    ttl: Optional[int] = Field(None, description="TTL in seconds")
    values: List[str] = Field(default_factory=list, description="Record values")


@runtime_checkable
class DNSBackend(Protocol):
    """
    Authoritative DNS provider operations.

    Implementations raise DNSBackendError on any provider failure or
    timeout and give no transactional guarantee relative to the record
    store.
    """

    async def upsert(
        self, zone_id: str, name: str, record_type: str, value: str, ttl: int
    ) -> None:
        """Create or replace the single-value record set name/type."""
        ...

    async def delete(self, zone_id: str, name: str, record_type: str) -> None:
        """Delete the record set name/type; absent record sets are not an error."""
        ...

    async def list_zones(self) -> List[HostedZone]:
        """List hosted zones (may be served from a short-lived cache)."""
        ...

    async def get_zone(self, zone_id: str) -> Optional[HostedZone]:
        """Find a hosted zone by ID, None if it does not exist."""
        ...

    async def list_records(self, zone_id: str) -> List[DNSRecordSet]:
        """List the non-alias record sets of a zone."""
        ...
