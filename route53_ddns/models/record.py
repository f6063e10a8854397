"""Managed record model for DynamoDB."""

from typing import Optional

from pydantic import BaseModel, Field

from route53_ddns.config import settings


class ManagedRecord(BaseModel):
    """
    A dynamic hostname bound to a Route 53 hosted zone.

    Attributes:
        hostname: Fully-qualified hostname (unique key)
        zone_id: Route 53 hosted zone identifier
        zone_name: Hosted zone display name
        ttl: DNS record TTL in seconds
        credential_hash: Bcrypt hash of the update credential
        current_address: Address currently bound in DNS (None until first update)
        enabled: Whether updates are accepted for this hostname
        created_at: ISO 8601 creation timestamp
        last_updated: ISO 8601 timestamp of the last write to this record
    """

    hostname: str = Field(..., min_length=1, description="Fully-qualified hostname")
    zone_id: str = Field(..., description="Route 53 hosted zone ID")
    zone_name: str = Field(..., description="Hosted zone name")
    ttl: int = Field(
        default=settings.default_record_ttl,
        ge=settings.min_record_ttl,
        le=settings.max_record_ttl,
        description="DNS record TTL in seconds",
    )
    credential_hash: str = Field(
        ..., repr=False, description="Bcrypt hash of the update credential"
    )
    current_address: Optional[str] = Field(
        None, description="Currently bound IPv4/IPv6 address"
    )
    enabled: bool = Field(default=True, description="Accept updates")
    created_at: str = Field(..., description="ISO 8601 creation timestamp")
    last_updated: str = Field(..., description="ISO 8601 last update timestamp")

    class Config:
        """Pydantic configuration."""

        json_schema_extra = {
            "example": {
                "hostname": "home.example.com",
                "zone_id": "Z0123456789ABCDEFGHIJ",
                "zone_name": "example.com",
                "ttl": 60,
                "credential_hash": "$2b$12$...",
                "current_address": "203.0.113.5",
                "enabled": True,
                "created_at": "2025-11-11T12:00:00Z",
                "last_updated": "2025-11-11T12:30:00Z",
            }
        }
