"""Route 53 implementation of the DNS backend."""

import asyncio
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import Any, List, Optional, TypeVar

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from route53_ddns.config import settings
from route53_ddns.dns.base import DNSRecordSet, HostedZone
from route53_ddns.dns.cache import ZoneCache
from route53_ddns.exceptions import DNSBackendError
from route53_ddns.logging.config import get_logger
from route53_ddns.utils.aws import get_route53_config

logger = get_logger(__name__)

T = TypeVar("T")

HOSTED_ZONE_PREFIX = "/hostedzone/"


def to_fqdn(name: str) -> str:
    """Return name with exactly one trailing dot, as Route 53 expects."""
    return name.rstrip(".") + "."


def from_fqdn(name: str) -> str:
    """Strip the trailing dot Route 53 returns on names."""
    return name.rstrip(".")


def strip_zone_prefix(zone_id: str) -> str:
    """Turn '/hostedzone/Z123' into 'Z123'."""
    if zone_id.startswith(HOSTED_ZONE_PREFIX):
        return zone_id[len(HOSTED_ZONE_PREFIX):]
    return zone_id


class Route53Backend:
    """
    DNS backend talking to AWS Route 53 through aioboto3.

    Handles pagination, trailing-dot normalization and alias exclusion so
    callers deal only in plain hostnames. Every provider call is bounded by
    a timeout; a timed-out mutation is reported as a failure because its
    outcome is unknown.
    """

    def __init__(
        self,
        session: aioboto3.Session | None = None,
        zone_cache: ZoneCache | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """
        Initialize Route 53 backend.

        Args:
            session: aioboto3 session to open clients from
            zone_cache: Cache for zone listings (created if None)
            timeout_seconds: Per-call timeout (defaults to settings)
        """
        self.session = session or aioboto3.Session()
        self.zone_cache = zone_cache or ZoneCache(settings.zone_cache_ttl_seconds)
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.dns_timeout_seconds
        )

    @asynccontextmanager
    async def client(self) -> AsyncIterator[Any]:
        """Open a Route 53 client."""
        async with self.session.client("route53", **get_route53_config()) as client:
            yield client

    async def _guard(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.error(
                "Route 53 request timed out",
                extra={
                    "context": {
                        "operation": operation,
                        "timeout_seconds": self.timeout_seconds,
                    }
                },
            )
            raise DNSBackendError(
                message="Route 53 request timed out",
                operation=operation,
            ) from exc
        except (ClientError, BotoCoreError) as exc:
            logger.error(
                "Route 53 request failed",
                exc_info=exc,
                extra={"context": {"operation": operation}},
            )
            raise DNSBackendError(
                message=f"Route 53 {operation} failed",
                operation=operation,
            ) from exc

    async def upsert(
        self, zone_id: str, name: str, record_type: str, value: str, ttl: int
    ) -> None:
        """
        Create or replace a single-value record set.

        Args:
            zone_id: Hosted zone ID
            name: Record hostname
            record_type: A or AAAA
            value: Record value (address)
            ttl: TTL in seconds

        Raises:
            DNSBackendError: If Route 53 rejects the change or times out
        """
        change = {
            "Action": "UPSERT",
            "ResourceRecordSet": {
                "Name": to_fqdn(name),
                "Type": record_type,
                "TTL": ttl,
                "ResourceRecords": [{"Value": value}],
            },
        }
        await self._guard("upsert", self._change(zone_id, change, "DDNS update"))
        logger.info(
            "DNS record upserted",
            extra={
                "context": {
                    "zone_id": zone_id,
                    "hostname": from_fqdn(name),
                    "record_type": record_type,
                    "value": value,
                    "ttl": ttl,
                }
            },
        )

    async def delete(self, zone_id: str, name: str, record_type: str) -> None:
        """
        Delete a record set; a record set that does not exist is not an error.

        Route 53 only deletes a record set when given its exact current
        contents, so the live set is looked up first.

        Args:
            zone_id: Hosted zone ID
            name: Record hostname
            record_type: A or AAAA

        Raises:
            DNSBackendError: If Route 53 rejects the change or times out
        """
        await self._guard("delete", self._delete(zone_id, name, record_type))

    async def _delete(self, zone_id: str, name: str, record_type: str) -> None:
        existing = await self._find_record_set(zone_id, name, record_type)
        if existing is None:
            logger.info(
                "DNS record already absent",
                extra={
                    "context": {
                        "zone_id": zone_id,
                        "hostname": from_fqdn(name),
                        "record_type": record_type,
                    }
                },
            )
            return

        record_set = {
            key: existing[key]
            for key in ("Name", "Type", "TTL", "ResourceRecords")
            if key in existing
        }
        await self._change(
            zone_id,
            {"Action": "DELETE", "ResourceRecordSet": record_set},
            "DDNS record deletion",
        )
        logger.info(
            "DNS record deleted",
            extra={
                "context": {
                    "zone_id": zone_id,
                    "hostname": from_fqdn(name),
                    "record_type": record_type,
                }
            },
        )

    async def _change(self, zone_id: str, change: dict[str, Any], comment: str) -> None:
        async with self.client() as client:
            await client.change_resource_record_sets(
                HostedZoneId=zone_id,
                ChangeBatch={"Comment": comment, "Changes": [change]},
            )

    async def _find_record_set(
        self, zone_id: str, name: str, record_type: str
    ) -> Optional[dict[str, Any]]:
        target = from_fqdn(name).lower()
        params: dict[str, Any] = {
            "HostedZoneId": zone_id,
            "StartRecordName": to_fqdn(name),
            "StartRecordType": record_type,
        }
        async with self.client() as client:
            while True:
                response = await client.list_resource_record_sets(**params)
                for record_set in response.get("ResourceRecordSets", []):
                    if (
                        from_fqdn(record_set["Name"]).lower() != target
                        or record_set["Type"] != record_type
                    ):
                        # Listings are ordered from the start point, so we are past it
                        return None
                    if "AliasTarget" not in record_set:
                        return record_set
                if not response.get("IsTruncated"):
                    return None
                params["StartRecordName"] = response["NextRecordName"]
                params["StartRecordType"] = response["NextRecordType"]

    async def list_zones(self) -> List[HostedZone]:
        """
        List hosted zones, served from the zone cache while it is fresh.

        Returns:
            Hosted zones sorted as Route 53 returns them

        Raises:
            DNSBackendError: If Route 53 fails or times out
        """
        cached = self.zone_cache.get()
        if cached is not None:
            return cached

        zones = await self._guard("list_zones", self._list_zones())
        self.zone_cache.set(zones)
        return zones

    async def _list_zones(self) -> List[HostedZone]:
        zones: List[HostedZone] = []
        params: dict[str, Any] = {}
        async with self.client() as client:
            while True:
                response = await client.list_hosted_zones(**params)
                for zone in response.get("HostedZones", []):
                    config = zone.get("Config") or {}
                    zones.append(
                        HostedZone(
                            zone_id=strip_zone_prefix(zone["Id"]),
                            name=from_fqdn(zone["Name"]),
                            record_count=zone.get("ResourceRecordSetCount", 0),
                            is_private=bool(config.get("PrivateZone", False)),
                            comment=config.get("Comment"),
                        )
                    )
                if not response.get("IsTruncated"):
                    break
                params["Marker"] = response["NextMarker"]
        return zones

    async def get_zone(self, zone_id: str) -> Optional[HostedZone]:
        """
        Find a hosted zone by ID in the (cached) zone listing.

        Args:
            zone_id: Hosted zone ID, with or without the /hostedzone/ prefix

        Returns:
            HostedZone if found, None otherwise
        """
        wanted = strip_zone_prefix(zone_id)
        for zone in await self.list_zones():
            if zone.zone_id == wanted:
                return zone
        return None

    async def list_records(self, zone_id: str) -> List[DNSRecordSet]:
        """
        List the record sets of a zone, excluding alias records.

        Args:
            zone_id: Hosted zone ID

        Returns:
            Record sets with trailing dots removed

        Raises:
            DNSBackendError: If Route 53 fails or times out
        """
        return await self._guard("list_records", self._list_records(zone_id))

    async def _list_records(self, zone_id: str) -> List[DNSRecordSet]:
        records: List[DNSRecordSet] = []
        params: dict[str, Any] = {"HostedZoneId": zone_id}
        async with self.client() as client:
            while True:
                response = await client.list_resource_record_sets(**params)
                for record_set in response.get("ResourceRecordSets", []):
                    if "AliasTarget" in record_set:
                        continue
                    records.append(
                        DNSRecordSet(
                            name=from_fqdn(record_set["Name"]),
                            type=record_set["Type"],
                            ttl=record_set.get("TTL"),
                            values=[
                                rr["Value"]
                                for rr in record_set.get("ResourceRecords", [])
                            ],
                        )
                    )
                if not response.get("IsTruncated"):
                    break
                params["StartRecordName"] = response["NextRecordName"]
                params["StartRecordType"] = response["NextRecordType"]
                if "NextRecordIdentifier" in response:
                    params["StartRecordIdentifier"] = response["NextRecordIdentifier"]
                else:
                    params.pop("StartRecordIdentifier", None)
        return records
