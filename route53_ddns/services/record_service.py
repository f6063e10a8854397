"""Administrative lifecycle of managed records."""

import time
from collections.abc import Callable
from typing import List, Optional, Tuple

from route53_ddns.auth.credentials import generate_credential, hash_credential
from route53_ddns.config import settings
from route53_ddns.dns.base import DNSBackend, DNSRecordSet, HostedZone
from route53_ddns.exceptions import (
    DNSBackendError,
    InvalidRecordError,
    RecordNotFoundError,
    ZoneNotFoundError,
)
from route53_ddns.logging.config import get_logger
from route53_ddns.models.record import ManagedRecord
from route53_ddns.models.update_event import UpdateEvent
from route53_ddns.repositories.event_repository import EventRepository
from route53_ddns.repositories.record_repository import RecordRepository
from route53_ddns.utils.addresses import (
    hostname_in_zone,
    normalize_hostname,
    parse_address,
    record_type_for,
)
from route53_ddns.utils.timestamps import isoformat_utc

logger = get_logger(__name__)


class RecordService:
    """
    Service layer for managed record administration.

    Plaintext credentials only ever leave this service as the return
    value of create() and regenerate_credential(); only bcrypt hashes are
    stored.
    """

    def __init__(
        self,
        records: RecordRepository,
        events: EventRepository,
        dns: DNSBackend,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize RecordService.

        Args:
            records: Managed record repository
            events: Update event repository
            dns: DNS backend for zone lookups and record removal
            clock: Unix time source
        """
        self.records = records
        self.events = events
        self.dns = dns
        self._clock = clock

    def _validate_ttl(self, ttl: int) -> None:
        if not settings.min_record_ttl <= ttl <= settings.max_record_ttl:
            raise InvalidRecordError(
                message=(
                    f"TTL must be between {settings.min_record_ttl} "
                    f"and {settings.max_record_ttl} seconds"
                ),
                details={"ttl": ttl},
            )

    async def list_zones(self) -> List[HostedZone]:
        """List hosted zones available for managed records."""
        return await self.dns.list_zones()

    async def list_zone_records(self, zone_id: str) -> List[DNSRecordSet]:
        """
        List the record sets of a hosted zone.

        Raises:
            ZoneNotFoundError: If the zone does not exist
        """
        zone = await self.dns.get_zone(zone_id)
        if zone is None:
            raise ZoneNotFoundError(zone_id=zone_id)
        return await self.dns.list_records(zone.zone_id)

    async def create(
        self, hostname: str, zone_id: str, ttl: Optional[int] = None
    ) -> Tuple[ManagedRecord, str]:
        """
        Create a managed record and mint its update credential.

        Args:
            hostname: Hostname to manage
            zone_id: Hosted zone the hostname belongs to
            ttl: DNS TTL (defaults to settings)

        Returns:
            Tuple of (created record, plaintext credential)

        Raises:
            InvalidRecordError: If the hostname or TTL is invalid
            ZoneNotFoundError: If the zone does not exist
            RecordExistsError: If the hostname is already managed
        """
        name = normalize_hostname(hostname)
        if not name:
            raise InvalidRecordError(message="Hostname is required")
        ttl = settings.default_record_ttl if ttl is None else ttl
        self._validate_ttl(ttl)

        zone = await self.dns.get_zone(zone_id)
        if zone is None:
            raise ZoneNotFoundError(zone_id=zone_id)
        if not hostname_in_zone(name, zone.name):
            raise InvalidRecordError(
                message=f"Hostname {name} is not inside zone {zone.name}",
                details={"hostname": name, "zone_name": zone.name},
            )

        credential = generate_credential()
        now = isoformat_utc(self._clock())
        record = ManagedRecord(
            hostname=name,
            zone_id=zone.zone_id,
            zone_name=zone.name,
            ttl=ttl,
            credential_hash=hash_credential(credential),
            created_at=now,
            last_updated=now,
        )
        await self.records.create(record)

        logger.info(
            "Managed record created",
            extra={"context": {"hostname": name, "zone_id": zone.zone_id, "ttl": ttl}},
        )
        return record, credential

    async def list(self) -> List[ManagedRecord]:
        """List every managed record."""
        return await self.records.list()

    async def get(self, hostname: str) -> ManagedRecord:
        """
        Get a managed record.

        Raises:
            RecordNotFoundError: If the hostname is not managed
        """
        name = normalize_hostname(hostname)
        record = await self.records.get(name)
        if record is None:
            raise RecordNotFoundError(message=f"Record {name} not found", hostname=name)
        return record

    async def regenerate_credential(self, hostname: str) -> Tuple[ManagedRecord, str]:
        """
        Replace a record's credential; the old one stops working immediately.

        Returns:
            Tuple of (updated record, new plaintext credential)

        Raises:
            RecordNotFoundError: If the hostname is not managed
        """
        name = normalize_hostname(hostname)
        credential = generate_credential()
        record = await self.records.set_credential_hash(
            name, hash_credential(credential), isoformat_utc(self._clock())
        )
        logger.info("Update credential regenerated", extra={"context": {"hostname": name}})
        return record, credential

    async def update(
        self,
        hostname: str,
        ttl: Optional[int] = None,
        enabled: Optional[bool] = None,
    ) -> ManagedRecord:
        """
        Change a record's TTL and/or enabled flag.

        A TTL change on a record that already has an address is written
        to DNS first, so DNS and the store keep agreeing.

        Raises:
            RecordNotFoundError: If the hostname is not managed
            InvalidRecordError: If the TTL is out of range
            DNSBackendError: If republishing the record with the new TTL fails
        """
        record = await self.get(hostname)
        new_ttl = record.ttl if ttl is None else ttl
        new_enabled = record.enabled if enabled is None else enabled
        self._validate_ttl(new_ttl)

        address = parse_address(record.current_address)
        if new_ttl != record.ttl and address is not None:
            await self.dns.upsert(
                record.zone_id,
                record.hostname,
                record_type_for(address),
                str(address),
                new_ttl,
            )

        updated = await self.records.update_settings(
            record.hostname, new_ttl, new_enabled, isoformat_utc(self._clock())
        )
        logger.info(
            "Managed record updated",
            extra={
                "context": {
                    "hostname": record.hostname,
                    "ttl": new_ttl,
                    "enabled": new_enabled,
                }
            },
        )
        return updated

    async def delete(self, hostname: str) -> None:
        """
        Delete a managed record, removing its DNS record first (best effort).

        History stays until it expires.

        Raises:
            RecordNotFoundError: If the hostname is not managed
        """
        record = await self.get(hostname)

        address = parse_address(record.current_address)
        if address is not None:
            try:
                await self.dns.delete(
                    record.zone_id, record.hostname, record_type_for(address)
                )
            except DNSBackendError as exc:
                logger.warning(
                    "Could not remove DNS record for deleted hostname",
                    exc_info=exc,
                    extra={"context": {"hostname": record.hostname}},
                )

        await self.records.delete(record.hostname)
        logger.info("Managed record deleted", extra={"context": {"hostname": record.hostname}})

    async def history(
        self, hostname: str, limit: Optional[int] = None
    ) -> List[UpdateEvent]:
        """
        Get update history for a record, most recent first.

        Args:
            hostname: Record hostname
            limit: Maximum events (clamped to the configured maximum)

        Raises:
            RecordNotFoundError: If the hostname is not managed
        """
        record = await self.get(hostname)
        limit = settings.default_history_limit if limit is None else limit
        limit = max(1, min(limit, settings.max_history_limit))
        return await self.events.list_for_hostname(record.hostname, limit=limit)
