"""Update decision pipeline for DynDNS2 requests."""

import time
from collections.abc import Callable
from typing import Optional

from starlette.concurrency import run_in_threadpool

from route53_ddns.auth.credentials import verify_credential
from route53_ddns.config import settings
from route53_ddns.dns.base import DNSBackend
from route53_ddns.exceptions import DNSBackendError, RecordConflictError, StoreError
from route53_ddns.logging.config import get_logger
from route53_ddns.models.record import ManagedRecord
from route53_ddns.models.update_event import UpdateEvent, UpdateStatus
from route53_ddns.repositories.event_repository import EventRepository
from route53_ddns.repositories.record_repository import RecordRepository
from route53_ddns.schemas.update import UpdateOutcome, UpdateRequest, UpdateResult
from route53_ddns.services.rate_limiter import AbuseLimiter, RateLimitStatus
from route53_ddns.utils.addresses import (
    normalize_hostname,
    parse_address,
    record_type_for,
    same_address,
)
from route53_ddns.utils.timestamps import isoformat_utc

logger = get_logger(__name__)


def lockout_key(hostname: str, source_address: str) -> str:
    """Lockout key for update attempts from one source against one hostname."""
    return f"update:{hostname}:{source_address}"


class UpdateService:
    """
    Turns one update request into exactly one outcome.

    Order of checks: rate limit, lookup, enabled flag, anti-spoofing,
    lockout, credential, address format and idempotence, then the DNS
    write and the record commit. A spoofed address is refused before the
    credential is looked at, so it never costs a hash comparison or counts
    toward a lockout. The record is only committed after the DNS write
    succeeded, and the commit is conditional on the record not having
    changed since it was read for authentication.
    """

    def __init__(
        self,
        records: RecordRepository,
        events: EventRepository,
        limiter: AbuseLimiter,
        dns: DNSBackend,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize UpdateService.

        Args:
            records: Managed record repository
            events: Update event repository
            limiter: Rate limiter and lockout tracker
            dns: DNS backend to write records through
            clock: Unix time source
        """
        self.records = records
        self.events = events
        self.limiter = limiter
        self.dns = dns
        self._clock = clock

    async def process_update(self, request: UpdateRequest) -> UpdateResult:
        """
        Run the update pipeline for one request.

        Args:
            request: Decoded update request

        Returns:
            UpdateResult with the terminal outcome
        """
        hostname = normalize_hostname(request.hostname)
        source = request.source_address
        claimed = (request.claimed_address or "").strip()

        if not hostname:
            return self._finish(UpdateOutcome.NOHOST, hostname, source)

        rate = await self.limiter.check(hostname)
        if rate is not None and not rate.allowed:
            return self._finish(
                UpdateOutcome.ABUSE,
                hostname,
                source,
                rate=rate,
                retry_after=rate.retry_after,
                reason="rate_limited",
            )

        try:
            record = await self.records.get(hostname)
        except StoreError:
            return self._finish(
                UpdateOutcome.ERROR, hostname, source, rate=rate, reason="lookup_failed"
            )

        if record is None:
            return self._finish(UpdateOutcome.NOHOST, hostname, source, rate=rate)

        requested = claimed or source

        if not record.enabled:
            await self._log_event(request, record, requested, UpdateStatus.DISABLED)
            return self._finish(
                UpdateOutcome.NOHOST, hostname, source, rate=rate, reason="disabled"
            )

        if claimed and not same_address(claimed, source):
            await self._log_event(request, record, requested, UpdateStatus.IP_MISMATCH)
            return self._finish(
                UpdateOutcome.ABUSE, hostname, source, rate=rate, reason="ip_mismatch"
            )

        key = lockout_key(hostname, source)
        locked_until = await self.limiter.locked_until(key)
        if locked_until:
            await self._log_event(request, record, requested, UpdateStatus.LOCKED_OUT)
            return self._finish(
                UpdateOutcome.ABUSE,
                hostname,
                source,
                rate=rate,
                retry_after=max(1, locked_until - int(self._clock())),
                reason="locked_out",
            )

        authenticated = await run_in_threadpool(
            verify_credential, request.credential, record.credential_hash
        )
        if not authenticated:
            await self._log_event(request, record, requested, UpdateStatus.BADAUTH)
            await self.limiter.record_auth_failure(key)
            return self._finish(UpdateOutcome.BADAUTH, hostname, source, rate=rate)

        await self.limiter.record_auth_success(key)

        candidate = parse_address(requested)
        if candidate is None:
            await self._log_event(request, record, requested, UpdateStatus.INVALID_IP)
            return self._finish(UpdateOutcome.INVALID, hostname, source, rate=rate)

        address = str(candidate)
        if record.current_address and same_address(address, record.current_address):
            await self._log_event(request, record, address, UpdateStatus.NOCHG)
            return self._finish(
                UpdateOutcome.NOCHG, hostname, source, rate=rate, address=address
            )

        record_type = record_type_for(candidate)
        stale_removed = await self._remove_stale_type(record, record_type)

        try:
            await self.dns.upsert(
                record.zone_id, hostname, record_type, address, record.ttl
            )
        except DNSBackendError:
            if stale_removed:
                # Nothing is published any more; unbind so the next request republishes
                await self._unbind(record)
            await self._log_event(request, record, address, UpdateStatus.DNS_ERROR)
            return self._finish(
                UpdateOutcome.ERROR, hostname, source, rate=rate, reason="dns_failed"
            )

        # The DNS write went through, so a failed commit still reports good
        status = await self._commit(record, address)
        await self._log_event(request, record, address, status)
        return self._finish(
            UpdateOutcome.GOOD, hostname, source, rate=rate, address=address
        )

    async def _remove_stale_type(self, record: ManagedRecord, record_type: str) -> bool:
        """Delete the other address family's record; True if one was deleted."""
        previous = parse_address(record.current_address)
        if previous is None:
            return False
        previous_type = record_type_for(previous)
        if previous_type == record_type:
            return False
        try:
            await self.dns.delete(record.zone_id, record.hostname, previous_type)
            return True
        except DNSBackendError as exc:
            logger.warning(
                "Could not remove previous record type",
                exc_info=exc,
                extra={
                    "context": {
                        "hostname": record.hostname,
                        "record_type": previous_type,
                    }
                },
            )
            return False

    async def _unbind(self, record: ManagedRecord) -> None:
        try:
            await self.records.clear_address(
                record.hostname,
                last_updated=isoformat_utc(self._clock()),
                expected_last_updated=record.last_updated,
            )
        except (RecordConflictError, StoreError) as exc:
            logger.error(
                "Could not unbind record after its DNS record was removed",
                exc_info=exc,
                extra={"context": {"hostname": record.hostname}},
            )

    async def _commit(self, record: ManagedRecord, address: str) -> UpdateStatus:
        try:
            await self.records.update_address(
                record.hostname,
                address,
                last_updated=isoformat_utc(self._clock()),
                expected_last_updated=record.last_updated,
            )
        except RecordConflictError:
            logger.warning(
                "Record changed during update, DNS already written",
                extra={"context": {"hostname": record.hostname, "address": address}},
            )
            return UpdateStatus.CONFLICT
        except StoreError:
            logger.error(
                "Record commit failed after DNS write",
                extra={"context": {"hostname": record.hostname, "address": address}},
            )
            return UpdateStatus.STORE_ERROR
        return UpdateStatus.GOOD

    async def _log_event(
        self,
        request: UpdateRequest,
        record: ManagedRecord,
        new_address: Optional[str],
        status: UpdateStatus,
    ) -> None:
        now = self._clock()
        event = UpdateEvent(
            hostname=record.hostname,
            timestamp=isoformat_utc(now),
            previous_address=record.current_address,
            new_address=new_address or None,
            source_address=request.source_address,
            user_agent=request.user_agent,
            status=status,
            expires_at=int(now) + settings.event_retention_days * 86400,
        )
        try:
            await self.events.append(event)
        except Exception as exc:
            logger.warning(
                "Could not write update event",
                exc_info=exc,
                extra={"context": {"hostname": record.hostname, "status": status.value}},
            )

    def _finish(
        self,
        outcome: UpdateOutcome,
        hostname: str,
        source: str,
        rate: Optional[RateLimitStatus] = None,
        address: Optional[str] = None,
        retry_after: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> UpdateResult:
        context = {"hostname": hostname, "source_address": source, "outcome": outcome.value}
        if reason:
            context["reason"] = reason
        if address:
            context["address"] = address
        logger.info("Update processed", extra={"context": context})
        return UpdateResult(
            outcome=outcome, address=address, rate_limit=rate, retry_after=retry_after
        )
