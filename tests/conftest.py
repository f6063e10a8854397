"""Shared fixtures: in-memory collaborators and a moto server for AWS tests."""

from typing import Any, Dict, List, Optional

import aioboto3
import bcrypt
import httpx
import pytest
from moto.server import ThreadedMotoServer

from infrastructure.dynamodb_tables import create_ddns_table
from route53_ddns.config import settings
from route53_ddns.dns.base import DNSRecordSet, HostedZone
from route53_ddns.exceptions import (
    DNSBackendError,
    RecordConflictError,
    RecordExistsError,
    RecordNotFoundError,
)
from route53_ddns.models.limits import LockoutState
from route53_ddns.models.record import ManagedRecord
from route53_ddns.models.session import Session
from route53_ddns.models.update_event import UpdateEvent
from route53_ddns.utils.aws import get_dynamodb_config

MOTO_PORT = 5123

CREDENTIAL = "correct-horse-battery-staple"
START_TIME = 1_762_862_400.0  # 2025-11-11T12:00:00Z
ZONE_ID = "Z0123456789ABCDEFGHIJ"


class FakeClock:
    """Controllable unix time source."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryRecordRepository:
    """RecordRepository double keeping records in a dict."""

    def __init__(self) -> None:
        self.items: Dict[str, ManagedRecord] = {}
        self.address_writes: List[str] = []

    async def get(self, hostname: str) -> Optional[ManagedRecord]:
        record = self.items.get(hostname)
        return record.model_copy() if record else None

    async def list(self) -> List[ManagedRecord]:
        return [self.items[name] for name in sorted(self.items)]

    async def create(self, record: ManagedRecord) -> ManagedRecord:
        if record.hostname in self.items:
            raise RecordExistsError(hostname=record.hostname)
        self.items[record.hostname] = record
        return record

    async def update(self, record: ManagedRecord) -> ManagedRecord:
        if record.hostname not in self.items:
            raise RecordNotFoundError(hostname=record.hostname)
        self.items[record.hostname] = record
        return record

    async def update_settings(
        self, hostname: str, ttl: int, enabled: bool, last_updated: str
    ) -> ManagedRecord:
        if hostname not in self.items:
            raise RecordNotFoundError(hostname=hostname)
        record = self.items[hostname].model_copy(
            update={"ttl": ttl, "enabled": enabled, "last_updated": last_updated}
        )
        self.items[hostname] = record
        return record

    async def update_address(
        self,
        hostname: str,
        address: str,
        last_updated: str,
        expected_last_updated: str,
    ) -> ManagedRecord:
        current = self.items.get(hostname)
        if current is None or current.last_updated != expected_last_updated:
            raise RecordConflictError(hostname=hostname)
        record = current.model_copy(
            update={"current_address": address, "last_updated": last_updated}
        )
        self.items[hostname] = record
        self.address_writes.append(address)
        return record

    async def clear_address(
        self, hostname: str, last_updated: str, expected_last_updated: str
    ) -> ManagedRecord:
        current = self.items.get(hostname)
        if current is None or current.last_updated != expected_last_updated:
            raise RecordConflictError(hostname=hostname)
        record = current.model_copy(
            update={"current_address": None, "last_updated": last_updated}
        )
        self.items[hostname] = record
        return record

    async def set_credential_hash(
        self, hostname: str, credential_hash: str, last_updated: str
    ) -> ManagedRecord:
        if hostname not in self.items:
            raise RecordNotFoundError(hostname=hostname)
        record = self.items[hostname].model_copy(
            update={"credential_hash": credential_hash, "last_updated": last_updated}
        )
        self.items[hostname] = record
        return record

    async def delete(self, hostname: str) -> None:
        self.items.pop(hostname, None)


class InMemoryEventRepository:
    """EventRepository double keeping events in a list."""

    def __init__(self) -> None:
        self.events: List[UpdateEvent] = []

    async def append(self, event: UpdateEvent) -> UpdateEvent:
        self.events.append(event)
        return event

    async def list_for_hostname(self, hostname: str, limit: int = 50) -> List[UpdateEvent]:
        matching = [e for e in reversed(self.events) if e.hostname == hostname]
        return matching[:limit]

    def statuses(self) -> List[str]:
        return [event.status for event in self.events]


class InMemoryCounterRepository:
    """CounterRepository double with the same window and lockout rules."""

    def __init__(self) -> None:
        self.counters: Dict[str, Dict[str, int]] = {}
        self.lockouts: Dict[str, LockoutState] = {}

    async def increment(self, key: str, window_start: int, expires_at: int) -> int:
        counter = self.counters.get(key)
        if counter is None or counter["window_start"] < window_start:
            counter = {"count": 0, "window_start": window_start}
            self.counters[key] = counter
        counter["count"] += 1
        return counter["count"]

    async def get_lockout(self, key: str) -> Optional[LockoutState]:
        return self.lockouts.get(key)

    async def add_failure(self, key: str, now: int, expires_at: int) -> LockoutState:
        current = self.lockouts.get(key)
        state = LockoutState(
            key=key,
            failed_count=(current.failed_count if current else 0) + 1,
            last_attempt=now,
            locked_until=current.locked_until if current else 0,
            expires_at=expires_at,
        )
        self.lockouts[key] = state
        return state

    async def lock(
        self, key: str, locked_until: int, threshold: int, expires_at: int
    ) -> bool:
        current = self.lockouts.get(key)
        if current is None or current.failed_count < threshold:
            return False
        self.lockouts[key] = current.model_copy(
            update={
                "failed_count": 0,
                "locked_until": locked_until,
                "expires_at": expires_at,
            }
        )
        return True

    async def clear_lockout(self, key: str) -> None:
        self.lockouts.pop(key, None)


class InMemorySessionRepository:
    """SessionRepository double."""

    def __init__(self) -> None:
        self.items: Dict[str, Session] = {}

    async def create(self, session: Session) -> Session:
        self.items[session.session_id] = session
        return session

    async def get(self, session_id: str) -> Optional[Session]:
        return self.items.get(session_id)

    async def delete(self, session_id: str) -> None:
        self.items.pop(session_id, None)


class FakeDNSBackend:
    """DNS backend double recording every mutation."""

    def __init__(self, zones: Optional[List[HostedZone]] = None) -> None:
        self.zones = zones if zones is not None else [
            HostedZone(zone_id=ZONE_ID, name="example.com", record_count=2)
        ]
        self.calls: List[tuple] = []
        self.fail_upsert = False
        self.fail_delete = False

    async def upsert(
        self, zone_id: str, name: str, record_type: str, value: str, ttl: int
    ) -> None:
        self.calls.append(("upsert", zone_id, name, record_type, value, ttl))
        if self.fail_upsert:
            raise DNSBackendError(operation="upsert")

    async def delete(self, zone_id: str, name: str, record_type: str) -> None:
        self.calls.append(("delete", zone_id, name, record_type))
        if self.fail_delete:
            raise DNSBackendError(operation="delete")

    async def list_zones(self) -> List[HostedZone]:
        return list(self.zones)

    async def get_zone(self, zone_id: str) -> Optional[HostedZone]:
        for zone in self.zones:
            if zone.zone_id == zone_id:
                return zone
        return None

    async def list_records(self, zone_id: str) -> List[DNSRecordSet]:
        return [DNSRecordSet(name="example.com", type="NS", ttl=172800, values=["ns1"])]

    def mutations(self, kind: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == kind]


@pytest.fixture(scope="session")
def credential_hash() -> str:
    """Hash of CREDENTIAL at the lowest bcrypt cost to keep tests fast."""
    return bcrypt.hashpw(CREDENTIAL.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode(
        "utf-8"
    )


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def record_repo() -> InMemoryRecordRepository:
    """In-memory record store."""
    return InMemoryRecordRepository()


@pytest.fixture
def event_repo() -> InMemoryEventRepository:
    """In-memory update history."""
    return InMemoryEventRepository()


@pytest.fixture
def counter_repo() -> InMemoryCounterRepository:
    """In-memory limiter counters."""
    return InMemoryCounterRepository()


@pytest.fixture
def session_repo() -> InMemorySessionRepository:
    """In-memory operator sessions."""
    return InMemorySessionRepository()


@pytest.fixture
def dns_backend() -> FakeDNSBackend:
    """Recording DNS backend."""
    return FakeDNSBackend()


@pytest.fixture
def make_record(credential_hash: str):
    """Factory for managed records with sensible defaults."""

    def _make(**overrides: Any) -> ManagedRecord:
        data: Dict[str, Any] = {
            "hostname": "home.example.com",
            "zone_id": ZONE_ID,
            "zone_name": "example.com",
            "ttl": 60,
            "credential_hash": credential_hash,
            "current_address": None,
            "enabled": True,
            "created_at": "2025-11-01T00:00:00.000000Z",
            "last_updated": "2025-11-01T00:00:00.000000Z",
        }
        data.update(overrides)
        return ManagedRecord(**data)

    return _make


@pytest.fixture(scope="session")
def moto_server() -> str:
    """Run moto's threaded server for the whole session."""
    server = ThreadedMotoServer(port=MOTO_PORT, verbose=False)
    server.start()
    yield f"http://127.0.0.1:{MOTO_PORT}"
    server.stop()


@pytest.fixture
def aws_endpoint(moto_server: str, monkeypatch: pytest.MonkeyPatch) -> str:
    """Point DynamoDB and Route 53 clients at a freshly reset moto server."""
    httpx.post(f"{moto_server}/moto-api/reset")
    monkeypatch.setattr(settings, "dynamodb_endpoint_url", moto_server)
    monkeypatch.setattr(settings, "route53_endpoint_url", moto_server)
    monkeypatch.setattr(settings, "aws_access_key_id", "testing")
    monkeypatch.setattr(settings, "aws_secret_access_key", "testing")
    monkeypatch.setattr(settings, "aws_session_token", None)
    return moto_server


@pytest.fixture
async def ddns_table(aws_endpoint: str) -> str:
    """Create the DynamoDB table on the moto server."""
    session = aioboto3.Session()
    async with session.resource("dynamodb", **get_dynamodb_config()) as dynamodb:
        await create_ddns_table(dynamodb, settings.dynamodb_table)
    return settings.dynamodb_table
