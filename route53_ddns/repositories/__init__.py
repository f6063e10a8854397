"""Repository layer for DynamoDB operations."""

from route53_ddns.repositories.counter_repository import CounterRepository
from route53_ddns.repositories.event_repository import EventRepository
from route53_ddns.repositories.record_repository import RecordRepository
from route53_ddns.repositories.session_repository import SessionRepository

__all__ = [
    "CounterRepository",
    "EventRepository",
    "RecordRepository",
    "SessionRepository",
]
