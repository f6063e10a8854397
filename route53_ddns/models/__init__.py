"""Data models for the Dynamic DNS API."""

from route53_ddns.models.limits import LockoutState
from route53_ddns.models.record import ManagedRecord
from route53_ddns.models.session import Session
from route53_ddns.models.update_event import UpdateEvent, UpdateStatus

__all__ = [
    "LockoutState",
    "ManagedRecord",
    "Session",
    "UpdateEvent",
    "UpdateStatus",
]
