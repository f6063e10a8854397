"""Timestamp helpers shared by models and services."""

from datetime import datetime, timezone


def isoformat_utc(epoch: float) -> str:
    """Render a unix timestamp as ISO 8601 UTC with a trailing Z."""
    moment = datetime.fromtimestamp(epoch, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def window_start(epoch: float, window_seconds: int) -> int:
    """Floor a unix timestamp to the start of its fixed window."""
    return int(epoch) - (int(epoch) % window_seconds)
