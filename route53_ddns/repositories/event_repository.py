"""Update event repository for DynamoDB operations."""

import uuid
from typing import Any, List

from route53_ddns.models.update_event import UpdateEvent
from route53_ddns.repositories.base import BaseRepository

LOG_PARTITION_PREFIX = "LOG#"


class EventRepository(BaseRepository):
    """
    Append-only store of update events.

    Events are partitioned per hostname (PK=LOG#<hostname>) and sorted by
    timestamp, so history reads are a single descending query. Expiry is
    left to DynamoDB TTL on the expires_at attribute.
    """

    def _deserialize(self, item: dict[str, Any]) -> UpdateEvent:
        data = {k: v for k, v in item.items() if k not in ("PK", "SK")}
        return UpdateEvent(**data)

    async def append(self, event: UpdateEvent) -> UpdateEvent:
        """
        Append an event to the hostname's history.

        Args:
            event: Event to store

        Returns:
            The stored event
        """
        item = event.model_dump(exclude_none=True, mode="json")
        item["PK"] = LOG_PARTITION_PREFIX + event.hostname
        # Suffix keeps two events in the same microsecond distinct
        item["SK"] = f"{event.timestamp}#{uuid.uuid4().hex[:8]}"
        await self.put_item(item, condition_expression="attribute_not_exists(SK)")
        return event

    async def list_for_hostname(self, hostname: str, limit: int = 50) -> List[UpdateEvent]:
        """
        Get update history for a hostname, most recent first.

        Args:
            hostname: Record hostname
            limit: Maximum events to return

        Returns:
            List of events ordered newest first
        """
        items = await self.query_partition(
            LOG_PARTITION_PREFIX + hostname,
            limit=limit,
            newest_first=True,
        )
        return [self._deserialize(item) for item in items]
