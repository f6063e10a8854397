"""Managed record repository for DynamoDB operations."""

from typing import Any, List, Optional

from botocore.exceptions import ClientError

from route53_ddns.exceptions import (
    RecordConflictError,
    RecordExistsError,
    RecordNotFoundError,
)
from route53_ddns.models.record import ManagedRecord
from route53_ddns.repositories.base import BaseRepository, is_conditional_check_failure

RECORD_PARTITION_KEY = "DDNS"


class RecordRepository(BaseRepository):
    """
    Repository for managed records in DynamoDB.

    Records live under a single partition (PK=DDNS) with the hostname as
    sort key, so hostnames are unique by construction.
    """

    @staticmethod
    def _key(hostname: str) -> dict[str, str]:
        return {"PK": RECORD_PARTITION_KEY, "SK": hostname}

    def _serialize(self, record: ManagedRecord) -> dict[str, Any]:
        item = record.model_dump(exclude_none=True)
        # "ttl" would collide with the table's expiry attribute naming
        item["record_ttl"] = item.pop("ttl")
        item.update(self._key(record.hostname))
        return item

    def _deserialize(self, item: dict[str, Any]) -> ManagedRecord:
        data = {k: v for k, v in item.items() if k not in ("PK", "SK")}
        data["ttl"] = data.pop("record_ttl")
        return ManagedRecord(**data)

    async def get(self, hostname: str) -> Optional[ManagedRecord]:
        """
        Get a managed record by hostname.

        Args:
            hostname: Normalized hostname

        Returns:
            ManagedRecord if found, None otherwise
        """
        item = await self.get_item(self._key(hostname))
        if item:
            return self._deserialize(item)
        return None

    async def list(self) -> List[ManagedRecord]:
        """List every managed record ordered by hostname."""
        items = await self.query_partition(RECORD_PARTITION_KEY)
        return [self._deserialize(item) for item in items]

    async def create(self, record: ManagedRecord) -> ManagedRecord:
        """
        Create a new managed record.

        Args:
            record: Record to store

        Returns:
            The created record

        Raises:
            RecordExistsError: If the hostname is already managed
        """
        try:
            await self.put_item(
                self._serialize(record),
                condition_expression="attribute_not_exists(PK)",
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise RecordExistsError(
                    message=f"Record {record.hostname} already exists",
                    hostname=record.hostname,
                ) from exc
            raise
        return record

    async def update(self, record: ManagedRecord) -> ManagedRecord:
        """
        Replace an existing managed record.

        Args:
            record: Record with updated attributes

        Returns:
            The stored record

        Raises:
            RecordNotFoundError: If the hostname is not managed
        """
        try:
            await self.put_item(
                self._serialize(record),
                condition_expression="attribute_exists(PK)",
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise RecordNotFoundError(
                    message=f"Record {record.hostname} not found",
                    hostname=record.hostname,
                ) from exc
            raise
        return record

    async def update_settings(
        self, hostname: str, ttl: int, enabled: bool, last_updated: str
    ) -> ManagedRecord:
        """
        Change TTL and enabled flag without touching the bound address.

        Args:
            hostname: Record hostname
            ttl: New DNS TTL
            enabled: New enabled flag
            last_updated: New last_updated timestamp

        Returns:
            The updated record

        Raises:
            RecordNotFoundError: If the hostname is not managed
        """
        try:
            attributes = await self.update_item(
                self._key(hostname),
                "SET record_ttl = :ttl, #enabled = :enabled, last_updated = :now",
                {":ttl": ttl, ":enabled": enabled, ":now": last_updated},
                expression_names={"#enabled": "enabled"},
                condition_expression="attribute_exists(PK)",
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise RecordNotFoundError(
                    message=f"Record {hostname} not found",
                    hostname=hostname,
                ) from exc
            raise
        return self._deserialize(attributes)

    async def update_address(
        self,
        hostname: str,
        address: str,
        last_updated: str,
        expected_last_updated: str,
    ) -> ManagedRecord:
        """
        Bind a new address, compare-and-swap on the last_updated read earlier.

        Args:
            hostname: Record hostname
            address: Newly bound address
            last_updated: New last_updated timestamp
            expected_last_updated: last_updated value the caller read

        Returns:
            The updated record

        Raises:
            RecordConflictError: If the record changed (or vanished) since it was read
        """
        try:
            attributes = await self.update_item(
                self._key(hostname),
                "SET current_address = :address, last_updated = :now",
                {
                    ":address": address,
                    ":now": last_updated,
                    ":expected": expected_last_updated,
                },
                condition_expression=(
                    "attribute_exists(PK) AND last_updated = :expected"
                ),
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise RecordConflictError(
                    message=f"Record {hostname} changed since it was read",
                    hostname=hostname,
                ) from exc
            raise
        return self._deserialize(attributes)

    async def clear_address(
        self, hostname: str, last_updated: str, expected_last_updated: str
    ) -> ManagedRecord:
        """
        Unbind the current address, compare-and-swap on last_updated.

        Raises:
            RecordConflictError: If the record changed (or vanished) since it was read
        """
        try:
            attributes = await self.update_item(
                self._key(hostname),
                "SET last_updated = :now REMOVE current_address",
                {":now": last_updated, ":expected": expected_last_updated},
                condition_expression=(
                    "attribute_exists(PK) AND last_updated = :expected"
                ),
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise RecordConflictError(
                    message=f"Record {hostname} changed since it was read",
                    hostname=hostname,
                ) from exc
            raise
        return self._deserialize(attributes)

    async def set_credential_hash(
        self, hostname: str, credential_hash: str, last_updated: str
    ) -> ManagedRecord:
        """
        Replace the stored credential hash in a single atomic write.

        Args:
            hostname: Record hostname
            credential_hash: New bcrypt hash
            last_updated: New last_updated timestamp

        Returns:
            The updated record

        Raises:
            RecordNotFoundError: If the hostname is not managed
        """
        try:
            attributes = await self.update_item(
                self._key(hostname),
                "SET credential_hash = :hash, last_updated = :now",
                {":hash": credential_hash, ":now": last_updated},
                condition_expression="attribute_exists(PK)",
            )
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise RecordNotFoundError(
                    message=f"Record {hostname} not found",
                    hostname=hostname,
                ) from exc
            raise
        return self._deserialize(attributes)

    async def delete(self, hostname: str) -> None:
        """
        Delete a managed record. Update history is kept until it expires.

        Args:
            hostname: Record hostname
        """
        await self.delete_item(self._key(hostname))
