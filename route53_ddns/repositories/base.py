"""Base repository class with common DynamoDB operations."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from route53_ddns.config import settings
from route53_ddns.exceptions import StoreError
from route53_ddns.logging.config import get_logger
from route53_ddns.utils.aws import get_dynamodb_config

logger = get_logger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def is_conditional_check_failure(exc: ClientError) -> bool:
    """Return True if a ClientError is a failed ConditionExpression."""
    return exc.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED


def from_dynamodb(item: dict[str, Any]) -> dict[str, Any]:
    """
    Convert DynamoDB Decimal numbers back to int/float.

    Args:
        item: Item as returned by the DynamoDB resource API

    Returns:
        Item with native Python numbers
    """
    converted: dict[str, Any] = {}
    for key, value in item.items():
        if isinstance(value, Decimal):
            converted[key] = int(value) if value == value.to_integral_value() else float(value)
        else:
            converted[key] = value
    return converted


class BaseRepository:
    """
    Base repository providing common DynamoDB operations.

    All repository methods are async and use aioboto3 for non-blocking
    database operations. Item families share one table and are told apart
    by their partition key.

    Failed ConditionExpressions propagate as ClientError so subclasses
    can map them to domain errors; every other client or connection
    failure is raised as StoreError.
    """

    def __init__(
        self,
        table_name: str | None = None,
        session: aioboto3.Session | None = None,
    ) -> None:
        """
        Initialize repository with table name.

        Args:
            table_name: Name of the DynamoDB table (defaults to settings)
            session: aioboto3 session to open resources from
        """
        self.table_name = table_name or settings.dynamodb_table
        self.session = session or aioboto3.Session()

    @asynccontextmanager
    async def table(self) -> AsyncIterator[Any]:
        """Open a DynamoDB resource and yield the table, translating failures."""
        try:
            async with self.session.resource("dynamodb", **get_dynamodb_config()) as dynamodb:
                yield await dynamodb.Table(self.table_name)
        except ClientError as exc:
            if is_conditional_check_failure(exc):
                raise
            logger.error(
                "DynamoDB request failed",
                extra={
                    "context": {
                        "table": self.table_name,
                        "error_code": exc.response.get("Error", {}).get("Code"),
                    }
                },
            )
            raise StoreError(details={"table": self.table_name}) from exc
        except BotoCoreError as exc:
            logger.error(
                "DynamoDB unreachable",
                exc_info=exc,
                extra={"context": {"table": self.table_name}},
            )
            raise StoreError(details={"table": self.table_name}) from exc

    async def put_item(
        self,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> None:
        """
        Put item into DynamoDB table.

        Args:
            item: Dictionary representing the item to store
            condition_expression: Optional ConditionExpression guarding the write
        """
        params: dict[str, Any] = {"Item": item}
        if condition_expression:
            params["ConditionExpression"] = condition_expression
        async with self.table() as table:
            await table.put_item(**params)

    async def get_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        """
        Get item from DynamoDB table by key.

        Args:
            key: Dictionary with partition and sort key

        Returns:
            Item dictionary or None if not found
        """
        async with self.table() as table:
            response = await table.get_item(Key=key, ConsistentRead=True)
        item = response.get("Item")
        return from_dynamodb(item) if item else None

    async def delete_item(self, key: dict[str, Any]) -> None:
        """
        Delete item from DynamoDB table.

        Args:
            key: Dictionary with partition and sort key
        """
        async with self.table() as table:
            await table.delete_item(Key=key)

    async def update_item(
        self,
        key: dict[str, Any],
        update_expression: str,
        expression_values: dict[str, Any],
        expression_names: dict[str, str] | None = None,
        condition_expression: str | None = None,
    ) -> dict[str, Any]:
        """
        Update item in DynamoDB table.

        Args:
            key: Dictionary with partition and sort key
            update_expression: DynamoDB update expression
            expression_values: Values for the update expression
            expression_names: Optional attribute name mappings for reserved keywords
            condition_expression: Optional ConditionExpression guarding the write

        Returns:
            Updated item attributes
        """
        params: dict[str, Any] = {
            "Key": key,
            "UpdateExpression": update_expression,
            "ExpressionAttributeValues": expression_values,
            "ReturnValues": "ALL_NEW",
        }
        if expression_names:
            params["ExpressionAttributeNames"] = expression_names
        if condition_expression:
            params["ConditionExpression"] = condition_expression

        async with self.table() as table:
            response = await table.update_item(**params)
        return from_dynamodb(response.get("Attributes", {}))

    async def query_partition(
        self,
        partition_key: str,
        limit: int | None = None,
        newest_first: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Query every item in a partition, following pagination.

        Args:
            partition_key: PK value to query
            limit: Maximum items to return (None for all)
            newest_first: Return items in descending sort-key order

        Returns:
            List of items
        """
        items: list[dict[str, Any]] = []
        params: dict[str, Any] = {
            "KeyConditionExpression": "PK = :pk",
            "ExpressionAttributeValues": {":pk": partition_key},
            "ScanIndexForward": not newest_first,
        }

        async with self.table() as table:
            while True:
                if limit is not None:
                    params["Limit"] = limit - len(items)
                response = await table.query(**params)
                items.extend(from_dynamodb(item) for item in response.get("Items", []))

                last_key = response.get("LastEvaluatedKey")
                if not last_key or (limit is not None and len(items) >= limit):
                    break
                params["ExclusiveStartKey"] = last_key

        return items
