"""Script to create the DynamoDB table for LocalStack or AWS."""

import asyncio
from typing import Any

import aioboto3
from botocore.exceptions import ClientError

from route53_ddns.config import settings
from route53_ddns.utils.aws import get_dynamodb_config

TTL_ATTRIBUTE = "expires_at"


async def create_ddns_table(dynamodb: Any, table_name: str) -> None:
    """
    Create the single table holding every item family.

    Records, update history, rate counters, lockouts and sessions share
    the table under different partition keys (PK) with a sort key (SK).

    Args:
        dynamodb: DynamoDB resource
        table_name: Name of the table
    """
    try:
        table = await dynamodb.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        await table.wait_until_exists()
        print(f"✓ Created table: {table_name}")
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            print(f"→ Table already exists: {table_name}")
        else:
            raise


async def enable_ttl(dynamodb: Any, table_name: str) -> None:
    """
    Enable DynamoDB TTL on the expires_at attribute.

    Args:
        dynamodb: DynamoDB resource
        table_name: Name of the table
    """
    try:
        await dynamodb.meta.client.update_time_to_live(
            TableName=table_name,
            TimeToLiveSpecification={
                "Enabled": True,
                "AttributeName": TTL_ATTRIBUTE,
            },
        )
        print(f"✓ TTL enabled on {table_name}.{TTL_ATTRIBUTE}")
    except ClientError as e:
        # Raised when TTL is already enabled
        if e.response["Error"]["Code"] == "ValidationException":
            print(f"→ TTL already configured: {table_name}")
        else:
            raise


async def main() -> None:
    """Create the table and enable TTL."""
    print("Creating DynamoDB table...")
    print(f"Region: {settings.aws_region}")
    print(f"Endpoint: {settings.dynamodb_endpoint_url or 'AWS'}")
    print()

    session = aioboto3.Session()
    async with session.resource("dynamodb", **get_dynamodb_config()) as dynamodb:
        await create_ddns_table(dynamodb, settings.dynamodb_table)
        await enable_ttl(dynamodb, settings.dynamodb_table)

    print()
    print("✓ Table ready!")


if __name__ == "__main__":
    asyncio.run(main())
