"""Script to create DynamoDB tables for LocalStack or AWS."""

import asyncio
from typing import Any, Dict, List, Optional

import aioboto3
from botocore.exceptions import ClientError

from adoption_api.config import settings

THROUGHPUT = {"ReadCapacityUnits": 5, "WriteCapacityUnits": 5}


async def create_table(
    dynamodb: Any,
    table_name: str,
    partition_key: str,
    attribute_definitions: List[Dict[str, str]],
    global_secondary_indexes: Optional[List[Dict[str, Any]]] = None,
    ttl_attribute: Optional[str] = None,
) -> None:
    """
    Create a table keyed by ``partition_key`` if it does not exist yet.

    Args:
        dynamodb: DynamoDB resource
        table_name: Name of the table
        partition_key: Hash key attribute name
        attribute_definitions: Key attribute types (table and indexes)
        global_secondary_indexes: Optional GSI definitions
        ttl_attribute: Attribute to enable DynamoDB TTL on
    """
    params: Dict[str, Any] = {
        "TableName": table_name,
        "KeySchema": [{"AttributeName": partition_key, "KeyType": "HASH"}],
        "AttributeDefinitions": attribute_definitions,
        "BillingMode": "PROVISIONED",
        "ProvisionedThroughput": THROUGHPUT,
    }
    if global_secondary_indexes:
        params["GlobalSecondaryIndexes"] = global_secondary_indexes

    try:
        table = await dynamodb.create_table(**params)
        await table.wait_until_exists()
        print(f"✓ Created table: {table_name}")
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            print(f"→ Table already exists: {table_name}")
        else:
            raise

    if ttl_attribute:
        await enable_ttl(dynamodb, table_name, ttl_attribute)


async def enable_ttl(dynamodb: Any, table_name: str, attribute: str) -> None:
    """Enable TTL on ``attribute``; already-enabled TTL is left alone."""
    try:
        await dynamodb.meta.client.update_time_to_live(
            TableName=table_name,
            TimeToLiveSpecification={"Enabled": True, "AttributeName": attribute},
        )
        print(f"  TTL enabled on {table_name}.{attribute}")
    except ClientError as e:
        if e.response["Error"]["Code"] == "ValidationException":
            print(f"  TTL already configured on {table_name}")
        else:
            raise


async def create_api_keys_table(dynamodb: Any, table_name: str) -> None:
    """
    API keys: partition key ``key_value`` for lookups, ``IdIndex`` for
    revocation by id.
    """
    await create_table(
        dynamodb,
        table_name,
        partition_key="key_value",
        attribute_definitions=[
            {"AttributeName": "key_value", "AttributeType": "S"},
            {"AttributeName": "id", "AttributeType": "N"},
        ],
        global_secondary_indexes=[
            {
                "IndexName": "IdIndex",
                "KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}],
                "Projection": {"ProjectionType": "ALL"},
                "ProvisionedThroughput": THROUGHPUT,
            }
        ],
    )


async def create_idempotency_table(dynamodb: Any, table_name: str) -> None:
    await create_table(
        dynamodb,
        table_name,
        partition_key="cache_key",
        attribute_definitions=[{"AttributeName": "cache_key", "AttributeType": "S"}],
        ttl_attribute="expires_at",
    )


async def create_rate_limits_table(dynamodb: Any, table_name: str) -> None:
    await create_table(
        dynamodb,
        table_name,
        partition_key="client_key",
        attribute_definitions=[{"AttributeName": "client_key", "AttributeType": "S"}],
        ttl_attribute="expires_at",
    )


async def main() -> None:
    """Create all required DynamoDB tables."""
    print("Creating DynamoDB tables...")
    print(f"Region: {settings.aws_region}")
    print(f"Endpoint: {settings.dynamodb_endpoint_url or 'AWS'}")
    print()

    session = aioboto3.Session()
    async with session.resource(
        "dynamodb",
        region_name=settings.aws_region,
        endpoint_url=settings.dynamodb_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    ) as dynamodb:
        await create_api_keys_table(dynamodb, settings.dynamodb_table_api_keys)
        await create_idempotency_table(dynamodb, settings.dynamodb_table_idempotency)
        await create_rate_limits_table(dynamodb, settings.dynamodb_table_rate_limits)

    print()
    print("✓ All tables created successfully!")


if __name__ == "__main__":
    asyncio.run(main())
