"""Base repository class with common DynamoDB operations."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from adoption_api.config import settings
from adoption_api.exceptions import StoreUnavailableError
from adoption_api.logging.config import get_logger

logger = get_logger(__name__)


class ConditionFailedError(Exception):
    """Raised when a conditional DynamoDB write does not apply."""


def get_dynamodb_config() -> dict[str, Any]:
    """
    Build DynamoDB resource parameters based on environment.

    For AWS with IAM roles, returns minimal config (region only).
    For LocalStack, includes endpoint_url and explicit credentials.

    Returns:
        Dictionary of aioboto3 resource parameters
    """
    config: dict[str, Any] = {"region_name": settings.aws_region}

    if settings.dynamodb_endpoint_url:
        config["endpoint_url"] = settings.dynamodb_endpoint_url

    # Lambda supplies temporary credentials, all three must be passed
    if settings.aws_access_key_id:
        config["aws_access_key_id"] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        config["aws_secret_access_key"] = settings.aws_secret_access_key
    if settings.aws_session_token:
        config["aws_session_token"] = settings.aws_session_token

    return config


class BaseRepository:
    """
    Base repository providing common DynamoDB operations.

    All methods are async and use aioboto3. Conditional write failures raise
    ConditionFailedError; any other client or transport error raises
    StoreUnavailableError so callers never silently bypass the store.
    """

    def __init__(self, table_name: str) -> None:
        """
        Initialize repository with table name.

        Args:
            table_name: Name of the DynamoDB table
        """
        self.table_name = table_name
        self.session = aioboto3.Session()

    @asynccontextmanager
    async def table(self) -> AsyncIterator[Any]:
        """Yield the DynamoDB Table resource, translating backend errors."""
        try:
            async with self.session.resource(
                "dynamodb", **get_dynamodb_config()
            ) as dynamodb:
                yield await dynamodb.Table(self.table_name)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code == "ConditionalCheckFailedException":
                raise ConditionFailedError(self.table_name) from exc
            self._log_failure(exc)
            raise StoreUnavailableError(store=self.table_name) from exc
        except BotoCoreError as exc:
            self._log_failure(exc)
            raise StoreUnavailableError(store=self.table_name) from exc

    def _log_failure(self, exc: Exception) -> None:
        logger.error(
            "DynamoDB operation failed",
            exc_info=exc,
            extra={"context": {"table": self.table_name}},
        )

    async def put_item(
        self,
        item: dict[str, Any],
        condition_expression: str | None = None,
        expression_values: dict[str, Any] | None = None,
    ) -> None:
        """
        Put item into the table, optionally guarded by a condition.

        Args:
            item: Dictionary representing the item to store
            condition_expression: Optional DynamoDB condition expression
            expression_values: Values referenced by the condition
        """
        params: dict[str, Any] = {"Item": item}
        if condition_expression:
            params["ConditionExpression"] = condition_expression
        if expression_values:
            params["ExpressionAttributeValues"] = expression_values

        async with self.table() as table:
            await table.put_item(**params)

    async def get_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        """
        Get item from the table by key.

        Args:
            key: Dictionary with partition key and optionally sort key

        Returns:
            Item dictionary or None if not found
        """
        async with self.table() as table:
            response = await table.get_item(Key=key, ConsistentRead=True)
            return response.get("Item")

    async def delete_item(
        self, key: dict[str, Any], return_old: bool = False
    ) -> dict[str, Any] | None:
        """
        Delete item from the table.

        Args:
            key: Dictionary with partition key and optionally sort key
            return_old: Whether to return the deleted item

        Returns:
            The deleted item when requested and present, else None
        """
        params: dict[str, Any] = {"Key": key}
        if return_old:
            params["ReturnValues"] = "ALL_OLD"

        async with self.table() as table:
            response = await table.delete_item(**params)
            return response.get("Attributes") if return_old else None

    async def update_item(
        self,
        key: dict[str, Any],
        update_expression: str,
        expression_values: dict[str, Any],
        expression_names: dict[str, str] | None = None,
        condition_expression: str | None = None,
        return_values: str = "ALL_NEW",
    ) -> dict[str, Any]:
        """
        Update item in the table.

        Args:
            key: Dictionary with partition key and optionally sort key
            update_expression: DynamoDB update expression
            expression_values: Values for the update expression
            expression_names: Optional attribute name mappings for reserved keywords
            condition_expression: Optional condition guarding the update
            return_values: DynamoDB ReturnValues option

        Returns:
            Attributes selected by ``return_values``
        """
        update_params: dict[str, Any] = {
            "Key": key,
            "UpdateExpression": update_expression,
            "ExpressionAttributeValues": expression_values,
            "ReturnValues": return_values,
        }
        if expression_names:
            update_params["ExpressionAttributeNames"] = expression_names
        if condition_expression:
            update_params["ConditionExpression"] = condition_expression

        async with self.table() as table:
            response = await table.update_item(**update_params)
            return response.get("Attributes", {})

    async def scan_items(self, **scan_params: Any) -> list[dict[str, Any]]:
        """
        Scan the whole table, following pagination.

        Args:
            scan_params: Extra scan parameters (e.g. FilterExpression)

        Returns:
            All matching items
        """
        items: list[dict[str, Any]] = []
        async with self.table() as table:
            response = await table.scan(**scan_params)
            items.extend(response.get("Items", []))
            while "LastEvaluatedKey" in response:
                response = await table.scan(
                    ExclusiveStartKey=response["LastEvaluatedKey"],
                    **scan_params,
                )
                items.extend(response.get("Items", []))
        return items

    async def query_items(self, **query_params: Any) -> list[dict[str, Any]]:
        """
        Query the table or one of its indexes.

        Args:
            query_params: Query parameters (IndexName, KeyConditionExpression...)

        Returns:
            Items of the first result page
        """
        async with self.table() as table:
            response = await table.query(**query_params)
            return response.get("Items", [])
