"""
DynamoDB visualization sets table.

Sets are stored as camelCase documents keyed by "id". DynamoDB has no
float type, so numbers go in as Decimal and come back as int or float.

Dependencies: boto3
System role: Visualization Set Store
"""

import json
import logging
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from kb_backend.core.exceptions import StorageError, TableNotFoundError

logger = logging.getLogger(__name__)

SUMMARY_PROJECTION = "id, title, summary, createdAt, #md, visualizations[0].chartType"


def to_dynamo(document: dict[str, Any]) -> dict[str, Any]:
    """Convert a JSON document for DynamoDB (floats become Decimal, None dropped)."""
    return json.loads(json.dumps(_drop_none(document)), parse_float=Decimal)


def from_dynamo(value: Any) -> Any:
    """Convert DynamoDB values back to JSON types (Decimal -> int or float)."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {key: from_dynamo(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [from_dynamo(item) for item in value]
    if isinstance(value, set):
        return sorted(from_dynamo(item) for item in value)
    return value


def _drop_none(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _drop_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [_drop_none(item) for item in value]
    return value


class VisualizationTable:
    """boto3 resource wrapper for the visualization sets table."""

    def __init__(self, table_name: str, region: str = "us-east-1", table: Any | None = None) -> None:
        self._table_name = table_name
        self._table = table or boto3.resource("dynamodb", region_name=region).Table(table_name)

    @property
    def table_name(self) -> str:
        return self._table_name

    def put(self, document: dict[str, Any]) -> None:
        """
        Store a full set document.

        Raises:
            TableNotFoundError: If the table does not exist
            StorageError: If the write fails
        """
        try:
            self._table.put_item(Item=to_dynamo(document))
        except (ClientError, BotoCoreError) as e:
            raise self._storage_error(e, "put_item") from e

    def get(self, set_id: str) -> dict[str, Any] | None:
        """Fetch a set document, or None when absent."""
        try:
            response = self._table.get_item(Key={"id": set_id})
        except (ClientError, BotoCoreError) as e:
            raise self._storage_error(e, "get_item") from e
        item = response.get("Item")
        return from_dynamo(item) if item else None

    def delete(self, set_id: str) -> dict[str, Any] | None:
        """Delete a set; returns the deleted document, or None when it did not exist."""
        try:
            response = self._table.delete_item(Key={"id": set_id}, ReturnValues="ALL_OLD")
        except (ClientError, BotoCoreError) as e:
            raise self._storage_error(e, "delete_item") from e
        attributes = response.get("Attributes")
        return from_dynamo(attributes) if attributes else None

    def list_summaries(self) -> list[dict[str, Any]]:
        """
        Scan the table with the summary projection.

        Each entry keeps only id, title, summary, createdAt, metadata and
        the first chart's type (as visualizations: [{chartType}]).
        """
        kwargs: dict[str, Any] = {
            "ProjectionExpression": SUMMARY_PROJECTION,
            "ExpressionAttributeNames": {"#md": "metadata"},
        }
        items: list[dict[str, Any]] = []
        try:
            while True:
                page = self._table.scan(**kwargs)
                items.extend(page.get("Items", []))
                last_key = page.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise self._storage_error(e, "scan") from e
        return [from_dynamo(item) for item in items]

    def _storage_error(self, error: Exception, operation: str) -> StorageError:
        if isinstance(error, ClientError) and error.response["Error"]["Code"] == "ResourceNotFoundException":
            logger.warning(f"{__name__}:{operation} - Table does not exist", extra={"table": self._table_name})
            return TableNotFoundError(self._table_name, operation=operation)
        logger.error(f"{__name__}:{operation} - DynamoDB call failed: {error}")
        return StorageError(f"Visualization {operation} failed: {error}", operation=operation)
