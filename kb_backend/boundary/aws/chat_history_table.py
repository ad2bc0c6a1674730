"""
DynamoDB chat history table.

Item layout: {"id": <session id>, "History": [<LangChain message dict>, ...]}.
Appends use list_append so several messages land in one atomic write.

Dependencies: boto3
System role: History store backend
"""

import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from kb_backend.core.exceptions import StorageError, TableNotFoundError

logger = logging.getLogger(__name__)

PARTITION_KEY = "id"
HISTORY_ATTRIBUTE = "History"


class ChatHistoryTable:
    """boto3 resource wrapper for the chat history table."""

    def __init__(self, table_name: str, region: str = "us-east-1", table: Any | None = None) -> None:
        """
        Args:
            table_name: DynamoDB table name
            region: AWS region
            table: Pre-built boto3 Table resource (tests)
        """
        self._table_name = table_name
        self._table = table or boto3.resource("dynamodb", region_name=region).Table(table_name)

    def load(self, session_id: str) -> list[dict[str, Any]]:
        """Return the stored message dicts for a session, oldest first."""
        try:
            response = self._table.get_item(Key={PARTITION_KEY: session_id})
        except (ClientError, BotoCoreError) as e:
            raise self._storage_error(e, "get_item") from e
        item = response.get("Item") or {}
        return list(item.get(HISTORY_ATTRIBUTE, []))

    def append(self, session_id: str, messages: list[dict[str, Any]]) -> None:
        """
        Append message dicts in one UpdateItem call.

        Either every message is appended or none is.
        """
        if not messages:
            return
        try:
            self._table.update_item(
                Key={PARTITION_KEY: session_id},
                UpdateExpression="SET #history = list_append(if_not_exists(#history, :empty), :messages)",
                ExpressionAttributeNames={"#history": HISTORY_ATTRIBUTE},
                ExpressionAttributeValues={":empty": [], ":messages": messages},
            )
        except (ClientError, BotoCoreError) as e:
            raise self._storage_error(e, "update_item") from e
        logger.info(
            f"{__name__}:append - Appended messages",
            extra={"session_id": session_id, "count": len(messages)},
        )

    def delete(self, session_id: str) -> None:
        try:
            self._table.delete_item(Key={PARTITION_KEY: session_id})
        except (ClientError, BotoCoreError) as e:
            raise self._storage_error(e, "delete_item") from e

    def _storage_error(self, error: Exception, operation: str) -> StorageError:
        if isinstance(error, ClientError) and error.response["Error"]["Code"] == "ResourceNotFoundException":
            return TableNotFoundError(self._table_name, operation=operation)
        logger.error(f"{__name__}:{operation} - DynamoDB call failed: {error}")
        return StorageError(f"Chat history {operation} failed: {error}", operation=operation)
