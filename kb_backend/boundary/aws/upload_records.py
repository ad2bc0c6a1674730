"""
DynamoDB store for upload records.

One item per ingested file, keyed by (objectKey, version). key_topics is a
String Set and is omitted entirely when there are no topics, since
DynamoDB rejects empty sets.

Dependencies: boto3
System role: Record store for upload metadata
"""

import logging
from typing import Any

import boto3
from boto3.dynamodb.types import TypeDeserializer
from botocore.exceptions import BotoCoreError, ClientError

from kb_backend.core.exceptions import StorageError, TableNotFoundError
from kb_backend.models.upload import UploadRecord

logger = logging.getLogger(__name__)

_deserializer = TypeDeserializer()


def unique_topics(topics: list[str]) -> list[str]:
    """Drop blank and duplicate topics, keeping first-seen order."""
    seen: dict[str, None] = {}
    for topic in topics:
        cleaned = topic.strip()
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return list(seen)


def record_to_item(record: UploadRecord) -> dict[str, dict[str, Any]]:
    """Build the typed DynamoDB item for a record."""
    item: dict[str, dict[str, Any]] = {
        "objectKey": {"S": record.s3_key},
        "version": {"S": record.version},
        "id": {"S": record.id},
        "name": {"S": record.name},
        "type": {"S": record.type},
        "size": {"N": str(record.size)},
        "summary": {"S": record.summary},
        "data_classification": {"S": record.data_classification},
        "upload_timestamp": {"S": record.upload_timestamp},
        "s3_key": {"S": record.s3_key},
        "s3_bucket": {"S": record.s3_bucket},
        "contentType": {"S": record.content_type},
        "lastModified": {"S": record.last_modified},
    }
    topics = unique_topics(record.key_topics)
    if topics:
        item["key_topics"] = {"SS": topics}
    return item


def item_to_record(item: dict[str, dict[str, Any]]) -> UploadRecord:
    """
    Decode a typed DynamoDB item; a missing key_topics reads as [].

    key_topics is read from the raw SS list, since deserializing a String Set
    yields an unordered set.
    """
    data = {key: _deserializer.deserialize(value) for key, value in item.items()}
    s3_key = data.get("s3_key") or data.get("objectKey", "")
    return UploadRecord(
        id=data.get("id", ""),
        version=str(data.get("version", "1")),
        name=data.get("name", ""),
        type=data.get("type", ""),
        size=int(data.get("size", 0)),
        summary=data.get("summary", ""),
        key_topics=list(item.get("key_topics", {}).get("SS", [])),
        data_classification=data.get("data_classification", ""),
        upload_timestamp=data.get("upload_timestamp", ""),
        s3_key=s3_key,
        s3_bucket=data.get("s3_bucket", ""),
        content_type=data.get("contentType") or data.get("content_type", ""),
        last_modified=data.get("lastModified") or data.get("last_modified", ""),
    )


class UploadRecordStore:
    """Low-level DynamoDB client wrapper for the upload records table."""

    def __init__(self, table_name: str, region: str = "us-east-1", client: Any | None = None) -> None:
        self._table_name = table_name
        self._client = client or boto3.client("dynamodb", region_name=region)

    def put_record(self, record: UploadRecord) -> None:
        """
        Write one record.

        Raises:
            StorageError: If the write fails
        """
        try:
            self._client.put_item(TableName=self._table_name, Item=record_to_item(record))
        except (ClientError, BotoCoreError) as e:
            raise self._storage_error(e, "put_item") from e
        logger.info(f"{__name__}:put_record - Stored record", extra={"id": record.id, "s3_key": record.s3_key})

    def scan_records(self, limit: int | None = None) -> list[UploadRecord]:
        """
        Scan the table.

        Args:
            limit: Stop after this many items (None scans every page)

        Returns:
            list[UploadRecord]: Records in table order
        """
        records: list[UploadRecord] = []
        kwargs: dict[str, Any] = {"TableName": self._table_name}
        try:
            while True:
                if limit is not None:
                    kwargs["Limit"] = limit - len(records)
                page = self._client.scan(**kwargs)
                records.extend(item_to_record(item) for item in page.get("Items", []))
                last_key = page.get("LastEvaluatedKey")
                if not last_key or (limit is not None and len(records) >= limit):
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise self._storage_error(e, "scan") from e

        logger.info(f"{__name__}:scan_records - Scanned records", extra={"count": len(records)})
        return records

    def _storage_error(self, error: Exception, operation: str) -> StorageError:
        if isinstance(error, ClientError) and error.response["Error"]["Code"] == "ResourceNotFoundException":
            return TableNotFoundError(self._table_name, operation=operation)
        logger.error(f"{__name__}:{operation} - DynamoDB call failed: {error}")
        return StorageError(f"DynamoDB {operation} failed: {error}", operation=operation)
