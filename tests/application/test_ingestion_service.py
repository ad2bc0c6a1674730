"""
Test suite for IngestionService.

Tests batch ingestion (blob store, analysis, record write), partial and
total failures, the once-per-batch re-index trigger and upload listing
with pagination. Uses mocked AWS clients and a fake generator.

System role: Verification of the batch ingestion engine
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from kb_backend.application.services.ingestion_service import IngestionService, ReindexLatch
from kb_backend.configs.storage import S3UploadSettings
from kb_backend.core.background import pending_tasks
from kb_backend.core.exceptions import BatchIngestionError, StorageError, ValidationError
from kb_backend.models.upload import IncomingFile, UploadRecord

ANALYSIS_REPLY = "Here is the analysis:\n" + json.dumps(
    {
        "type": "Sales Report",
        "summary": "Quarterly sales by region.",
        "key_topics": ["sales", "regions", "sales"],
        "data_classification": "Commercial Analytics",
    }
)


@pytest.fixture
def blob_store() -> MagicMock:
    store = MagicMock()
    store.bucket = "kb-uploads-bucket"
    return store


@pytest.fixture
def record_store() -> MagicMock:
    return MagicMock()


@pytest.fixture
def kb_sync() -> MagicMock:
    sync = MagicMock()
    sync.astart_ingestion_job = AsyncMock(return_value="job-1")
    return sync


@pytest.fixture
def ingestion_service(blob_store, record_store, kb_sync, make_generator) -> IngestionService:
    """Provide IngestionService with mocked clients."""
    return IngestionService(
        blob_store=blob_store,
        record_store=record_store,
        generator=make_generator(reply=ANALYSIS_REPLY),
        kb_sync=kb_sync,
        settings=S3UploadSettings(bucket_name="kb-uploads-bucket", upload_prefix="uploads"),
    )


def make_record(name: str, timestamp: str) -> UploadRecord:
    return UploadRecord(
        id=name,
        name=name,
        type="Commercial Dataset",
        size=10,
        summary="summary",
        key_topics=[],
        data_classification="Commercial Data",
        upload_timestamp=timestamp,
        s3_key=f"uploads/2024-01-01/{name}",
        s3_bucket="kb-uploads-bucket",
        content_type="text/csv",
        last_modified=timestamp,
    )


async def drain_background_tasks() -> None:
    await asyncio.gather(*pending_tasks(), return_exceptions=True)


class TestIngest:
    """Test suite for batch ingestion."""

    @pytest.mark.asyncio
    async def test_ingest_should_store_analyze_and_record(
        self, ingestion_service: IngestionService, blob_store, record_store
    ) -> None:
        # Arrange
        files = [IncomingFile(name="sales.csv", content=b"a,b\n1,2", content_type="text/csv")]

        # Act
        result = await ingestion_service.ingest(files)
        await drain_background_tasks()

        # Assert
        record = result.files[0]
        assert result.summary.model_dump() == {"total": 1, "successful": 1, "failed": 0}
        assert record.type == "Sales Report"
        assert record.key_topics == ["sales", "regions"]
        assert record.size == 7
        assert record.s3_bucket == "kb-uploads-bucket"
        assert record.s3_key.startswith("uploads/") and record.s3_key.endswith("/sales.csv")
        assert record.upload_timestamp.endswith("Z")

        key, body, content_type, metadata = blob_store.put_object.call_args.args
        assert key == record.s3_key
        assert body == b"a,b\n1,2"
        assert content_type == "text/csv"
        assert metadata == {
            "originalName": "sales.csv",
            "uploadTimestamp": record.upload_timestamp,
            "fileId": record.id,
        }
        record_store.put_record.assert_called_once_with(record)

    @pytest.mark.asyncio
    async def test_unparseable_analysis_should_use_default_classification(
        self, blob_store, record_store, kb_sync, make_generator
    ) -> None:
        # Arrange
        service = IngestionService(
            blob_store=blob_store,
            record_store=record_store,
            generator=make_generator(reply="I cannot analyze this file."),
            kb_sync=kb_sync,
        )

        # Act
        result = await service.ingest([IncomingFile("clinical_trial.pdf", b"%PDF", "application/pdf")])
        await drain_background_tasks()

        # Assert
        assert result.files[0].type == "HEOR Evidence Package"
        assert result.files[0].data_classification == "HEOR Evidence"

    @pytest.mark.asyncio
    async def test_reindex_should_trigger_once_per_batch(
        self, ingestion_service: IngestionService, kb_sync
    ) -> None:
        # Arrange
        files = [IncomingFile(f"file{i}.txt", b"data", "text/plain") for i in range(3)]

        # Act
        await ingestion_service.ingest(files)
        await drain_background_tasks()

        # Assert
        kb_sync.astart_ingestion_job.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reindex_failure_should_not_fail_batch(
        self, ingestion_service: IngestionService, kb_sync
    ) -> None:
        # Arrange
        from botocore.exceptions import ClientError

        kb_sync.astart_ingestion_job.side_effect = ClientError(
            {"Error": {"Code": "ConflictException", "Message": "busy"}}, "StartIngestionJob"
        )

        # Act
        result = await ingestion_service.ingest([IncomingFile("a.txt", b"data", "text/plain")])
        await drain_background_tasks()

        # Assert
        assert result.summary.successful == 1

    @pytest.mark.asyncio
    async def test_second_record_write_failure_should_be_reported_per_file(
        self, ingestion_service: IngestionService, record_store
    ) -> None:
        """One file stored, one error entry, summary counts both."""
        # Arrange
        record_store.put_record.side_effect = [None, StorageError("DynamoDB put_item failed: throttled")]
        files = [
            IncomingFile("first.txt", b"one", "text/plain"),
            IncomingFile("second.txt", b"two", "text/plain"),
        ]

        # Act
        result = await ingestion_service.ingest(files)
        await drain_background_tasks()

        # Assert
        assert [record.name for record in result.files] == ["first.txt"]
        assert result.errors == ["second.txt: DynamoDB put_item failed: throttled"]
        assert result.summary.model_dump() == {"total": 2, "successful": 1, "failed": 1}
        assert result.to_response()["errors"] == result.errors

    @pytest.mark.asyncio
    async def test_all_files_failing_should_raise_batch_error(
        self, ingestion_service: IngestionService, blob_store, kb_sync
    ) -> None:
        # Arrange
        blob_store.put_object.side_effect = StorageError("S3 upload failed: access denied")
        files = [IncomingFile("a.txt", b"1", "text/plain"), IncomingFile("b.txt", b"2", "text/plain")]

        # Act
        with pytest.raises(BatchIngestionError) as exc_info:
            await ingestion_service.ingest(files)

        # Assert
        assert exc_info.value.message == "All files failed to process"
        assert exc_info.value.errors == [
            "a.txt: S3 upload failed: access denied",
            "b.txt: S3 upload failed: access denied",
        ]
        kb_sync.astart_ingestion_job.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_batch_should_be_rejected(self, ingestion_service: IngestionService) -> None:
        with pytest.raises(ValidationError, match="No files provided"):
            await ingestion_service.ingest([])

    @pytest.mark.asyncio
    async def test_oversized_file_should_reject_whole_batch(
        self, blob_store, record_store, kb_sync, make_generator
    ) -> None:
        # Arrange
        service = IngestionService(
            blob_store=blob_store,
            record_store=record_store,
            generator=make_generator(reply=ANALYSIS_REPLY),
            kb_sync=kb_sync,
            settings=S3UploadSettings(max_file_size=4),
        )
        files = [IncomingFile("small.txt", b"ok", "text/plain"), IncomingFile("big.txt", b"too big", "text/plain")]

        # Act
        with pytest.raises(ValidationError, match="File size exceeds 1GB limit"):
            await service.ingest(files)

        # Assert
        blob_store.put_object.assert_not_called()


class TestListUploads:
    """Test suite for paginated listing."""

    @pytest.mark.asyncio
    async def test_list_should_sort_newest_first_and_paginate(
        self, ingestion_service: IngestionService, record_store
    ) -> None:
        # Arrange
        record_store.scan_records.return_value = [
            make_record("old.csv", "2024-01-01T00:00:00.000Z"),
            make_record("new.csv", "2024-03-01T00:00:00.000Z"),
            make_record("mid.csv", "2024-02-01T00:00:00.000Z"),
        ]

        # Act
        first = await ingestion_service.list_uploads(page=1, page_count=2)
        second = await ingestion_service.list_uploads(page=2, page_count=2)

        # Assert
        assert [record.name for record in first.data] == ["new.csv", "mid.csv"]
        assert first.pagination.model_dump(by_alias=True) == {
            "page": 1,
            "pageCount": 2,
            "hasMore": True,
            "totalPages": 2,
        }
        assert [record.name for record in second.data] == ["old.csv"]
        assert second.pagination.has_more is False

    @pytest.mark.asyncio
    async def test_list_should_clamp_page_size_and_report_one_page_when_empty(
        self, ingestion_service: IngestionService, record_store
    ) -> None:
        # Arrange
        record_store.scan_records.return_value = []

        # Act
        response = await ingestion_service.list_uploads(page=0, page_count=500)

        # Assert
        assert response.data == []
        assert response.pagination.page == 1
        assert response.pagination.page_count == 100
        assert response.pagination.total_pages == 1
        assert response.pagination.has_more is False


class TestReindexLatch:
    def test_only_first_claim_should_succeed(self) -> None:
        latch = ReindexLatch()

        assert latch.claim() is True
        assert latch.claim() is False
        assert latch.claimed is True
