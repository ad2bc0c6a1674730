"""
Batch ingestion service.

Stores each uploaded file in S3, classifies it with the analysis model,
and records its metadata in DynamoDB. Files are processed sequentially
and fail independently; the first successful store of a batch triggers
one background knowledge base re-index.

Dependencies: kb_backend.boundary.aws, kb_backend.core
System role: Batch Ingestion Engine
"""

import logging
import math
import uuid

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from kb_backend.boundary.aws.knowledge_base import KnowledgeBaseSync
from kb_backend.boundary.aws.s3_client import S3UploadClient
from kb_backend.boundary.aws.upload_records import UploadRecordStore, unique_topics
from kb_backend.configs.storage import S3UploadSettings
from kb_backend.core.analysis.file_classifier import parse_file_analysis
from kb_backend.core.background import fire_and_forget
from kb_backend.core.exceptions import BatchIngestionError, ValidationError
from kb_backend.core.generation.bedrock_generator import BedrockGenerator
from kb_backend.core.prompts import get_analysis_prompt
from kb_backend.core.time_utils import utc_now, utc_date, utc_timestamp
from kb_backend.models.upload import (
    BatchResult,
    IncomingFile,
    Pagination,
    UploadListResponse,
    UploadRecord,
)

logger = logging.getLogger(__name__)

MAX_PAGE_COUNT = 100
DEFAULT_PAGE_COUNT = 20


class ReindexLatch:
    """One-shot flag: the first claim() returns True, every later one False."""

    def __init__(self) -> None:
        self._claimed = False

    def claim(self) -> bool:
        if self._claimed:
            return False
        self._claimed = True
        return True

    @property
    def claimed(self) -> bool:
        return self._claimed


class IngestionService:
    """Upload, analyze and record files; list recorded uploads."""

    def __init__(
        self,
        blob_store: S3UploadClient,
        record_store: UploadRecordStore,
        generator: BedrockGenerator,
        kb_sync: KnowledgeBaseSync,
        settings: S3UploadSettings | None = None,
        use_prompt_registry: bool = False,
        prompt_label: str | None = None,
    ) -> None:
        self.blob_store = blob_store
        self.record_store = record_store
        self.generator = generator
        self.kb_sync = kb_sync
        self.settings = settings or S3UploadSettings()
        self._use_prompt_registry = use_prompt_registry
        self._prompt_label = prompt_label

    async def ingest(self, files: list[IncomingFile]) -> BatchResult:
        """
        Ingest a batch of files.

        Args:
            files: Uploaded file parts, processed in order

        Returns:
            BatchResult: Records of the stored files plus one
                "<filename>: <reason>" entry per failed file

        Raises:
            ValidationError: No files, or a file over the size limit
            BatchIngestionError: Every file failed
        """
        if not files:
            raise ValidationError("No files provided", field="files")
        for file in files:
            if file.size > self.settings.max_file_size:
                raise ValidationError("File size exceeds 1GB limit", field="files", details={"filename": file.name})

        logger.info(f"{__name__}:ingest - START files={len(files)}")
        latch = ReindexLatch()
        result = BatchResult()

        for index, file in enumerate(files, start=1):
            try:
                record = await self._ingest_file(file, latch)
            except Exception as e:
                logger.error(
                    f"{__name__}:ingest - File {index}/{len(files)} failed: {type(e).__name__}: {e}",
                    extra={"file_name": file.name},
                )
                result.errors.append(f"{file.name}: {e}")
                continue
            result.files.append(record)

        summary = result.summary
        logger.info(
            f"{__name__}:ingest - END",
            extra={"total": summary.total, "successful": summary.successful, "failed": summary.failed},
        )
        if not result.files:
            raise BatchIngestionError(result.errors)
        return result

    async def _ingest_file(self, file: IncomingFile, latch: ReindexLatch) -> UploadRecord:
        file_id = str(uuid.uuid4())
        now = utc_now()
        timestamp = utc_timestamp(now)
        key = f"{self.settings.upload_prefix}/{utc_date(now)}/{file.name}"

        # Step 1: Store blob
        await run_in_threadpool(
            self.blob_store.put_object,
            key,
            file.content,
            file.content_type,
            {"originalName": file.name, "uploadTimestamp": timestamp, "fileId": file_id},
        )

        # Step 2: Re-index once per batch, without waiting
        if latch.claim():
            fire_and_forget(self._trigger_reindex(), name="kb-reindex")

        # Step 3: Analyze
        prompt = get_analysis_prompt(
            use_registry=self._use_prompt_registry,
            label=self._prompt_label,
        ).format(filename=file.name, content_type=file.content_type, size=file.size)
        reply = await self.generator.ainvoke(prompt)
        analysis = parse_file_analysis(reply, file.name, file.content_type)

        # Step 4: Record
        record = UploadRecord(
            id=file_id,
            name=file.name,
            type=analysis.type,
            size=file.size,
            summary=analysis.summary,
            key_topics=unique_topics(analysis.key_topics),
            data_classification=analysis.data_classification,
            upload_timestamp=timestamp,
            s3_key=key,
            s3_bucket=self.blob_store.bucket,
            content_type=file.content_type,
            last_modified=timestamp,
        )
        await run_in_threadpool(self.record_store.put_record, record)
        return record

    async def _trigger_reindex(self) -> None:
        try:
            await self.kb_sync.astart_ingestion_job()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"{__name__}:_trigger_reindex - Knowledge base sync failed: {e}")

    async def list_uploads(self, page: int = 1, page_count: int = DEFAULT_PAGE_COUNT) -> UploadListResponse:
        """
        List recorded uploads, newest first.

        Args:
            page: 1-based page number (values below 1 read as 1)
            page_count: Page size, clamped to 1..100

        Returns:
            UploadListResponse: One page of records with pagination info
        """
        page = max(page, 1)
        page_count = min(max(page_count, 1), MAX_PAGE_COUNT)

        records = await run_in_threadpool(self.record_store.scan_records)
        records.sort(key=lambda record: record.upload_timestamp, reverse=True)

        total_pages = max(1, math.ceil(len(records) / page_count))
        start = (page - 1) * page_count
        return UploadListResponse(
            data=records[start : start + page_count],
            pagination=Pagination(
                page=page,
                page_count=page_count,
                has_more=page < total_pages,
                total_pages=total_pages,
            ),
        )
