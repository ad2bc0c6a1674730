"""
Ingestion API endpoints.

Routes:
- POST /api/ingest - Upload, analyze and record one or more files
- GET /api/ingest - Paginated list of recorded uploads, newest first

Dependencies: kb_backend.application.services.ingestion_service
System role: Ingestion HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from starlette.datastructures import UploadFile

from kb_backend.api.deps import get_ingestion_service, get_settings_dependency, verify_api_key
from kb_backend.application.services.ingestion_service import DEFAULT_PAGE_COUNT, IngestionService
from kb_backend.configs import Settings
from kb_backend.core.exceptions import ValidationError
from kb_backend.models.upload import IncomingFile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ingest", tags=["ingestion"], dependencies=[Depends(verify_api_key)])


def parse_int(value: str | None, default: int) -> int:
    """Lenient query integer: missing, zero or non-numeric values give the default."""
    try:
        parsed = int(value) if value is not None else 0
    except ValueError:
        return default
    return parsed or default


@router.post("")
async def ingest_files(
    request: Request,
    service: IngestionService = Depends(get_ingestion_service),
    settings: Settings = Depends(get_settings_dependency),
) -> dict:
    """
    Upload and analyze files.

    Accepts multipart/form-data with file parts under any field name.

    Returns:
        dict: {"files": [...], "summary": {...}, "errors"?: [...]}

    Raises:
        ValidationError(400): No files, or a file over 1 GiB
        BatchIngestionError(500): Every file failed
    """
    form = await request.form()
    uploads = [value for _, value in form.multi_items() if isinstance(value, UploadFile)]

    for upload in uploads:
        if upload.size is not None and upload.size > settings.s3.max_file_size:
            raise ValidationError("File size exceeds 1GB limit", field="files", details={"filename": upload.filename})

    files = [
        IncomingFile(
            name=upload.filename or "upload",
            content=await upload.read(),
            content_type=upload.content_type or "application/octet-stream",
        )
        for upload in uploads
    ]
    await form.close()

    logger.info("Ingestion request received", extra={"file_count": len(files)})
    result = await service.ingest(files)
    return result.to_response()


@router.get("")
async def list_uploads(
    page: str | None = Query(default=None),
    page_count: str | None = Query(default=None, alias="pageCount"),
    service: IngestionService = Depends(get_ingestion_service),
) -> dict:
    """
    List recorded uploads.

    Query params:
        page: 1-based page number (default 1)
        pageCount: Page size, max 100 (default 20)
    """
    response = await service.list_uploads(
        page=parse_int(page, 1),
        page_count=parse_int(page_count, DEFAULT_PAGE_COUNT),
    )
    return response.model_dump(by_alias=True)
