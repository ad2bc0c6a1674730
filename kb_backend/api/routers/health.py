"""
Health and status endpoints.

Routes: GET /, GET /healthcheck, GET /health, GET /api/status

Dependencies: kb_backend.configs
System role: Health check and status HTTP API
"""

import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from kb_backend.api.deps import get_settings_dependency
from kb_backend.configs import Settings
from kb_backend.core.time_utils import utc_timestamp

_STARTED_AT = time.monotonic()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    uptime: float
    timestamp: str


class StatusResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    environment: str


router = APIRouter(tags=["health"])


@router.get("/")
async def root() -> dict:
    """Service banner."""
    return {
        "status": "healthy",
        "message": "Knowledge Base API is running",
        "documentation": "/docs",
        "endpoints": {
            "query": "WS /ws/query (history-aware knowledge base Q&A with token streaming)",
            "ingestion": "POST /api/ingest (file upload, analysis & storage), GET /api/ingest (list files)",
            "visualization": "POST /api/visualize/generate, GET /api/visualize, GET|DELETE /api/visualize/{id}",
        },
    }


@router.get("/healthcheck", response_model=HealthResponse)
async def healthcheck() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        uptime=round(time.monotonic() - _STARTED_AT, 3),
        timestamp=utc_timestamp(),
    )


@router.get("/health", response_class=PlainTextResponse)
async def health() -> str:
    """Plain-text liveness probe."""
    return "OK"


@router.get("/api/status", response_model=StatusResponse)
async def api_status(settings: Settings = Depends(get_settings_dependency)) -> StatusResponse:
    return StatusResponse(
        status="online",
        timestamp=utc_timestamp(),
        version=settings.version,
        environment=settings.environment,
    )
