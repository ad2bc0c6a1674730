"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers, the JSON error envelope and
observability middleware, and configures the uvicorn server.

Dependencies: fastapi, kb_backend.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kb_backend.api.deps.dependencies import get_service_cache
from kb_backend.configs import Settings, get_settings
from kb_backend.core.exceptions import (
    BatchIngestionError,
    KnowledgeBaseError,
    ValidationError,
    VisualizationNotFoundError,
)
from kb_backend.core.prompts import register_all_prompts
from kb_backend.models.common import ErrorResponse
from kb_backend.observability.logger import configure_logging
from kb_backend.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import health_router, ingestion_router, query_stream_router, visualization_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    # Startup
    logger.info("Pre-warming service cache...")
    cache = get_service_cache()
    _ = cache.query_service
    _ = cache.ingestion_service
    _ = cache.visualization_service
    logger.info("Service cache pre-warmed", extra={"environment": settings.environment})

    if settings.query.use_prompt_registry:
        register_all_prompts(
            model_id=settings.bedrock.model_id,
            temperature=settings.bedrock.temperature,
            labels=[settings.query.prompt_label],
        )

    yield

    # Shutdown
    cache.clear()
    logger.info("Service cache cleared")


def _error_response(status_code: int, error: str, errors: list[str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error, errors=errors).to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"error": ..., "timestamp": ...}."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(status.HTTP_400_BAD_REQUEST, exc.message)

    @app.exception_handler(VisualizationNotFoundError)
    async def not_found_handler(request: Request, exc: VisualizationNotFoundError) -> JSONResponse:
        return _error_response(status.HTTP_404_NOT_FOUND, exc.message)

    @app.exception_handler(BatchIngestionError)
    async def batch_error_handler(request: Request, exc: BatchIngestionError) -> JSONResponse:
        logger.error(f"{__name__}:batch_error_handler - {exc.message}", extra={"errors": exc.errors})
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message, errors=exc.errors)

    @app.exception_handler(KnowledgeBaseError)
    async def domain_error_handler(request: Request, exc: KnowledgeBaseError) -> JSONResponse:
        logger.error(
            f"{__name__}:domain_error_handler - {type(exc).__name__}: {exc.message}",
            extra={"path": request.url.path, "details": exc.details},
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        error = "Not Found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
        response = _error_response(exc.status_code, error)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"{__name__}:unhandled_error_handler - Unhandled error on {request.url.path}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Args:
        settings: Settings override (defaults to the process settings)

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = settings or get_settings()
    app = FastAPI(
        title="Knowledge Base API",
        description="Knowledge base Q&A streaming, file ingestion and visualization service",
        version=settings.version,
        lifespan=lifespan,
    )

    # CORS: the public host plus any configured extra origins
    origins = [settings.api.host_header, *settings.api.allowed_origins]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(query_stream_router)
    app.include_router(ingestion_router)
    app.include_router(visualization_router)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "kb_backend.api.main:app",
        host="0.0.0.0",
        port=get_settings().api.port,
    )
