"""FastAPI dependencies."""

from kb_backend.api.deps.dependencies import (
    get_cancellation_controller,
    get_ingestion_service,
    get_query_service,
    get_service_cache,
    get_settings_dependency,
    get_visualization_service,
    verify_api_key,
)

__all__ = [
    "get_cancellation_controller",
    "get_ingestion_service",
    "get_query_service",
    "get_service_cache",
    "get_settings_dependency",
    "get_visualization_service",
    "verify_api_key",
]
