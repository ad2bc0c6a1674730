"""API routers."""

from .health import router as health_router
from .ingestion import router as ingestion_router
from .query_stream import router as query_stream_router
from .visualization import router as visualization_router

__all__ = [
    "health_router",
    "ingestion_router",
    "query_stream_router",
    "visualization_router",
]
