"""Application services."""

from kb_backend.application.services.ingestion_service import IngestionService, ReindexLatch
from kb_backend.application.services.query_service import QueryService
from kb_backend.application.services.visualization_service import VisualizationService

__all__ = ["IngestionService", "QueryService", "ReindexLatch", "VisualizationService"]
