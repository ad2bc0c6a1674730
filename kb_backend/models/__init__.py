"""Wire and data models."""

from kb_backend.models.common import ErrorResponse
from kb_backend.models.conversation import ConversationTurn, TurnRole
from kb_backend.models.streaming import (
    CancelledFrame,
    ChunkFrame,
    ClientCancelMessage,
    ClientQueryMessage,
    DoneFrame,
    ErrorFrame,
    Frame,
    SourceDocument,
    parse_client_message,
)
from kb_backend.models.upload import (
    BatchResult,
    BatchSummary,
    FileAnalysis,
    IncomingFile,
    Pagination,
    UploadListResponse,
    UploadRecord,
)
from kb_backend.models.visualization import (
    ChartType,
    Visualization,
    VisualizationDraft,
    VisualizationGenerateResponse,
    VisualizationMetadata,
    VisualizationSet,
)

__all__ = [
    "BatchResult",
    "BatchSummary",
    "CancelledFrame",
    "ChartType",
    "ChunkFrame",
    "ClientCancelMessage",
    "ClientQueryMessage",
    "ConversationTurn",
    "DoneFrame",
    "ErrorFrame",
    "ErrorResponse",
    "FileAnalysis",
    "Frame",
    "IncomingFile",
    "Pagination",
    "SourceDocument",
    "TurnRole",
    "UploadListResponse",
    "UploadRecord",
    "Visualization",
    "VisualizationDraft",
    "VisualizationGenerateResponse",
    "VisualizationMetadata",
    "VisualizationSet",
    "parse_client_message",
]
