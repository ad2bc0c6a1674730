"""
Exception hierarchy for the knowledge base service.

Provides layered exception structure for domain-specific errors.
All exceptions carry a details dict for logging and error responses.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class KnowledgeBaseError(Exception):
    """Base exception for all knowledge base service errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message (sent to clients as-is)
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ValidationError(KnowledgeBaseError):
    """Raised when request input is rejected before any side effect."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class InvalidClientMessageError(ValidationError):
    """Raised when an inbound WebSocket message cannot be decoded."""


class BatchIngestionError(KnowledgeBaseError):
    """Raised when every file of an upload batch failed."""

    def __init__(self, errors: list[str]) -> None:
        """
        Args:
            errors: One "<filename>: <reason>" entry per failed file
        """
        self.errors = list(errors)
        super().__init__("All files failed to process", {"failed": len(self.errors)})


class StorageError(KnowledgeBaseError):
    """Raised when a blob or record store operation fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class TableNotFoundError(StorageError):
    """Raised when a DynamoDB table does not exist."""

    def __init__(self, table_name: str, operation: str | None = None) -> None:
        self.table_name = table_name
        super().__init__(
            f"Table not found: {table_name}",
            operation=operation,
            details={"table_name": table_name},
        )


class VisualizationNotFoundError(KnowledgeBaseError):
    """Raised when a visualization set cannot be found."""

    def __init__(self, set_id: str, message: str = "Visualization set not found") -> None:
        self.set_id = set_id
        super().__init__(message, {"id": set_id})


class GenerationError(KnowledgeBaseError):
    """Raised when the generation service fails."""


class RetrievalError(KnowledgeBaseError):
    """Raised when knowledge base retrieval fails."""

    def __init__(
        self,
        message: str,
        query: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if query:
            details["query"] = query[:100]
        super().__init__(message, details)
