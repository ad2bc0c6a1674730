"""
Upload domain models and schemas.

Upload records, file analysis results, batch results and the paginated
listing contract for the ingestion endpoints.

Dependencies: pydantic
System role: Ingestion API contracts
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class IncomingFile:
    """One file part of an upload request."""

    name: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


class FileAnalysis(BaseModel):
    """Model-produced (or fallback) classification of one file."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(min_length=1)
    summary: str = Field(min_length=1)
    key_topics: list[str] = Field(default_factory=list)
    data_classification: str = Field(min_length=1)

    @field_validator("key_topics", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class UploadRecord(BaseModel):
    """
    Stored metadata for one successfully ingested file.

    Immutable once written. Partition/sort key pair is (s3_key, version).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    version: str = "1"
    name: str
    type: str
    size: int
    summary: str
    key_topics: list[str] = Field(default_factory=list)
    data_classification: str
    upload_timestamp: str
    s3_key: str
    s3_bucket: str
    content_type: str
    last_modified: str


class BatchSummary(BaseModel):
    """Per-batch counts; total == successful + failed."""

    total: int
    successful: int
    failed: int


class BatchResult(BaseModel):
    """Outcome of one multi-file upload request."""

    files: list[UploadRecord] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def summary(self) -> BatchSummary:
        return BatchSummary(
            total=len(self.files) + len(self.errors),
            successful=len(self.files),
            failed=len(self.errors),
        )

    def to_response(self) -> dict[str, Any]:
        """Build the HTTP body; "errors" is present only when non-empty."""
        body: dict[str, Any] = {
            "files": [record.model_dump() for record in self.files],
            "summary": self.summary.model_dump(),
        }
        if self.errors:
            body["errors"] = list(self.errors)
        return body


class Pagination(BaseModel):
    """Pagination block of the upload listing."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_count: int = Field(alias="pageCount")
    has_more: bool = Field(alias="hasMore")
    total_pages: int = Field(alias="totalPages")


class UploadListResponse(BaseModel):
    """Paginated upload listing, newest first."""

    data: list[UploadRecord]
    pagination: Pagination
