"""
Common response models.

Error envelope shared by every HTTP endpoint.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel, Field

from kb_backend.core.time_utils import utc_timestamp


class ErrorResponse(BaseModel):
    """Error response schema: {"error", "timestamp", "errors"?}."""

    error: str = Field(description="Error message")
    timestamp: str = Field(default_factory=utc_timestamp)
    errors: list[str] | None = Field(default=None, description="Per-file failures")

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)
