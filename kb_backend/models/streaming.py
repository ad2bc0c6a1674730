"""
Streaming frame schemas for the WebSocket query channel.

Defines inbound client messages and outbound frames for real-time
query streaming and cancellation.

Dependencies: pydantic
System role: Streaming protocol schemas
"""

import json
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from kb_backend.core.exceptions import InvalidClientMessageError


class FrameType(str, Enum):
    """Server-to-client frame types."""

    CHUNK = "chunk"
    DONE = "done"
    CANCELLED = "cancelled"


class ClientMessageType(str, Enum):
    """Client-to-server control message types."""

    CANCEL = "cancel"


class SourceDocument(BaseModel):
    """
    Retrieved document returned with a completed answer.

    Attributes:
        content: Document text
        metadata: Source metadata (location, score, page, ...)
    """

    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class ChunkFrame(BaseModel):
    """One streamed answer fragment."""

    type: Literal[FrameType.CHUNK] = FrameType.CHUNK
    data: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {"type": self.type.value, "data": self.data}


class DoneFrame(BaseModel):
    """Terminal frame of a completed request."""

    type: Literal[FrameType.DONE] = FrameType.DONE
    sources: list[SourceDocument] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "sources": [source.model_dump() for source in self.sources],
        }


class CancelledFrame(BaseModel):
    """Acknowledgment of a cancel control message."""

    type: Literal[FrameType.CANCELLED] = FrameType.CANCELLED
    message: str = "Request cancelled successfully"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "message": self.message}


class ErrorFrame(BaseModel):
    """Terminal frame of a failed request (no type field on the wire)."""

    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error}


Frame = Union[ChunkFrame, DoneFrame, CancelledFrame, ErrorFrame]


class ClientQueryMessage(BaseModel):
    """
    Query message: {"sessionId": "...", "query": "..."}.

    Both fields are optional here; emptiness is reported by the
    query service as an error frame.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_id: str | None = Field(default=None, alias="sessionId")
    query: str | None = None


class ClientCancelMessage(BaseModel):
    """Control message: {"type": "cancel", "sessionId": "..."}."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: Literal[ClientMessageType.CANCEL] = ClientMessageType.CANCEL
    session_id: str | None = Field(default=None, alias="sessionId")


ClientMessage = Union[ClientQueryMessage, ClientCancelMessage]


def parse_client_message(raw: str) -> ClientMessage:
    """
    Decode one inbound WebSocket text message.

    A message whose "type" is "cancel" is a control message; a message
    without "type" is a query.

    Args:
        raw: Raw text received from the socket

    Returns:
        ClientMessage: Parsed query or cancel message

    Raises:
        InvalidClientMessageError: Malformed JSON, non-object payload,
            unknown type or wrongly typed fields
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidClientMessageError(f"Invalid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise InvalidClientMessageError("Message must be a JSON object")

    message_type = data.get("type")
    try:
        if message_type == ClientMessageType.CANCEL.value:
            return ClientCancelMessage.model_validate(data)
        if message_type is None:
            return ClientQueryMessage.model_validate(data)
    except PydanticValidationError as e:
        raise InvalidClientMessageError(
            f"Invalid message fields: {e.error_count()} error(s)"
        ) from e

    raise InvalidClientMessageError(f"Unknown message type: {message_type}", field="type")
