"""
Correlation ID context.

Carries the request correlation id across async boundaries with contextvars.

Dependencies: contextvars
System role: Request tracing across service boundaries
"""

import uuid
from contextvars import ContextVar, Token

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")


def set_correlation_id(correlation_id: str | None = None) -> Token:
    """
    Set the correlation id for the current context.

    Args:
        correlation_id: Incoming id (a new uuid4 hex is generated if None)

    Returns:
        Token: Token for reset_correlation_id
    """
    return correlation_id_ctx.set(correlation_id or uuid.uuid4().hex)


def get_correlation_id() -> str:
    return correlation_id_ctx.get()


def reset_correlation_id(token: Token) -> None:
    correlation_id_ctx.reset(token)
