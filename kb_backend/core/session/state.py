"""
Session state for one WebSocket connection.

A Session carries the cancellation flag and the token of the request that
is currently streaming. It is owned by the connection and never persisted.

Dependencies: asyncio
System role: Query/cancellation state machine
"""

import asyncio
import uuid
from dataclasses import dataclass, field


class CancellationToken:
    """
    Abort signal for one in-flight request.

    Wraps an asyncio.Event; cancel() is idempotent.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class Session:
    """
    Connection-scoped query state.

    Attributes:
        connection_id: Identifier of the owning connection (logging only)
        cancelled: Set by a cancel message, reset when a new request starts
        active_token: Token of the request currently streaming, if any
    """

    connection_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    cancelled: bool = False
    active_token: CancellationToken | None = None

    def begin_request(self) -> CancellationToken:
        """
        Start a new request on this session.

        Resets the cancelled flag and allocates a fresh token. A request
        still streaming on the previous token is signalled so it stops
        without persisting anything.
        """
        previous = self.active_token
        if previous is not None:
            previous.cancel()
        self.cancelled = False
        token = CancellationToken()
        self.active_token = token
        return token

    def is_cancelled(self, token: CancellationToken) -> bool:
        """True when the session was cancelled or the token was signalled."""
        return token.cancelled or (self.active_token is token and self.cancelled)

    def end_request(self, token: CancellationToken) -> None:
        """Release the token if it is still the active one."""
        if self.active_token is token:
            self.active_token = None
