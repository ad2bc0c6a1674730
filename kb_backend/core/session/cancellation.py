"""
Cancellation controller.

Handles {"type": "cancel"} control messages for a session.

Dependencies: kb_backend.core.session.state
System role: Mid-stream cancellation
"""

import logging

from kb_backend.core.session.state import Session
from kb_backend.models.streaming import CancelledFrame

logger = logging.getLogger(__name__)


class CancellationController:
    """Applies cancel requests to a session and builds the acknowledgment."""

    def cancel(self, session: Session, session_id: str | None = None) -> CancelledFrame:
        """
        Cancel whatever the session is streaming.

        Marks the session cancelled and signals the active token so the
        upstream model stream is abandoned. Safe to call with nothing in
        flight and any number of times.

        Args:
            session: Connection session
            session_id: Conversation id from the client message (logging only)

        Returns:
            CancelledFrame: Acknowledgment, always sent
        """
        session.cancelled = True
        token = session.active_token
        had_active = token is not None and not token.cancelled
        if token is not None:
            token.cancel()

        logger.info(
            f"{__name__}:cancel - Cancel requested",
            extra={
                "connection_id": session.connection_id,
                "session_id": session_id,
                "had_active_request": had_active,
            },
        )
        return CancelledFrame()
