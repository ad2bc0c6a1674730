"""Per-connection session state and cancellation."""

from kb_backend.core.session.cancellation import CancellationController
from kb_backend.core.session.state import CancellationToken, Session

__all__ = ["CancellationController", "CancellationToken", "Session"]
