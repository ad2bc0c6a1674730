"""Router helpers."""

from kb_backend.api.routers.router_utils.session_channel import SessionChannel

__all__ = ["SessionChannel"]
