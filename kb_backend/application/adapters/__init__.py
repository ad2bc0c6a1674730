"""Application adapters."""

from kb_backend.application.adapters.chat_history_adapter import ChatHistoryAdapter, ChatHistoryStore

__all__ = ["ChatHistoryAdapter", "ChatHistoryStore"]
