"""History-aware knowledge base retrieval."""

from kb_backend.core.retrieval.history_aware import HistoryAwareRetriever

__all__ = ["HistoryAwareRetriever"]
