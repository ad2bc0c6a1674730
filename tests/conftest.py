"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory chat history table, fake generator and retriever,
query service wired to the fakes
Dependencies: pytest, langchain_core
System role: Test infrastructure and fixture management
"""

import asyncio
import uuid
from collections.abc import AsyncIterator
from typing import Any

import pytest
from langchain_core.documents import Document
from langchain_core.messages import BaseMessage

from kb_backend.application.adapters.chat_history_adapter import ChatHistoryStore
from kb_backend.application.services.query_service import QueryService
from kb_backend.configs.query import QuerySettings
from kb_backend.core.session.state import CancellationToken


class InMemoryHistoryTable:
    """Stand-in for ChatHistoryTable keeping message dicts per session."""

    def __init__(self) -> None:
        self.items: dict[str, list[dict[str, Any]]] = {}
        self.append_calls = 0

    def load(self, session_id: str) -> list[dict[str, Any]]:
        return list(self.items.get(session_id, []))

    def append(self, session_id: str, messages: list[dict[str, Any]]) -> None:
        self.append_calls += 1
        self.items.setdefault(session_id, []).extend(messages)

    def delete(self, session_id: str) -> None:
        self.items.pop(session_id, None)


class FakeGenerator:
    """Generator double: streams fixed fragments (optionally paced), answers with a fixed reply."""

    def __init__(
        self,
        fragments: list[str] | None = None,
        reply: str | Exception = "",
        delay: float = 0.0,
    ) -> None:
        self.fragments = fragments or []
        self.reply = reply
        self.delay = delay
        self.prompts: list[str] = []
        self.closed = False

    async def astream(self, prompt: str, token: CancellationToken | None = None) -> AsyncIterator[str]:
        self.prompts.append(prompt)
        try:
            for fragment in self.fragments:
                if self.delay:
                    await asyncio.sleep(self.delay)
                if token is not None and token.cancelled:
                    break
                yield fragment
        finally:
            self.closed = True

    async def ainvoke(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class FakeRetriever:
    """History-aware retriever double returning fixed documents."""

    def __init__(self, documents: list[Document] | None = None, error: Exception | None = None) -> None:
        self.documents = documents or []
        self.error = error
        self.calls: list[tuple[str, list[BaseMessage]]] = []

    async def retrieve(self, query: str, history: list[BaseMessage]) -> list[Document]:
        self.calls.append((query, list(history)))
        if self.error is not None:
            raise self.error
        return list(self.documents)


@pytest.fixture
def session_id() -> str:
    """Generate a test conversation id."""
    return f"session-{uuid.uuid4().hex[:8]}"


@pytest.fixture
def history_table() -> InMemoryHistoryTable:
    return InMemoryHistoryTable()


@pytest.fixture
def history_store(history_table: InMemoryHistoryTable) -> ChatHistoryStore:
    return ChatHistoryStore(history_table)


@pytest.fixture
def sample_documents() -> list[Document]:
    """Provide retrieved knowledge base documents."""
    return [
        Document(
            page_content="Paris is the capital of France.",
            metadata={"location": {"s3Location": {"uri": "s3://kb/geo.pdf"}}, "score": 0.91},
        ),
        Document(page_content="France is in Western Europe.", metadata={"score": 0.74}),
    ]


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator(fragments=["Paris ", "is the ", "capital."])


@pytest.fixture
def fake_retriever(sample_documents: list[Document]) -> FakeRetriever:
    return FakeRetriever(sample_documents)


@pytest.fixture
def query_service(
    history_store: ChatHistoryStore,
    fake_retriever: FakeRetriever,
    fake_generator: FakeGenerator,
) -> QueryService:
    """Provide QueryService wired to in-memory fakes."""
    return QueryService(
        history_store=history_store,
        retriever=fake_retriever,
        generator=fake_generator,
        settings=QuerySettings(),
    )


@pytest.fixture
def make_generator() -> type[FakeGenerator]:
    """Factory for generator doubles with custom fragments or replies."""
    return FakeGenerator


@pytest.fixture
def make_retriever() -> type[FakeRetriever]:
    return FakeRetriever
