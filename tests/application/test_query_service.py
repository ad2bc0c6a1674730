"""
Test suite for QueryService.

Tests streamed query handling: frame sequence, history persistence,
validation, cancellation mid-stream, superseded requests and failures.
Uses in-memory history, a fake retriever and a fake generator.

System role: Verification of the query orchestration layer
"""

import pytest
from langchain_core.documents import Document

from kb_backend.application.services.query_service import QueryService, to_sources
from kb_backend.configs.query import QuerySettings
from kb_backend.core.exceptions import RetrievalError, StorageError
from kb_backend.core.session import CancellationController, Session
from kb_backend.core.text import TRUNCATION_MARKER
from kb_backend.models.streaming import ChunkFrame, DoneFrame, ErrorFrame


async def collect(agen) -> list:
    return [frame async for frame in agen]


class TestStreamQuerySuccess:
    """Test suite for completed requests."""

    @pytest.mark.asyncio
    async def test_stream_should_yield_chunks_then_done(
        self, query_service: QueryService, session_id: str
    ) -> None:
        """Chunks arrive in model order and the done frame is last."""
        # Act
        frames = await collect(query_service.stream_query(Session(), "What is the capital?", session_id))

        # Assert
        assert [type(frame) for frame in frames] == [ChunkFrame, ChunkFrame, ChunkFrame, DoneFrame]
        assert "".join(frame.data for frame in frames[:-1]) == "Paris is the capital."

    @pytest.mark.asyncio
    async def test_done_frame_should_carry_sources(
        self, query_service: QueryService, session_id: str, sample_documents: list[Document]
    ) -> None:
        # Act
        frames = await collect(query_service.stream_query(Session(), "Capital?", session_id))

        # Assert
        done = frames[-1]
        assert [source.content for source in done.sources] == [d.page_content for d in sample_documents]
        assert done.sources[0].metadata["score"] == 0.91
        assert done.to_dict()["type"] == "done"

    @pytest.mark.asyncio
    async def test_success_should_persist_exactly_two_turns(
        self, query_service: QueryService, history_table, session_id: str
    ) -> None:
        """User turn then assistant turn, written in a single append."""
        # Act
        await collect(query_service.stream_query(Session(), "What is the capital?", session_id))

        # Assert
        stored = history_table.items[session_id]
        assert [message["type"] for message in stored] == ["human", "ai"]
        assert stored[0]["data"]["content"] == "What is the capital?"
        assert stored[1]["data"]["content"] == "Paris is the capital."
        assert history_table.append_calls == 1

    @pytest.mark.asyncio
    async def test_history_should_feed_retrieval_and_prompt(
        self, query_service: QueryService, history_store, fake_retriever, fake_generator, session_id: str
    ) -> None:
        """Prior turns reach the retriever and appear in the prompt."""
        # Arrange
        await history_store.for_session(session_id).add_exchange("Tell me about France", "France is a country.")

        # Act
        await collect(query_service.stream_query(Session(), "And its capital?", session_id))

        # Assert
        query, history = fake_retriever.calls[0]
        assert query == "And its capital?"
        assert len(history) == 2
        assert "human: Tell me about France" in fake_generator.prompts[0]
        assert "ai: France is a country." in fake_generator.prompts[0]

    @pytest.mark.asyncio
    async def test_large_context_should_be_truncated(
        self, history_store, make_retriever, make_generator, session_id: str
    ) -> None:
        """Context over the character budget is cut and marked."""
        # Arrange
        generator = make_generator(fragments=["ok"])
        service = QueryService(
            history_store=history_store,
            retriever=make_retriever([Document(page_content="x" * 13000)]),
            generator=generator,
            settings=QuerySettings(max_context_chars=12000),
        )

        # Act
        await collect(service.stream_query(Session(), "Summarize", session_id))

        # Assert
        prompt = generator.prompts[0]
        assert "x" * 12000 + TRUNCATION_MARKER in prompt
        assert "x" * 12001 not in prompt


class TestStreamQueryValidation:
    """Test suite for rejected requests."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [None, ""])
    async def test_missing_query_should_yield_single_error(
        self, query_service: QueryService, history_table, session_id: str, query
    ) -> None:
        # Act
        frames = await collect(query_service.stream_query(Session(), query, session_id))

        # Assert
        assert frames == [ErrorFrame(error="Query is required")]
        assert history_table.items == {}

    @pytest.mark.asyncio
    async def test_whitespace_query_is_answered(
        self, query_service: QueryService, history_table, session_id: str
    ) -> None:
        # Act
        frames = await collect(query_service.stream_query(Session(), "   ", session_id))

        # Assert
        assert isinstance(frames[-1], DoneFrame)
        assert history_table.items[session_id][0]["data"]["content"] == "   "

    @pytest.mark.asyncio
    async def test_missing_session_id_should_yield_single_error(self, query_service: QueryService) -> None:
        # Act
        frames = await collect(query_service.stream_query(Session(), "Capital?", None))

        # Assert
        assert frames == [ErrorFrame(error="SessionId is required")]


class TestStreamQueryCancellation:
    """Test suite for cancelled and superseded requests."""

    @pytest.mark.asyncio
    async def test_cancel_after_first_chunk_should_stop_without_done(
        self, query_service: QueryService, history_table, fake_generator, session_id: str
    ) -> None:
        """No further frames and nothing persisted after a cancel."""
        # Arrange
        session = Session()
        stream = query_service.stream_query(session, "What is the capital?", session_id)
        first = await stream.__anext__()

        # Act
        ack = CancellationController().cancel(session, session_id)
        remaining = await collect(stream)

        # Assert
        assert isinstance(first, ChunkFrame)
        assert ack.to_dict() == {"type": "cancelled", "message": "Request cancelled successfully"}
        assert remaining == []
        assert history_table.items.get(session_id, []) == []
        assert fake_generator.closed is True
        assert session.active_token is None

    @pytest.mark.asyncio
    async def test_cancel_with_nothing_in_flight_should_only_acknowledge(self) -> None:
        # Arrange
        session = Session()

        # Act
        ack = CancellationController().cancel(session)

        # Assert
        assert ack.message == "Request cancelled successfully"
        assert session.cancelled is True

    @pytest.mark.asyncio
    async def test_new_query_after_cancel_should_complete(
        self, query_service: QueryService, history_table, session_id: str
    ) -> None:
        """A cancelled session accepts the next query normally."""
        # Arrange
        session = Session()
        CancellationController().cancel(session)

        # Act
        frames = await collect(query_service.stream_query(session, "Capital?", session_id))

        # Assert
        assert isinstance(frames[-1], DoneFrame)
        assert len(history_table.items[session_id]) == 2

    @pytest.mark.asyncio
    async def test_superseded_request_should_stop_silently(
        self, query_service: QueryService, history_table, session_id: str
    ) -> None:
        """Starting a new request on the session ends the previous stream."""
        # Arrange
        session = Session()
        stream = query_service.stream_query(session, "First question", session_id)
        await stream.__anext__()

        # Act
        session.begin_request()
        remaining = await collect(stream)

        # Assert
        assert remaining == []
        assert session_id not in history_table.items


class TestStreamQueryFailures:
    """Test suite for failing dependencies."""

    @pytest.mark.asyncio
    async def test_retrieval_failure_should_yield_error_frame(
        self, history_store, make_retriever, fake_generator, history_table, session_id: str
    ) -> None:
        # Arrange
        service = QueryService(
            history_store=history_store,
            retriever=make_retriever(error=RetrievalError("Knowledge base retrieval failed: throttled")),
            generator=fake_generator,
        )

        # Act
        frames = await collect(service.stream_query(Session(), "Capital?", session_id))

        # Assert
        assert frames == [ErrorFrame(error="Knowledge base retrieval failed: throttled")]
        assert fake_generator.prompts == []
        assert history_table.items == {}

    @pytest.mark.asyncio
    async def test_history_write_failure_should_replace_done_with_error(
        self, query_service: QueryService, history_table, session_id: str
    ) -> None:
        # Arrange
        def failing_append(session_id, messages):
            raise StorageError("Chat history update_item failed: denied", operation="update_item")

        history_table.append = failing_append

        # Act
        frames = await collect(query_service.stream_query(Session(), "Capital?", session_id))

        # Assert
        assert isinstance(frames[-1], ErrorFrame)
        assert frames[-1].error == "Chat history update_item failed: denied"
        assert not any(isinstance(frame, DoneFrame) for frame in frames)


class TestToSources:
    """Test suite for source conversion."""

    def test_to_sources_should_make_metadata_json_safe(self) -> None:
        # Arrange
        from decimal import Decimal

        documents = [Document(page_content="text", metadata={"score": Decimal("0.5"), "tags": ("a", "b")})]

        # Act
        sources = to_sources(documents)

        # Assert
        assert sources[0].metadata == {"score": 0.5, "tags": ["a", "b"]}


class TestDrugTrendsScenario:
    """End-to-end request on a fresh session with two retrieved documents."""

    @pytest.fixture
    def service(self, history_store, make_retriever, make_generator) -> QueryService:
        documents = [
            Document(page_content="doc1", metadata={"id": 1}),
            Document(page_content="doc2", metadata={"id": 2}),
        ]
        return QueryService(
            history_store=history_store,
            retriever=make_retriever(documents),
            generator=make_generator(fragments=["Based ", "on data..."]),
        )

    @pytest.mark.asyncio
    async def test_completed_request_streams_and_persists(self, service: QueryService, history_table) -> None:
        # Act
        frames = await collect(service.stream_query(Session(), "What are drug trends?", "s1"))

        # Assert
        assert [frame.to_dict() for frame in frames] == [
            {"type": "chunk", "data": "Based "},
            {"type": "chunk", "data": "on data..."},
            {
                "type": "done",
                "sources": [
                    {"content": "doc1", "metadata": {"id": 1}},
                    {"content": "doc2", "metadata": {"id": 2}},
                ],
            },
        ]
        assert len(history_table.items["s1"]) == 2

    @pytest.mark.asyncio
    async def test_cancel_after_first_chunk_leaves_history_unchanged(
        self, service: QueryService, history_table
    ) -> None:
        # Arrange
        session = Session()
        stream = service.stream_query(session, "What are drug trends?", "s1")

        # Act
        first = await stream.__anext__()
        ack = CancellationController().cancel(session, "s1")
        rest = await collect(stream)

        # Assert
        assert first.to_dict() == {"type": "chunk", "data": "Based "}
        assert ack.to_dict()["type"] == "cancelled"
        assert rest == []
        assert "s1" not in history_table.items
