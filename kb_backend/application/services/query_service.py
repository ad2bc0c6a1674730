"""
Query service for streamed knowledge base Q&A.

Orchestrates one query request on a session: history read, history-aware
retrieval, bounded prompt assembly, token streaming with cancellation
checks, and finalization (atomic history write + done frame).

Dependencies: kb_backend.core, kb_backend.application.adapters
System role: Query Orchestrator
"""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

from fastapi.encoders import jsonable_encoder
from langchain_core.documents import Document

from kb_backend.application.adapters.chat_history_adapter import ChatHistoryStore
from kb_backend.configs.query import QuerySettings
from kb_backend.core.generation.bedrock_generator import BedrockGenerator
from kb_backend.core.prompts import get_query_prompt
from kb_backend.core.retrieval.history_aware import HistoryAwareRetriever
from kb_backend.core.session.state import Session
from kb_backend.core.text import format_context, format_history
from kb_backend.models.streaming import ChunkFrame, DoneFrame, ErrorFrame, Frame, SourceDocument

logger = logging.getLogger(__name__)


def to_sources(documents: list[Document]) -> list[SourceDocument]:
    return [
        SourceDocument(content=document.page_content, metadata=jsonable_encoder(document.metadata))
        for document in documents
    ]


class QueryService:
    """
    Streams answers to knowledge base questions.

    A request on a session ends in exactly one of: a done frame (answer
    persisted as two turns), an error frame, or silence after
    cancellation (nothing persisted).
    """

    def __init__(
        self,
        history_store: ChatHistoryStore,
        retriever: HistoryAwareRetriever,
        generator: BedrockGenerator,
        settings: QuerySettings | None = None,
    ) -> None:
        """
        Args:
            history_store: Factory of per-session history adapters
            retriever: History-aware knowledge base retriever
            generator: Streaming generation service
            settings: Retrieval/prompt budgets
        """
        self.history_store = history_store
        self.retriever = retriever
        self.generator = generator
        self.settings = settings or QuerySettings()

    async def stream_query(
        self,
        session: Session,
        query: str | None,
        session_id: str | None,
    ) -> AsyncIterator[Frame]:
        """
        Run one query and yield outbound frames.

        Flow:
        1. Validate query and session id
        2. Start a request on the session (supersedes any prior one)
        3. Read history, rewrite the query, retrieve documents
        4. Build the bounded prompt and stream fragments as chunk frames
        5. Persist user + assistant turns and yield the done frame,
           unless the request was cancelled

        Args:
            session: Connection session
            query: User question
            session_id: Conversation identifier

        Yields:
            Frame: chunk frames then done, a single error frame, or nothing
                further once cancelled
        """
        if not query:
            yield ErrorFrame(error="Query is required")
            return
        if not session_id:
            yield ErrorFrame(error="SessionId is required")
            return

        token = session.begin_request()
        log_extra = {"session_id": session_id, "connection_id": session.connection_id}
        logger.info(f"{__name__}:stream_query - START query_len={len(query)}", extra=log_extra)

        try:
            # Step 1: Read history
            history = self.history_store.for_session(session_id)
            messages = await history.get_messages()
            history_text = format_history(
                messages,
                window=self.settings.history_window,
                max_chars=self.settings.max_history_chars,
            )
            logger.info(f"{__name__}:stream_query - Loaded {len(messages)} history messages", extra=log_extra)

            # Step 2: Rewrite and retrieve
            documents = await self.retriever.retrieve(query, messages)
            logger.info(f"{__name__}:stream_query - Retrieved {len(documents)} documents", extra=log_extra)
            if session.is_cancelled(token):
                logger.info(f"{__name__}:stream_query - Cancelled before generation", extra=log_extra)
                return

            # Step 3: Assemble prompt
            context_text = format_context(
                [document.page_content for document in documents],
                max_chars=self.settings.max_context_chars,
            )
            prompt = get_query_prompt(
                use_registry=self.settings.use_prompt_registry,
                label=self.settings.prompt_label,
            ).format(history=history_text, context=context_text, question=query)

            # Step 4: Stream
            fragments: list[str] = []
            async with aclosing(self.generator.astream(prompt, token)) as stream:
                async for fragment in stream:
                    if session.is_cancelled(token):
                        break
                    fragments.append(fragment)
                    yield ChunkFrame(data=fragment)

            if session.is_cancelled(token):
                logger.info(
                    f"{__name__}:stream_query - Cancelled after {len(fragments)} chunks, skipping history save",
                    extra=log_extra,
                )
                return

            # Step 5: Finalize
            answer = "".join(fragments)
            await history.add_exchange(query, answer)
            logger.info(f"{__name__}:stream_query - END answer_len={len(answer)}", extra=log_extra)
            yield DoneFrame(sources=to_sources(documents))

        except Exception as e:
            if session.is_cancelled(token):
                logger.info(
                    f"{__name__}:stream_query - Ignoring {type(e).__name__} after cancellation",
                    extra=log_extra,
                )
                return
            logger.error(f"{__name__}:stream_query - FAILED: {type(e).__name__}: {e}", extra=log_extra)
            yield ErrorFrame(error=str(e))
        finally:
            session.end_request(token)
