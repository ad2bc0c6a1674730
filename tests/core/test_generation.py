"""
Test suite for BedrockGenerator and HistoryAwareRetriever.

Uses LangChain's GenericFakeChatModel in place of ChatBedrockConverse.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from langchain_core.documents import Document
from langchain_core.language_models.fake_chat_models import GenericFakeChatModel
from langchain_core.messages import AIMessage, HumanMessage

from kb_backend.core.exceptions import GenerationError
from kb_backend.core.generation import BedrockGenerator, content_to_text
from kb_backend.core.prompts import REPHRASE_PROMPT
from kb_backend.core.retrieval import HistoryAwareRetriever
from kb_backend.core.session import CancellationToken


def fake_generator(*replies: str) -> BedrockGenerator:
    model = GenericFakeChatModel(messages=iter([AIMessage(content=reply) for reply in replies]))
    return BedrockGenerator(model_id="test-model", chat_model=model)


class TestBedrockGenerator:
    @pytest.mark.asyncio
    async def test_ainvoke_returns_reply_text(self) -> None:
        generator = fake_generator("Paris is the capital.")

        assert await generator.ainvoke("Capital?") == "Paris is the capital."

    @pytest.mark.asyncio
    async def test_astream_yields_non_empty_fragments_in_order(self) -> None:
        generator = fake_generator("Paris is the capital.")

        fragments = [fragment async for fragment in generator.astream("Capital?")]

        assert len(fragments) > 1
        assert all(fragments)
        assert "".join(fragments) == "Paris is the capital."

    @pytest.mark.asyncio
    async def test_astream_stops_when_token_cancelled(self) -> None:
        generator = fake_generator("one two three four")
        token = CancellationToken()
        fragments = []

        async for fragment in generator.astream("Count", token):
            fragments.append(fragment)
            token.cancel()

        assert fragments == ["one"]

    @pytest.mark.asyncio
    async def test_model_failure_is_wrapped(self) -> None:
        model = MagicMock()
        model.ainvoke = AsyncMock(side_effect=RuntimeError("throttled"))
        generator = BedrockGenerator(model_id="test-model", chat_model=model)

        with pytest.raises(GenerationError, match="throttled"):
            await generator.ainvoke("Capital?")

    def test_content_blocks_are_flattened(self) -> None:
        assert content_to_text([{"type": "text", "text": "a"}, "b"]) == "ab"
        assert content_to_text(None) == ""


class TestHistoryAwareRetriever:
    @pytest.fixture
    def kb_retriever(self) -> MagicMock:
        retriever = MagicMock()
        retriever.aretrieve = AsyncMock(return_value=[Document(page_content="doc")])
        return retriever

    @pytest.mark.asyncio
    async def test_without_history_query_is_used_verbatim(self, kb_retriever: MagicMock) -> None:
        model = GenericFakeChatModel(messages=iter([]))
        retriever = HistoryAwareRetriever(kb_retriever, model)

        documents = await retriever.retrieve("What is X?", [])

        kb_retriever.aretrieve.assert_awaited_once_with("What is X?")
        assert documents[0].page_content == "doc"

    @pytest.mark.asyncio
    async def test_with_history_query_is_rewritten(self, kb_retriever: MagicMock) -> None:
        model = GenericFakeChatModel(messages=iter([AIMessage(content="What is the capital of France?")]))
        retriever = HistoryAwareRetriever(kb_retriever, model)
        history = [HumanMessage(content="Tell me about France"), AIMessage(content="France is a country.")]

        await retriever.retrieve("And its capital?", history)

        kb_retriever.aretrieve.assert_awaited_once_with("What is the capital of France?")

    @pytest.mark.asyncio
    async def test_blank_rewrite_falls_back_to_query(self, kb_retriever: MagicMock) -> None:
        model = GenericFakeChatModel(messages=iter([AIMessage(content="   ")]))
        retriever = HistoryAwareRetriever(kb_retriever, model)

        phrase = await retriever.rephrase("And its capital?", [HumanMessage(content="France?")])

        assert phrase == "And its capital?"

    @pytest.mark.asyncio
    async def test_rephrase_prompt_is_resolved_through_registry(self, kb_retriever: MagicMock) -> None:
        model = GenericFakeChatModel(messages=iter([AIMessage(content="Capital of France?")]))
        retriever = HistoryAwareRetriever(kb_retriever, model, use_prompt_registry=True, prompt_label="production")

        with patch(
            "kb_backend.core.retrieval.history_aware.get_rephrase_prompt", return_value=REPHRASE_PROMPT
        ) as resolve:
            await retriever.retrieve("And its capital?", [HumanMessage(content="France?")])

        resolve.assert_called_once_with(use_registry=True, label="production")
        kb_retriever.aretrieve.assert_awaited_once_with("Capital of France?")
