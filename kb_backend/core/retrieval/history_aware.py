"""
History-aware retrieval.

Rewrites a follow-up question into a standalone search phrase using the
conversation so far, then retrieves from the knowledge base with it.

Dependencies: langchain_core
System role: Query rewrite + retrieval step of the query pipeline
"""

import logging
from typing import Protocol

from langchain_core.documents import Document
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate

from kb_backend.core.prompts import get_rephrase_prompt

logger = logging.getLogger(__name__)


class AsyncRetriever(Protocol):
    async def aretrieve(self, query: str) -> list[Document]: ...


class HistoryAwareRetriever:
    """Rephrase-then-retrieve over a knowledge base retriever."""

    def __init__(
        self,
        retriever: AsyncRetriever,
        chat_model: BaseChatModel,
        prompt: ChatPromptTemplate | None = None,
        use_prompt_registry: bool = False,
        prompt_label: str | None = None,
    ) -> None:
        self._retriever = retriever
        self._chat_model = chat_model
        self._prompt = prompt
        self.use_prompt_registry = use_prompt_registry
        self.prompt_label = prompt_label

    def _rephrase_chain(self):
        prompt = self._prompt or get_rephrase_prompt(use_registry=self.use_prompt_registry, label=self.prompt_label)
        return prompt | self._chat_model | StrOutputParser()

    async def rephrase(self, query: str, history: list[BaseMessage]) -> str:
        """
        Build the search phrase for a query.

        Without history the query is used as-is; otherwise the model
        rewrites it. A blank rewrite falls back to the query.
        """
        if not history:
            return query

        rewritten = (await self._rephrase_chain().ainvoke({"chat_history": history, "input": query})).strip()
        logger.info(
            f"{__name__}:rephrase - Rewrote query",
            extra={"query_len": len(query), "rewritten_len": len(rewritten)},
        )
        return rewritten or query

    async def retrieve(self, query: str, history: list[BaseMessage]) -> list[Document]:
        search_query = await self.rephrase(query, history)
        return await self._retriever.aretrieve(search_query)
