"""
Chat history adapter.

High-level history operations for one conversation on top of the DynamoDB
chat history table. Messages are stored as LangChain message dicts, each
carrying its write timestamp.

Dependencies: langchain_core, kb_backend.boundary.aws.chat_history_table
System role: History Store Adapter
"""

import logging

from fastapi.concurrency import run_in_threadpool
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    message_to_dict,
    messages_from_dict,
)

from kb_backend.boundary.aws.chat_history_table import ChatHistoryTable
from kb_backend.core.time_utils import utc_timestamp
from kb_backend.models.conversation import ConversationTurn

logger = logging.getLogger(__name__)


class ChatHistoryAdapter:
    """
    History operations scoped to one session id.

    Reads return messages oldest first. add_exchange persists a user turn
    and an assistant turn together in a single write.
    """

    def __init__(self, session_id: str, table: ChatHistoryTable) -> None:
        """
        Args:
            session_id: Conversation identifier (table partition key)
            table: Chat history table client
        """
        self.session_id = session_id
        self.table = table

    async def get_messages(self, limit: int | None = None) -> list[BaseMessage]:
        """
        Get messages for the session.

        Args:
            limit: Maximum number of most recent messages (None = all)

        Returns:
            list[BaseMessage]: HumanMessage/AIMessage objects, oldest first
        """
        stored = await run_in_threadpool(self.table.load, self.session_id)
        messages = messages_from_dict(stored)

        if limit is not None and limit > 0:
            return messages[-limit:]
        return messages

    async def get_turns(self) -> list[ConversationTurn]:
        """Get the conversation as typed turns."""
        return [ConversationTurn.from_message(self.session_id, message) for message in await self.get_messages()]

    async def add_user_message(self, content: str) -> None:
        await self._append([HumanMessage(content=content)])

    async def add_ai_message(self, content: str) -> None:
        await self._append([AIMessage(content=content)])

    async def add_exchange(self, user_content: str, ai_content: str) -> None:
        """
        Persist a user turn then an assistant turn atomically.

        Args:
            user_content: The user's query
            ai_content: The full assistant answer
        """
        await self._append([HumanMessage(content=user_content), AIMessage(content=ai_content)])

    async def clear(self) -> None:
        """Delete the whole conversation."""
        await run_in_threadpool(self.table.delete, self.session_id)

    async def _append(self, messages: list[BaseMessage]) -> None:
        timestamp = utc_timestamp()
        for message in messages:
            message.additional_kwargs["timestamp"] = timestamp
        await run_in_threadpool(self.table.append, self.session_id, [message_to_dict(m) for m in messages])
        logger.debug(
            f"{__name__}:_append - Stored {len(messages)} message(s)",
            extra={"session_id": self.session_id},
        )


class ChatHistoryStore:
    """Factory for per-session adapters sharing one table client."""

    def __init__(self, table: ChatHistoryTable) -> None:
        self.table = table

    def for_session(self, session_id: str) -> ChatHistoryAdapter:
        return ChatHistoryAdapter(session_id=session_id, table=self.table)
