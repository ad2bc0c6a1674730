"""
Conversation turn model.

One persisted user or assistant message, convertible to and from the
LangChain message types used for prompt building.

Dependencies: pydantic, langchain_core
System role: Chat history data contract
"""

from enum import Enum

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from pydantic import BaseModel

from kb_backend.core.text import message_text


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ConversationTurn(BaseModel):
    """
    One message of a session's conversation.

    Attributes:
        session_id: Owning session (partition key)
        role: user or assistant
        content: Message text
        timestamp: ISO-8601 UTC write time (empty for legacy items)
    """

    session_id: str
    role: TurnRole
    content: str
    timestamp: str = ""

    def to_message(self) -> BaseMessage:
        """Convert to a LangChain message carrying the timestamp."""
        kwargs = {"timestamp": self.timestamp} if self.timestamp else {}
        if self.role == TurnRole.USER:
            return HumanMessage(content=self.content, additional_kwargs=kwargs)
        return AIMessage(content=self.content, additional_kwargs=kwargs)

    @classmethod
    def from_message(cls, session_id: str, message: BaseMessage) -> "ConversationTurn":
        """Build a turn from a stored LangChain message (human -> user)."""
        role = TurnRole.USER if message.type == "human" else TurnRole.ASSISTANT
        return cls(
            session_id=session_id,
            role=role,
            content=message_text(message),
            timestamp=str(message.additional_kwargs.get("timestamp", "")),
        )
