"""
Prompt text budgeting.

Formats conversation history and retrieved context for the query prompt
and caps each at a character budget.
"""

from collections.abc import Sequence

from langchain_core.messages import BaseMessage

TRUNCATION_MARKER = "...[truncated]"


def truncate_text(text: str, max_chars: int) -> str:
    """
    Cap text at max_chars.

    Text longer than the budget becomes its first max_chars characters
    followed by TRUNCATION_MARKER; shorter or equal text is unchanged.
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def message_text(message: BaseMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    # Bedrock messages may carry content blocks
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def format_history(messages: Sequence[BaseMessage], window: int, max_chars: int) -> str:
    """
    Render the last `window` messages as "<type>: <content>" lines.

    Args:
        messages: Conversation, oldest first
        window: Number of most recent messages kept
        max_chars: Character budget for the rendered block

    Returns:
        str: Newline-joined history, truncated to budget ("" when empty)
    """
    recent = list(messages)[-window:] if window > 0 else []
    lines = [f"{message.type}: {message_text(message)}" for message in recent]
    return truncate_text("\n".join(lines), max_chars)


def format_context(contents: Sequence[str], max_chars: int) -> str:
    """Join document contents with blank lines and cap at max_chars."""
    return truncate_text("\n\n".join(contents), max_chars)
