"""
Search query rewrite prompt.

Turns a follow-up question plus the conversation so far into a
standalone knowledge base search phrase.
"""

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from kb_backend.core.prompts.registry import resolve_prompt

REPHRASE_PROMPT_NAME = "kb-query-rephrase"

REPHRASE_PROMPT = ChatPromptTemplate.from_messages([
    MessagesPlaceholder("chat_history"),
    ("human", "{input}"),
    (
        "human",
        "Given the above conversation, generate a search query to look up in order to get "
        "information relevant to the conversation. Respond with the search query only.",
    ),
])


def get_rephrase_prompt(use_registry: bool = False, label: str | None = None) -> ChatPromptTemplate:
    return resolve_prompt(REPHRASE_PROMPT_NAME, REPHRASE_PROMPT, use_registry=use_registry, label=label)
