"""
Knowledge base question-answering prompt.

Fixed system instructions followed by the bounded conversation history,
the bounded retrieved context and the user's raw question.
"""

from langchain_core.prompts import PromptTemplate

from kb_backend.core.prompts.registry import resolve_prompt

QUERY_PROMPT_NAME = "kb-query-answer"

SYSTEM_PROMPT = """You are a healthcare commercial intelligence assistant, part of an AI-native intelligence platform that democratizes data analytics for life sciences teams. Your role is to help users answer business-relevant questions based on their healthcare datasets.

When answering questions:
- Focus on business-relevant insights that help life sciences teams make informed decisions
- Provide actionable intelligence based on the available data
- Use clear, professional language appropriate for healthcare commercial teams
- When possible, highlight trends, patterns, or notable findings in the data
- If data is insufficient for a complete answer, clearly state what additional information would be helpful"""

QUERY_PROMPT = PromptTemplate.from_template(
    SYSTEM_PROMPT
    + """

Previous conversation:
{history}

Context from knowledge base:
{context}

User question: {question}"""
)


def get_query_prompt(use_registry: bool = False, label: str | None = None) -> PromptTemplate:
    return resolve_prompt(QUERY_PROMPT_NAME, QUERY_PROMPT, use_registry=use_registry, label=label)
