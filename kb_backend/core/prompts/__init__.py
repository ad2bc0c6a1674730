"""
Prompt templates.

Every prompt has a local LangChain template and a registry name; the
registry version wins when prompt registry use is enabled.
"""

from kb_backend.core.prompts.analysis_prompt import ANALYSIS_PROMPT, ANALYSIS_PROMPT_NAME, get_analysis_prompt
from kb_backend.core.prompts.query_prompt import QUERY_PROMPT, QUERY_PROMPT_NAME, get_query_prompt
from kb_backend.core.prompts.registry import register_prompt, resolve_prompt
from kb_backend.core.prompts.rephrase_prompt import REPHRASE_PROMPT, REPHRASE_PROMPT_NAME, get_rephrase_prompt
from kb_backend.core.prompts.visualization_prompt import (
    VISUALIZATION_PROMPT,
    VISUALIZATION_PROMPT_NAME,
    get_visualization_prompt,
)

LOCAL_PROMPTS = {
    QUERY_PROMPT_NAME: QUERY_PROMPT,
    REPHRASE_PROMPT_NAME: REPHRASE_PROMPT,
    ANALYSIS_PROMPT_NAME: ANALYSIS_PROMPT,
    VISUALIZATION_PROMPT_NAME: VISUALIZATION_PROMPT,
}


def register_all_prompts(model_id: str, temperature: float = 0.0, labels: list[str] | None = None) -> None:
    """Push every local template to the registry."""
    for name, template in LOCAL_PROMPTS.items():
        register_prompt(name, template, model_id=model_id, temperature=temperature, labels=labels)


__all__ = [
    "LOCAL_PROMPTS",
    "get_analysis_prompt",
    "get_query_prompt",
    "get_rephrase_prompt",
    "get_visualization_prompt",
    "register_all_prompts",
    "resolve_prompt",
]
