"""
Prompt resolution against the Langfuse registry.

Dependencies: kb_backend.observability.prompt_registry
System role: Local/registry prompt selection
"""

import logging

from langchain_core.prompts import ChatPromptTemplate, PromptTemplate
from langfuse.api.core import ApiError

from kb_backend.observability.prompt_registry import ModelConfig, PromptRegistry

logger = logging.getLogger(__name__)


def resolve_prompt(
    name: str,
    local: ChatPromptTemplate | PromptTemplate,
    use_registry: bool = False,
    label: str | None = None,
) -> ChatPromptTemplate | PromptTemplate:
    """
    Return the registry version of a prompt, or the local template.

    The local template is used when the registry is not requested, is
    inactive, or cannot serve the prompt.
    """
    if not use_registry:
        return local

    registry = PromptRegistry()
    if not registry.is_enabled:
        return local

    try:
        prompt = registry.get_langchain_prompt(name, label=label, chat=isinstance(local, ChatPromptTemplate))
    except ApiError as e:
        logger.warning(
            f"{__name__}:resolve_prompt - Registry fetch failed, using local template",
            extra={"prompt": name, "error": str(e)},
        )
        return local

    if prompt is None:
        logger.debug(f"{__name__}:resolve_prompt - Prompt not in registry, using local template", extra={"prompt": name})
        return local
    return prompt


def register_prompt(
    name: str,
    template: ChatPromptTemplate | PromptTemplate,
    model_id: str,
    temperature: float = 0.0,
    labels: list[str] | None = None,
) -> None:
    """Push a local template to the registry (no-op when inactive)."""
    registry = PromptRegistry()
    if not registry.is_enabled:
        logger.debug(f"{__name__}:register_prompt - Registry inactive, skipping", extra={"prompt": name})
        return
    registry.register_prompt(
        name=name,
        template=template,
        config=ModelConfig(model=model_id, temperature=temperature),
        labels=labels or ["development"],
    )
