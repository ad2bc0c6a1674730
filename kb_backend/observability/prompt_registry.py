"""
Langfuse prompt registry for versioned prompt management.

Registers LangChain templates in Langfuse (with the model configuration
they run with) and fetches them back as LangChain templates. Chat
templates may contain MessagesPlaceholder entries, which are stored as
Langfuse placeholder messages.

Dependencies: langfuse, langchain_core, pydantic, kb_backend.configs
System role: Prompt version control and retrieval
"""

import logging
import re
from typing import TYPE_CHECKING, Any

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder, PromptTemplate
from langchain_core.prompts.chat import (
    AIMessagePromptTemplate,
    HumanMessagePromptTemplate,
    SystemMessagePromptTemplate,
)
from langfuse import Langfuse
from pydantic import BaseModel, Field

from kb_backend.configs import get_settings
from kb_backend.configs.observability import ObservabilitySettings

if TYPE_CHECKING:
    from langfuse.model import ChatPromptClient, TextPromptClient

logger = logging.getLogger(__name__)

# Single braces not already doubled
_LANGCHAIN_VARIABLE = re.compile(r"(?<!\{)\{([^{}]+)\}(?!\})")


class ModelConfig(BaseModel):
    """Model parameters stored alongside a prompt version."""

    model: str = Field(description="Bedrock model identifier")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)

    def to_langfuse_config(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def to_langfuse_text(template: str) -> str:
    """Rewrite LangChain {var} placeholders to Langfuse {{var}}."""
    return _LANGCHAIN_VARIABLE.sub(r"{{\1}}", template)


def chat_template_to_langfuse(template: ChatPromptTemplate) -> list[dict[str, str]]:
    """
    Convert a ChatPromptTemplate to Langfuse chat messages.

    Raises:
        ValueError: If the template holds an unsupported message type
    """
    roles = {
        SystemMessagePromptTemplate: "system",
        HumanMessagePromptTemplate: "user",
        AIMessagePromptTemplate: "assistant",
    }
    messages: list[dict[str, str]] = []
    for message in template.messages:
        if isinstance(message, MessagesPlaceholder):
            messages.append({"type": "placeholder", "name": message.variable_name})
            continue
        role = roles.get(type(message))
        if role is None:
            raise ValueError(f"Unsupported message type: {type(message)}")
        messages.append({"role": role, "content": to_langfuse_text(message.prompt.template)})
    return messages


class PromptRegistry:
    """
    Singleton registry for Langfuse prompt management.

    Inactive (every call is a no-op returning None) when tracing is
    disabled or the Langfuse keys are not configured.
    """

    _instance: "PromptRegistry | None" = None
    _client: Langfuse | None = None
    _enabled: bool = False

    def __new__(cls) -> "PromptRegistry":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize(get_settings().observability)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next call re-reads settings."""
        cls._instance = None

    def _initialize(self, settings: ObservabilitySettings) -> None:
        if not settings.enable_tracing:
            logger.info(f"{__name__}:_initialize - Langfuse disabled, prompt registry inactive")
            self._enabled = False
            return

        if not settings.public_key or not settings.secret_key:
            logger.warning(f"{__name__}:_initialize - Langfuse keys not configured, prompt registry inactive")
            self._enabled = False
            return

        self._client = Langfuse(
            public_key=settings.public_key,
            secret_key=settings.secret_key,
            host=settings.host,
        )
        self._enabled = True
        logger.info(f"{__name__}:_initialize - Prompt registry initialized", extra={"host": settings.host})

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def register_prompt(
        self,
        name: str,
        template: ChatPromptTemplate | PromptTemplate,
        config: ModelConfig,
        labels: list[str] | None = None,
    ) -> "ChatPromptClient | TextPromptClient | None":
        """
        Create a prompt, or a new version of it, in Langfuse.

        Args:
            name: Prompt identifier
            template: Chat or text LangChain template
            config: Model configuration stored with the version
            labels: Optional labels (e.g. ["production"])

        Returns:
            The created Langfuse prompt, or None when the registry is inactive

        Raises:
            ValueError: If the template type is unsupported
        """
        if not self._enabled or self._client is None:
            logger.debug(f"{__name__}:register_prompt - Registry inactive, skipping", extra={"prompt": name})
            return None

        if isinstance(template, ChatPromptTemplate):
            prompt_type, body = "chat", chat_template_to_langfuse(template)
        elif isinstance(template, PromptTemplate):
            prompt_type, body = "text", to_langfuse_text(template.template)
        else:
            raise ValueError(f"Unsupported template type: {type(template)}")

        prompt = self._client.create_prompt(
            name=name,
            type=prompt_type,
            prompt=body,
            config=config.to_langfuse_config(),
            labels=labels or [],
        )
        logger.info(
            f"{__name__}:register_prompt - Registered prompt",
            extra={"prompt": name, "type": prompt_type, "version": prompt.version, "labels": labels},
        )
        return prompt

    def get_langchain_prompt(
        self,
        name: str,
        label: str | None = None,
        chat: bool = True,
    ) -> ChatPromptTemplate | PromptTemplate | None:
        """
        Fetch a prompt and rebuild the LangChain template.

        Args:
            name: Prompt identifier
            label: Optional label filter
            chat: Whether the prompt was registered as a chat prompt

        Returns:
            The template with the Langfuse prompt attached as metadata,
            or None when the registry is inactive
        """
        if not self._enabled or self._client is None:
            return None

        kwargs: dict[str, Any] = {"name": name, "type": "chat" if chat else "text"}
        if label:
            kwargs["label"] = label
        prompt = self._client.get_prompt(**kwargs)

        if chat:
            template = ChatPromptTemplate.from_messages(prompt.get_langchain_prompt())
        else:
            template = PromptTemplate.from_template(prompt.get_langchain_prompt())
        template.metadata = {"langfuse_prompt": prompt}
        logger.debug(
            f"{__name__}:get_langchain_prompt - Fetched prompt",
            extra={"prompt": name, "version": prompt.version},
        )
        return template
