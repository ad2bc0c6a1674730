"""
Bedrock generation service.

Wraps ChatBedrockConverse for single-shot and streamed completions. The
streamed variant stops reading from the model as soon as the caller's
cancellation token is signalled and closes the upstream stream.

Dependencies: langchain_aws, langchain_core
System role: Generation service for query, analysis and visualization
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

from langchain_aws import ChatBedrockConverse
from langchain_core.language_models import BaseChatModel

from kb_backend.core.exceptions import GenerationError
from kb_backend.core.session.state import CancellationToken

logger = logging.getLogger(__name__)


def content_to_text(content: Any) -> str:
    """Flatten string or Bedrock content-block list content to text."""
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return str(content) if content else ""


class BedrockGenerator:
    """
    Text generation over a Bedrock chat model.

    The chat model is injectable so tests can pass a fake LangChain model.
    """

    def __init__(
        self,
        model_id: str,
        region: str = "us-east-1",
        temperature: float = 0.0,
        chat_model: BaseChatModel | None = None,
    ) -> None:
        """
        Args:
            model_id: Bedrock foundation model identifier
            region: AWS region of the Bedrock runtime
            temperature: Sampling temperature
            chat_model: Pre-built chat model (overrides the three above)
        """
        self._model_id = model_id
        self._model = chat_model or ChatBedrockConverse(
            model=model_id,
            region_name=region,
            temperature=temperature,
        )

    @property
    def chat_model(self) -> BaseChatModel:
        return self._model

    @property
    def model_id(self) -> str:
        return self._model_id

    async def ainvoke(self, prompt: str) -> str:
        """
        Run one prompt to completion.

        Raises:
            GenerationError: If the model call fails
        """
        try:
            response = await self._model.ainvoke(prompt)
        except Exception as e:
            logger.error(f"{__name__}:ainvoke - Model call failed: {type(e).__name__}: {e}")
            raise GenerationError(f"Model invocation failed: {e}", {"model_id": self._model_id}) from e
        return content_to_text(response.content)

    async def astream(
        self,
        prompt: str,
        token: CancellationToken | None = None,
    ) -> AsyncIterator[str]:
        """
        Stream answer fragments for a prompt.

        Empty fragments are skipped. When the token is cancelled the
        iteration ends without error and the upstream stream is closed.

        Args:
            prompt: Fully assembled prompt text
            token: Optional cancellation token checked before each fragment

        Yields:
            str: Non-empty text fragments in model order
        """
        stream = self._model.astream(prompt)
        fragment_count = 0
        try:
            async for chunk in stream:
                if token is not None and token.cancelled:
                    logger.info(f"{__name__}:astream - Cancelled after {fragment_count} fragments")
                    break
                text = content_to_text(chunk.content)
                if not text:
                    continue
                fragment_count += 1
                yield text
        finally:
            await stream.aclose()
