"""
Observability module.

Logging setup, correlation id tracking, request middleware and the
Langfuse prompt registry.
"""

from kb_backend.observability.logger import configure_logging
from kb_backend.observability.prompt_registry import ModelConfig, PromptRegistry

__all__ = ["ModelConfig", "PromptRegistry", "configure_logging"]
