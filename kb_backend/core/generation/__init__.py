"""Bedrock text generation."""

from kb_backend.core.generation.bedrock_generator import BedrockGenerator, content_to_text

__all__ = ["BedrockGenerator", "content_to_text"]
