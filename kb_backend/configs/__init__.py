"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
Every settings class reads its own environment variable prefix.
"""

from kb_backend.configs.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
