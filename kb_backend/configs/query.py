"""
Query pipeline configuration.

Retrieval depth and prompt budgets for the conversational query pipeline
and the visualization generator.

Dependencies: pydantic_settings
System role: RAG prompt budgeting configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QuerySettings(BaseSettings):
    """Conversational query settings."""

    model_config = SettingsConfigDict(
        env_prefix="QUERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    retrieval_top_k: int = Field(default=3, description="Documents retrieved per query")
    max_context_chars: int = Field(
        default=12000,
        description="Character budget for retrieved context in the prompt",
    )
    max_history_chars: int = Field(
        default=3000,
        description="Character budget for conversation history in the prompt",
    )
    history_window: int = Field(
        default=5,
        description="Most recent history messages included in the prompt",
    )
    use_prompt_registry: bool = Field(
        default=False,
        description="Fetch prompts from the Langfuse registry when available",
    )
    prompt_label: str | None = Field(default=None, description="Registry label filter")


class VisualizationSettings(BaseSettings):
    """Visualization generation settings."""

    model_config = SettingsConfigDict(
        env_prefix="VISUALIZATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    retrieval_top_k: int = Field(default=20, description="Documents analysed per set")
    metadata_scan_limit: int = Field(default=50, description="Upload records analysed per set")
    document_excerpt_chars: int = Field(default=1000, description="Per-document excerpt size")
    retrieval_query: str = Field(
        default="healthcare data analysis life sciences commercial intelligence",
        description="Broad query used to sample the knowledge base",
    )
