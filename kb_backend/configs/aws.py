"""
AWS service configuration.

Region, Bedrock model and knowledge base identifiers.

Dependencies: pydantic_settings
System role: AWS client configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AWSSettings(BaseSettings):
    """Shared AWS settings (AWS_REGION)."""

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    region: str = Field(default="us-east-1", description="AWS region for every client")


class BedrockSettings(BaseSettings):
    """Bedrock model and knowledge base settings."""

    model_config = SettingsConfigDict(
        env_prefix="BEDROCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    model_id: str = Field(
        default="anthropic.claude-3-5-sonnet-20240620-v1:0",
        description="Bedrock foundation model used for generation and analysis",
    )
    temperature: float = Field(default=0.0, description="Model temperature")
    knowledge_base_id: str = Field(
        default="",
        description="Bedrock knowledge base queried for retrieval",
    )
    data_source_id: str = Field(
        default="",
        description="Knowledge base data source re-synced after uploads",
    )
