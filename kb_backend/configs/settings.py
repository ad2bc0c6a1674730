"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from kb_backend.configs.api import ApiSettings
from kb_backend.configs.aws import AWSSettings, BedrockSettings
from kb_backend.configs.base import BaseSettings
from kb_backend.configs.observability import ObservabilitySettings
from kb_backend.configs.query import QuerySettings, VisualizationSettings
from kb_backend.configs.storage import DynamoDBSettings, S3UploadSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    aws: AWSSettings = AWSSettings()
    bedrock: BedrockSettings = BedrockSettings()
    s3: S3UploadSettings = S3UploadSettings()
    dynamodb: DynamoDBSettings = DynamoDBSettings()
    query: QuerySettings = QuerySettings()
    visualization: VisualizationSettings = VisualizationSettings()
    api: ApiSettings = ApiSettings()
    observability: ObservabilitySettings = ObservabilitySettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Environment variables (and .env) are read once, on first call.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
