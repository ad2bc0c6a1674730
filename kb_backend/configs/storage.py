"""
Storage configuration.

S3 upload bucket, DynamoDB upload records table, chat history table
and visualization sets table.

Dependencies: pydantic_settings
System role: Blob and record store configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ONE_GIB = 1024 * 1024 * 1024


class S3UploadSettings(BaseSettings):
    """Settings for uploaded file storage (S3_BUCKET_NAME, S3_DYNAMODB_TABLE)."""

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    bucket_name: str = Field(default="", description="S3 bucket for raw uploads")
    dynamodb_table: str = Field(
        default="kb-uploads",
        description="DynamoDB table holding one record per uploaded file",
    )
    upload_prefix: str = Field(default="uploads", description="Key prefix for uploads")
    max_file_size: int = Field(default=ONE_GIB, description="Per-file size limit in bytes")


class DynamoDBSettings(BaseSettings):
    """Settings for DynamoDB-backed conversation and visualization tables."""

    model_config = SettingsConfigDict(
        env_prefix="DYNAMODB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    table_name: str = Field(
        default="langchain",
        description="Chat history table (partition key 'id' = session id)",
    )
    visualizations_table: str = Field(
        default="kb-visualizations",
        description="Visualization sets table (partition key 'id')",
    )
