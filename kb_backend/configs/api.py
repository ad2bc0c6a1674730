"""
HTTP API configuration.

Dependencies: pydantic_settings
System role: API key and CORS configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """API surface settings."""

    model_config = SettingsConfigDict(
        env_prefix="API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    key: str | None = Field(
        default=None,
        description="Shared API key; the check is disabled when unset",
    )
    host_header: str = Field(default="http://localhost:8000", description="Public base URL")
    allowed_origins: list[str] = Field(
        default_factory=list,
        description="Extra CORS origins allowed besides host_header",
    )
    port: int = Field(default=8000, description="Port used by the uvicorn launcher")
