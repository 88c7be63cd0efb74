"""Configuration management for the short link service."""

from typing import Literal, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator

from shortlinks.common.url_builder import normalize_path_prefix


class Config(BaseSettings):
    """Application configuration."""

    # Storage settings
    storage_backend: Literal["memory", "file", "redis"] = Field(
        default="file",
        description="Where the short link table is kept: memory, file or redis"
    )

    storage_path: str = Field(
        default="./data",
        description="Directory for the file storage backend"
    )

    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for the redis storage backend"
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=9200,
        description="Port to listen on"
    )

    # Short link settings
    base_url: str = Field(
        default="http://localhost:9200",
        description="Base URL for generating short URLs"
    )

    path_prefix: str = Field(
        default="",
        description="Path the redirect route is mounted under (e.g., '/s' serves /s/abc123)"
    )

    short_code_length: int = Field(
        default=6,
        ge=4,
        le=10,
        description="Length of generated short codes"
    )

    default_validity_minutes: int = Field(
        default=30,
        ge=1,
        description="Validity window used when a request does not give one"
    )

    max_generation_attempts: int = Field(
        default=5,
        ge=1,
        description="Generated candidates tried before giving up"
    )

    max_batch_size: int = Field(
        default=5,
        ge=1,
        description="Maximum URLs accepted by one batch request"
    )

    redirect_delay_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Pause before resolving a redirect (cancelled if the client disconnects)"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    # Remote event log settings
    log_api_url: Optional[str] = Field(
        default=None,
        description="Endpoint receiving audit events; events only go to the local log if unset"
    )

    log_api_token: Optional[str] = Field(
        default=None,
        description="Bearer token passed to the event log API"
    )

    log_api_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout in seconds for event log API requests"
    )

    @field_validator("path_prefix")
    @classmethod
    def _normalize_path_prefix(cls, value: str) -> str:
        return normalize_path_prefix(value)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
