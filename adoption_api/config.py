"""Configuration management using Pydantic Settings."""

import os
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Only load .env file in development (not Lambda/production)
        env_file=".env" if os.getenv("AWS_EXECUTION_ENV") is None else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage backend for api keys, idempotency records and rate-limit counters
    storage_backend: Literal["memory", "dynamodb"] = "memory"

    # AWS Configuration
    aws_region: str = "us-east-2"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_session_token: str | None = None  # Required for temporary credentials

    @field_validator(
        "aws_access_key_id",
        "aws_secret_access_key",
        "aws_session_token",
        "bootstrap_api_key",
        mode="before",
    )
    @classmethod
    def convert_empty_string_to_none(cls, v):
        """Convert empty strings to None so unset env vars behave as absent."""
        if v is None:
            return None
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    # DynamoDB Configuration
    dynamodb_endpoint_url: str | None = None
    dynamodb_table_api_keys: str = "adoption-api-keys"
    dynamodb_table_idempotency: str = "adoption-idempotency"
    dynamodb_table_rate_limits: str = "adoption-rate-limits"

    # Application Configuration
    log_level: str = "INFO"
    api_title: str = "Adoption API"
    api_version: str = "2.0.0"

    # Rate Limiting (rate.limit.window.seconds / rate.limit.max.requests)
    rate_limit_window_seconds: int = 60
    rate_limit_max_requests: int = 10

    # Authentication
    enforce_api_key_expiry: bool = False
    bootstrap_api_key: str | None = None
    bootstrap_api_key_owner: str = "bootstrap"

    # API Limits
    max_request_size_bytes: int = 512 * 1024  # 512KB


# Global settings instance
settings = Settings()
