"""Configuration management using Pydantic Settings."""

import os

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

    # AWS Configuration
    aws_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_session_token: str | None = None  # Required for temporary credentials

    @field_validator(
        "aws_access_key_id",
        "aws_secret_access_key",
        "aws_session_token",
        mode="before",
    )
    @classmethod
    def convert_empty_string_to_none(cls, v):
        """Convert empty strings to None so boto3 can use IAM role in Lambda."""
        if v is None:
            return None
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    # DynamoDB Configuration
    dynamodb_endpoint_url: str | None = None
    dynamodb_table: str = "dynamic-dns-table"

    # Route 53 Configuration
    route53_endpoint_url: str | None = None
    dns_timeout_seconds: float = 10.0
    zone_cache_ttl_seconds: int = 300

    # Application Configuration
    log_level: str = "INFO"
    api_title: str = "Dynamic Route 53 DNS"
    api_version: str = "1.0.0"
    update_path: str = "/nic/update"
    trust_forwarded_for: bool = True

    # Managed record limits
    min_record_ttl: int = 60
    max_record_ttl: int = 86400
    default_record_ttl: int = 60

    # Update history
    event_retention_days: int = 30
    default_history_limit: int = 50
    max_history_limit: int = 500

    # Rate limiting (fixed window, per hostname)
    rate_limit_per_window: int = 60
    rate_limit_window_seconds: int = 3600

    # Brute-force lockout
    lockout_threshold: int = 5
    lockout_duration_seconds: int = 900
    lockout_record_ttl_seconds: int = 3600

    # Operator login
    admin_username: str = "admin"
    admin_password: str | None = None
    session_ttl_hours: int = 24
    session_cookie_name: str = "session_id"
    session_cookie_secure: bool = True


# Global settings instance
settings = Settings()
