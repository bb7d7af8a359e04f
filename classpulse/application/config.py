"""Application configuration using Pydantic Settings."""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "classpulse"
    app_version: str = "0.1.0"
    debug: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 4000
    cors_origins: List[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    # Auth
    jwt_secret: str = "dev-secret"
    jwt_algorithm: str = "HS256"
    jwt_expires_hours: int = 24
    dev_pw: str = "password"  # password of the built-in development accounts

    # Outbound mail for reports (delivery is skipped when host/user/pass are unset)
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_from: str = "noreply@example.com"

    # Daily report job
    report_enabled: bool = True
    report_hour_utc: int = 18
    report_minute_utc: int = 0

    # Live relay
    relay_mailbox_size: int = 256

    # Durable storage: "memory" (process lifetime only) or "dynamodb"
    datastore_type: str = "memory"
    aws_region: str = "us-west-2"
    sessions_table_name: str = "ClassSessions"
    snapshots_table_name: str = "ClassSnapshots"


# Create a singleton instance
settings = Settings()
