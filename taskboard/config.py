"""Configuration settings using Pydantic BaseSettings."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Configuration
    app_name: str = Field(default="Taskboard", description="Service name shown in the API index")
    app_host: str = Field(default="0.0.0.0", description="FastAPI host")
    app_port: int = Field(default=8000, description="FastAPI port")
    debug: bool = Field(default=False, description="Enable debug mode")
    environment: str = Field(default="development", description="Deployment environment name")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Optional[Path] = Field(default=None, description="Directory for rotating log files")

    # Identity Configuration
    jwt_secret: str = Field(..., description="Secret used to verify bearer tokens")
    jwt_algorithm: str = Field(default="HS256", description="Bearer token signing algorithm")
    access_token_expire_minutes: int = Field(default=60 * 24 * 30, description="Lifetime of issued tokens")

    # Activity Configuration
    activity_feed_limit: int = Field(default=5, ge=1, le=50, description="Default number of recent activities returned")

    # Sync Client Configuration
    api_base_url: str = Field(default="http://localhost:8000", description="Base URL used by the sync client")
    request_timeout_seconds: float = Field(default=10.0, gt=0, description="HTTP timeout for the sync client")
