"""Configuration Management."""

import os
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="VRUX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Server
    host: str = Field(default="0.0.0.0", description="HTTP bind address")
    port: int = Field(default=8000, gt=0, description="HTTP port")
    environment: str = Field(default="development", description="Deployment environment")
    dev_mode: bool = Field(default=False, description="Expose error details in responses")
    app_url: str = Field(default="http://localhost:3000", description="Public app URL for share links")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # Providers
    openai_api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", ""), description="OpenAI API key"
    )
    openai_base_url: str = Field(default="https://api.openai.com/v1", description="OpenAI API base URL")
    openai_model: str = Field(default="gpt-4o", description="Default OpenAI model")
    gemini_api_key: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_API_KEY", ""), description="Gemini API key"
    )
    gemini_model: str = Field(default="gemini-2.0-flash-exp", description="Gemini model name")
    provider_timeout: float = Field(default=30.0, gt=0, description="Provider request timeout")

    # Generation
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Default temperature")
    max_tokens: int = Field(default=2000, gt=0, description="Default max output tokens")
    max_variants: int = Field(default=3, gt=0, le=3, description="Max variants per stream")
    dev_delay: float = Field(default=1.0, ge=0.0, description="Simulated delay for dev generation")
    mock_chunk_delay: float = Field(default=0.03, ge=0.0, description="Pause between mock provider chunks")

    # Rate limiting
    rate_limit_window: int = Field(default=60, gt=0, description="Rate limit window (seconds)")
    rate_limit_requests: int = Field(default=10, gt=0, description="Requests allowed per window")

    # Caching
    enable_cache: bool = Field(default=True, description="Enable provider request caching")
    cache_size: int = Field(default=100, gt=0, description="Cache max size")
    cache_ttl: int = Field(default=300, gt=0, description="Cache TTL (seconds)")

    # Storage
    share_data_path: str = Field(default="data/shares.json", description="Share store file")

    # Auth
    session_ttl: int = Field(default=86_400, gt=0, description="Session lifetime (seconds)")
    session_cookie: str = Field(default="session", description="Session cookie name")
    seed_users: bool = Field(default=True, description="Create demo and admin accounts")

    # Operations
    metrics_interval: float = Field(default=2.0, gt=0, description="Metrics push interval (seconds)")
    services_interval: float = Field(default=10.0, gt=0, description="Services push interval (seconds)")
    alert_interval: float = Field(default=30.0, gt=0, description="Alert evaluation interval (seconds)")
    history_window: int = Field(default=20, gt=0, description="Dashboard rolling window length")
    enable_alerting: bool = Field(default=True, description="Run the alert evaluation loop")
    alert_webhook_url: str = Field(default="", description="Webhook for provider failure alerts")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
