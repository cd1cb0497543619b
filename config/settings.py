from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Core
    ENVIRONMENT: str = Field(default="production")
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    LOG_LEVEL: str = Field(default="INFO")
    VERSION: str = Field(default="1.0.0")

    # Shared secret for /api/* (X-Api-Key). Empty rejects every call.
    API_KEY: str = Field(default="")

    # Messaging
    TELEGRAM_API_BASE: str = Field(default="https://api.telegram.org")
    DISPLAY_TIMEZONE: str = Field(default="UTC")
    TIMESTAMP_FORMAT: str = Field(default="%d.%m.%Y, %H:%M:%S")

    # Limits (in-memory, per source address)
    RATE_LIMIT_WINDOW_SECONDS: int = Field(default=15 * 60)
    RATE_LIMIT_MAX_REQUESTS: int = Field(default=100)
    TRUST_FORWARDED_FOR: bool = Field(default=False)


settings = Settings()
