"""
Centralized configuration for the Courses backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., STRIPE_*, SUPABASE_*).
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Courses API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Storage: "memory" keeps everything in-process (tests, local dev),
    # "supabase" uses the service-role client.
    storage_backend: Literal["memory", "supabase"] = "memory"

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""
    supabase_db_url: str = ""

    # Stripe webhooks
    stripe_webhook_secret: str = ""
    stripe_webhook_tolerance: int = 300  # seconds

    # "arrival": last received event wins.
    # "event_time": events older than the last applied one are skipped.
    subscription_event_ordering: Literal["arrival", "event_time"] = "arrival"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
