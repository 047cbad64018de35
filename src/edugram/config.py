"""Application settings via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables with EDUGRAM_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="EDUGRAM_",
        env_file=".env",
        case_sensitive=False,
    )

    # --- Core ---
    app_version: str = "1.1.0"
    debug: bool = False
    environment: str = "development"
    redis_url: str = "redis://localhost:6379/0"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 60
    log_level: str = "INFO"
    log_format: str = "json"

    # --- Identity gateway ---
    jwt_secret: str = "edugram-dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60 * 24
    jwt_issuer: str = "edugram"
    accepted_email_suffixes: list[str] = [".edu", "@test.com", "@example.com", "@demo.com"]

    # --- Blob storage ---
    media_root: str = "media"
    media_base_url: str = "http://localhost:8000/media"

    # --- Profiles ---
    display_id_year: int = 2025

    # --- Verification ---
    verification_review_delay_seconds: float = 3.0
    verification_sweep_interval_seconds: float = 1.0
    verification_sweeper_enabled: bool = True

    # --- Messaging ---
    message_poll_interval_seconds: float = 3.0


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
