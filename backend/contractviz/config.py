"""
Configuration loader.

Uses pydantic-settings to read environment variables from .env and expose
them as a typed Settings object. Provides a cached get_settings() accessor.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── CORS ──────────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # ── Limits ────────────────────────────────────────────────
    MAX_INPUT_SIZE_BYTES: int = 200_000
    MAX_BATCH_CONTRACTS: int = 20
    ANALYZE_RATE_LIMIT: str = "30/minute"
    RATE_LIMIT_ENABLED: bool = True

    # ── Environment ───────────────────────────────────────────
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = ""

    @property
    def allowed_origins_list(self) -> list[str]:
        """Return ALLOWED_ORIGINS as a list split on commas."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()
