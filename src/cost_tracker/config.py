"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from cost_tracker.services.comparison import DEFAULT_COUNT_UNITS

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    environment: str = _ENVIRONMENT
    count_units: str | None = None
    default_piece_weight_g: float | None = None
    default_page_size: int = 50

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_count_units(raw: str | None) -> frozenset[str]:
    """Parse the comma-separated list of units that count pieces."""
    if raw is None:
        return DEFAULT_COUNT_UNITS
    units = frozenset(chunk.strip() for chunk in raw.split(",") if chunk.strip())
    return units or DEFAULT_COUNT_UNITS
