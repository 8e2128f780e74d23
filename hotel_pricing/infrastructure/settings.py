"""Runtime configuration for the pricing library.

Relies on pydantic-settings so that environment variables (prefixed with
``HOTEL_PRICING_``) can override defaults.
"""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Captures runtime configuration for price computations"""

    decimal_places: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Number of decimal places monetary amounts are rounded to",
    )
    log_level: str = Field(default="WARNING", description="Level used by configure_logging")

    model_config = SettingsConfigDict(env_prefix="HOTEL_PRICING_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance"""
    return Settings()
