"""
config.py — Centralized Application Configuration Loader

Purpose:
- Single source of truth for forecasting settings.
- Load and validate environment variables from `.env` or OS environment.

Settings cover:
- Forecast horizon used when a model does not carry its own period count
- Cost growth dampening and week/month conversion used by the calculators
- Forecast memoization switch and its entry bound
- Logging level and API CORS origins

This module does NOT:
- Read or write any model data.
- Modify runtime settings after import.
"""

from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/forecaster/core/config.py
# .env should be at: backend/.env
_CONFIG_DIR = Path(__file__).parent
_BACKEND_DIR = _CONFIG_DIR.parent.parent
_ENV_FILE = _BACKEND_DIR / ".env"

if _ENV_FILE.exists():
    _ENV_FILE_PATH = str(_ENV_FILE.resolve())
else:
    # Fallback: pydantic looks in CWD
    _ENV_FILE_PATH = ".env"


class Settings(BaseSettings):
    """
    Forecasting backend settings.

    Every value can be overridden through an environment variable of the
    same name (e.g. FORECAST_DEFAULT_HORIZON=24).
    """
    LOG_LEVEL: str = Field(
        "INFO",
        description="Root logging level applied at startup",
    )

    # Forecast engine
    FORECAST_DEFAULT_HORIZON: int = Field(
        12,
        description="Number of periods for models that do not define their own duration",
    )
    COST_GROWTH_DAMPENING: float = Field(
        0.7,
        description="Share of the revenue growth rate applied to recurring/variable costs",
    )
    WEEKS_PER_MONTH: float = Field(
        365.25 / 7 / 12,
        description="Weeks per month used to convert weekly amounts to monthly periods",
    )
    FORECAST_CACHE_ENABLED: bool = Field(
        True,
        description="Memoize generated series keyed by model and delta content",
    )
    FORECAST_CACHE_MAX_ENTRIES: int = Field(
        256,
        description="Upper bound on memoized series; least recently used are evicted first",
    )

    # API
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )

    @field_validator("FORECAST_DEFAULT_HORIZON")
    @classmethod
    def horizon_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("FORECAST_DEFAULT_HORIZON must be at least 1")
        return v

    @field_validator("FORECAST_CACHE_MAX_ENTRIES")
    @classmethod
    def cache_bound_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("FORECAST_CACHE_MAX_ENTRIES must be at least 1")
        return v

    @field_validator("COST_GROWTH_DAMPENING")
    @classmethod
    def dampening_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("COST_GROWTH_DAMPENING cannot be negative")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_level(cls, v):
        """Strip and upper-case the level name."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Singleton: every importer shares the same settings object.
settings = Settings()
