"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from pydantic_settings import BaseSettings

from app.calculations.assumptions import (
    COMMERCIAL_DEPRECIATION_YEARS,
    DEFAULT_LAND_VALUE_RATIO,
    DEFAULT_MARGINAL_TAX_RATE,
    RESIDENTIAL_DEPRECIATION_YEARS,
    TaxAssumptions,
)


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Property Financials"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Tax assumptions
    residential_depreciation_years: float = RESIDENTIAL_DEPRECIATION_YEARS
    commercial_depreciation_years: float = COMMERCIAL_DEPRECIATION_YEARS
    default_marginal_tax_rate: float = DEFAULT_MARGINAL_TAX_RATE
    default_land_value_ratio: float = DEFAULT_LAND_VALUE_RATIO

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_tax_assumptions() -> TaxAssumptions:
    """Tax assumptions with any environment overrides applied."""
    settings = get_settings()
    return TaxAssumptions(
        residential_years=settings.residential_depreciation_years,
        commercial_years=settings.commercial_depreciation_years,
        marginal_tax_rate=settings.default_marginal_tax_rate,
        land_value_ratio=settings.default_land_value_ratio,
    )
