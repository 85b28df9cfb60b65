"""Centralized settings for the StockWatch analytics core.

Uses pydantic-settings to load from environment variables (prefixed
STOCKWATCH_) with defaults matching the production job configuration.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """StockWatch settings loaded from environment variables."""

    # --- Anomaly detection ---
    anomaly_window: int = 20
    anomaly_threshold: float = 3.0
    anomaly_min_observations: int = 2

    # --- Batch sweep job boundary ---
    sweep_timeout_seconds: int = 300
    sweep_max_attempts: int = 3

    # --- Alerts ---
    alert_dedup: bool = True

    # --- Simulator input bounds ---
    min_investment: float = 1_000_000
    max_investment: float = 10_000_000_000
    min_compare_symbols: int = 2
    max_compare_symbols: int = 5

    # --- Database ---
    database_url: str = "sqlite:///stockwatch.db"

    model_config = {
        "env_prefix": "STOCKWATCH_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
