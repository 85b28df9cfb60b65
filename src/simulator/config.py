"""Configuration for buy-and-hold simulation and comparison."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from src.settings import Settings, get_settings

# Rounding applied to reported figures; shares are never rounded
MONEY_PLACES = Decimal("0.01")
PERCENT_PLACES = Decimal("0.0001")
DAYS_PER_YEAR = 365

DEFAULT_MIN_COMPARE_SYMBOLS = 2
DEFAULT_MAX_COMPARE_SYMBOLS = 5


@dataclass
class SimulatorConfig:
    """Reporting precision and comparison bounds."""

    money_places: Decimal = MONEY_PLACES
    percent_places: Decimal = PERCENT_PLACES
    days_per_year: int = DAYS_PER_YEAR
    min_compare_symbols: int = DEFAULT_MIN_COMPARE_SYMBOLS
    max_compare_symbols: int = DEFAULT_MAX_COMPARE_SYMBOLS

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SimulatorConfig":
        settings = settings or get_settings()
        return cls(
            min_compare_symbols=settings.min_compare_symbols,
            max_compare_symbols=settings.max_compare_symbols,
        )
