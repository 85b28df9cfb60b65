"""Market data: OHLCV models and read-only time-series repositories."""

from src.market_data.models import PricePoint, Stock, to_date, to_decimal
from src.market_data.repository import (
    CSV_COLUMNS,
    InMemoryPriceRepository,
    TimeSeriesRepository,
)
from src.market_data.sql_repository import SqlPriceRepository

__all__ = [
    "PricePoint",
    "Stock",
    "to_date",
    "to_decimal",
    "CSV_COLUMNS",
    "InMemoryPriceRepository",
    "TimeSeriesRepository",
    "SqlPriceRepository",
]
