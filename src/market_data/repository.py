"""Time-series repository interface and in-memory implementation.

The analytics engines only read through ``TimeSeriesRepository``; every
call returns an immutable, date-ascending snapshot (a tuple), never a
lazy handle into storage.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from src.errors.exceptions import InvalidPriceDataError
from src.market_data.models import PricePoint, Stock

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["symbol", "date", "open", "high", "low", "close", "volume"]


class TimeSeriesRepository(ABC):
    """Read-only access to daily OHLCV history per symbol."""

    @abstractmethod
    def get_prices(
        self,
        symbol: str,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> Tuple[PricePoint, ...]:
        """Return points with ``from_date <= date <= to_date``, oldest first.

        Unknown symbols yield an empty tuple.
        """

    @abstractmethod
    def get_latest(self, symbol: str, n: int) -> Tuple[PricePoint, ...]:
        """Return the most recent ``n`` points, oldest first."""

    @abstractmethod
    def list_symbols(self) -> List[str]:
        """Return all tracked symbols in lexical order."""

    def has_symbol(self, symbol: str) -> bool:
        return len(self.get_latest(symbol, 1)) > 0

    def get_stock(self, symbol: str) -> Optional[Stock]:
        """Return stock metadata, or None when the backend keeps none."""
        return None


class InMemoryPriceRepository(TimeSeriesRepository):
    """Dictionary-backed repository used by the CLI and tests."""

    def __init__(self):
        self._prices: Dict[str, Tuple[PricePoint, ...]] = {}
        self._stocks: Dict[str, Stock] = {}

    # ── Loading ───────────────────────────────────────────────────────

    def add_stock(self, stock: Stock) -> None:
        self._stocks[stock.symbol] = stock
        self._prices.setdefault(stock.symbol, ())

    def add_prices(self, symbol: str, points: Iterable[PricePoint]) -> None:
        """Merge points into a symbol's history.

        Later points for an already-present date replace earlier ones.
        """
        merged = {p.date: p for p in self._prices.get(symbol, ())}
        for point in points:
            merged[point.date] = point
        self._prices[symbol] = tuple(merged[d] for d in sorted(merged))
        if symbol not in self._stocks:
            self._stocks[symbol] = Stock(symbol=symbol)

    def load_frame(self, frame: pd.DataFrame) -> int:
        """Load a long-format DataFrame with ``CSV_COLUMNS``.

        Returns:
            Number of rows loaded.
        """
        missing = [c for c in CSV_COLUMNS if c not in frame.columns]
        if missing:
            raise InvalidPriceDataError(f"Missing columns: {', '.join(missing)}")

        frame = frame.copy()
        frame["symbol"] = frame["symbol"].astype(str).str.strip().str.upper()
        dates = pd.to_datetime(frame["date"], errors="coerce", format="ISO8601")
        unparsed = frame.loc[dates.isna(), "date"]
        if not unparsed.empty:
            raise InvalidPriceDataError(f"Unparseable date: {unparsed.iloc[0]!r}", field="date")
        frame["date"] = dates.dt.date

        for symbol, group in frame.groupby("symbol", sort=True):
            points = [
                PricePoint(
                    date=row.date,
                    open=str(row.open),
                    high=str(row.high),
                    low=str(row.low),
                    close=str(row.close),
                    volume=row.volume,
                )
                for row in group.itertuples(index=False)
            ]
            self.add_prices(symbol, points)

        logger.info("Loaded %d price rows for %d symbols", len(frame), frame["symbol"].nunique())
        return len(frame)

    @classmethod
    def from_csv(cls, path: Union[str, Path]) -> "InMemoryPriceRepository":
        """Build a repository from a CSV file with ``CSV_COLUMNS`` headers."""
        # Price columns stay strings so Decimal sees the exact CSV text
        try:
            frame = pd.read_csv(
                path,
                dtype={"symbol": str, "open": str, "high": str, "low": str, "close": str},
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
            raise InvalidPriceDataError(f"Unreadable prices file {path}: {exc}") from exc
        repo = cls()
        repo.load_frame(frame)
        return repo

    @classmethod
    def from_points(cls, data: Dict[str, Sequence[PricePoint]]) -> "InMemoryPriceRepository":
        repo = cls()
        for symbol, points in data.items():
            repo.add_prices(symbol, points)
        return repo

    # ── TimeSeriesRepository ──────────────────────────────────────────

    def get_prices(
        self,
        symbol: str,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> Tuple[PricePoint, ...]:
        points = self._prices.get(symbol, ())
        return tuple(
            p for p in points
            if (from_date is None or p.date >= from_date)
            and (to_date is None or p.date <= to_date)
        )

    def get_latest(self, symbol: str, n: int) -> Tuple[PricePoint, ...]:
        if n <= 0:
            return ()
        return self._prices.get(symbol, ())[-n:]

    def list_symbols(self) -> List[str]:
        return sorted(self._stocks)

    def get_stock(self, symbol: str) -> Optional[Stock]:
        return self._stocks.get(symbol)
