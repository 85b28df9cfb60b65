"""SQLAlchemy-backed time-series repository."""

import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from src.db.models import PRICE_SCALE, PriceRow, StockRow
from src.errors.exceptions import InvalidPriceDataError
from src.market_data.models import PricePoint, Stock
from src.market_data.repository import TimeSeriesRepository

logger = logging.getLogger(__name__)


def _check_scale(symbol: str, point: PricePoint) -> None:
    for field in ("open", "high", "low", "close"):
        value = getattr(point, field)
        if value.normalize().as_tuple().exponent < -PRICE_SCALE:
            raise InvalidPriceDataError(
                f"{symbol} {point.date} {field}={value} has more than {PRICE_SCALE} decimal places",
                field=field,
            )


def _to_point(row: PriceRow) -> PricePoint:
    return PricePoint(
        date=row.date,
        open=row.open,
        high=row.high,
        low=row.low,
        close=row.close,
        volume=row.volume,
    )


class SqlPriceRepository(TimeSeriesRepository):
    """Reads ``stock_prices`` through short-lived sessions.

    Each query opens its own session and materializes rows into frozen
    PricePoints before the session closes.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get_prices(
        self,
        symbol: str,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
    ) -> Tuple[PricePoint, ...]:
        stmt = (
            select(PriceRow)
            .join(StockRow, PriceRow.stock_id == StockRow.id)
            .where(StockRow.symbol == symbol)
        )
        if from_date is not None:
            stmt = stmt.where(PriceRow.date >= from_date)
        if to_date is not None:
            stmt = stmt.where(PriceRow.date <= to_date)
        stmt = stmt.order_by(PriceRow.date.asc())

        with self._session_factory() as session:
            return tuple(_to_point(row) for row in session.scalars(stmt))

    def get_latest(self, symbol: str, n: int) -> Tuple[PricePoint, ...]:
        if n <= 0:
            return ()
        stmt = (
            select(PriceRow)
            .join(StockRow, PriceRow.stock_id == StockRow.id)
            .where(StockRow.symbol == symbol)
            .order_by(PriceRow.date.desc())
            .limit(n)
        )
        with self._session_factory() as session:
            rows = list(session.scalars(stmt))
        return tuple(_to_point(row) for row in reversed(rows))

    def list_symbols(self) -> List[str]:
        with self._session_factory() as session:
            return list(session.scalars(select(StockRow.symbol).order_by(StockRow.symbol)))

    def get_stock(self, symbol: str) -> Optional[Stock]:
        with self._session_factory() as session:
            row = session.scalars(select(StockRow).where(StockRow.symbol == symbol)).first()
            if row is None:
                return None
            return Stock(symbol=row.symbol, name=row.name or "", exchange=row.exchange, sector=row.sector)

    # ── Ingestion helpers ─────────────────────────────────────────────

    def upsert_stock(self, session: Session, stock: Stock) -> StockRow:
        row = session.scalars(select(StockRow).where(StockRow.symbol == stock.symbol)).first()
        if row is None:
            row = StockRow(symbol=stock.symbol, name=stock.name, exchange=stock.exchange, sector=stock.sector)
            session.add(row)
            session.flush()
        return row

    def save_prices(self, symbol: str, points: Iterable[PricePoint]) -> int:
        """Insert or update price rows for a symbol. Returns rows written.

        Prices with more decimal places than the column keeps are rejected
        before anything is written.
        """
        points = list(points)
        for point in points:
            _check_scale(symbol, point)
        written = 0
        with self._session_factory() as session:
            stock_row = self.upsert_stock(session, Stock(symbol=symbol))
            existing = {
                row.date: row
                for row in session.scalars(select(PriceRow).where(PriceRow.stock_id == stock_row.id))
            }
            for point in points:
                row = existing.get(point.date)
                if row is None:
                    row = PriceRow(stock_id=stock_row.id, date=point.date)
                    session.add(row)
                    existing[point.date] = row
                row.open = point.open
                row.high = point.high
                row.low = point.low
                row.close = point.close
                row.volume = point.volume
                written += 1
            session.commit()
        logger.debug("Saved %d price rows for %s", written, symbol)
        return written
