"""SQLAlchemy ORM models for StockWatch.

Tables:
- stocks: tracked symbols with basic metadata
- stock_prices: daily OHLCV, one row per (stock, date)
- alerts: persisted anomaly alerts
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from src.db.base import Base

# Decimal places kept for OHLC prices.
PRICE_SCALE = 8


class StockRow(Base):
    """Tracked stock."""

    __tablename__ = "stocks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    symbol = Column(String(10), unique=True, nullable=False, index=True)
    name = Column(String(200), default="")
    exchange = Column(String(50))
    sector = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    prices = relationship("PriceRow", back_populates="stock")


class PriceRow(Base):
    """Daily OHLCV record."""

    __tablename__ = "stock_prices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    stock_id = Column(Integer, ForeignKey("stocks.id"), nullable=False)
    date = Column(Date, nullable=False)
    open = Column(Numeric(24, PRICE_SCALE), nullable=False)
    high = Column(Numeric(24, PRICE_SCALE), nullable=False)
    low = Column(Numeric(24, PRICE_SCALE), nullable=False)
    close = Column(Numeric(24, PRICE_SCALE), nullable=False)
    volume = Column(BigInteger, nullable=False, default=0)

    stock = relationship("StockRow", back_populates="prices")

    __table_args__ = (
        UniqueConstraint("stock_id", "date", name="uq_stock_prices_stock_date"),
        Index("ix_stock_prices_stock_date", "stock_id", "date"),
    )


class AlertRow(Base):
    """Persisted anomaly alert."""

    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    alert_id = Column(String(32), unique=True, nullable=False)
    stock_id = Column(Integer, ForeignKey("stocks.id"), nullable=False)
    type = Column(String(20), nullable=False)
    severity = Column(String(10), nullable=False)
    # String so that +/-Infinity from a flat history survives a round trip
    z_score = Column(String(40), nullable=False)
    message = Column(Text, nullable=False)
    observed_date = Column(Date, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_alerts_stock_type_date", "stock_id", "type", "observed_date"),
    )
