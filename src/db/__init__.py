"""Database package for StockWatch."""

from src.db.base import Base
from src.db.engine import SessionLocal, create_schema, get_engine, get_session_factory
from src.db.models import AlertRow, PriceRow, StockRow

__all__ = [
    "Base",
    "SessionLocal",
    "create_schema",
    "get_engine",
    "get_session_factory",
    "AlertRow",
    "PriceRow",
    "StockRow",
]
