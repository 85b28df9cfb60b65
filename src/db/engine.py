"""Database engine and session factory."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from src.settings import get_settings

_engine = None


def get_engine(url: Optional[str] = None) -> Engine:
    """Get or create the database engine.

    Passing ``url`` builds a fresh, uncached engine (used by tests and
    the CLI); otherwise a process-wide engine is created from settings.
    """
    global _engine
    if url is not None:
        return create_engine(url, pool_pre_ping=True)
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(settings.database_url, pool_pre_ping=True)
    return _engine


def get_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(bind=engine or get_engine(), expire_on_commit=False)


def create_schema(engine: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet."""
    from src.db import models  # noqa: F401  registers tables on Base.metadata
    from src.db.base import Base

    Base.metadata.create_all(engine or get_engine())


# Convenience alias
SessionLocal = get_session_factory
