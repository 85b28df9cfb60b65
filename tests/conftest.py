"""Pytest configuration and shared fixtures."""

import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.market_data.models import PricePoint  # noqa: E402
from src.market_data.repository import InMemoryPriceRepository  # noqa: E402

BASE_DATE = date(2024, 1, 1)


def make_series(closes, volumes=None, start=BASE_DATE):
    """Consecutive daily PricePoints from closes (and optional volumes)."""
    volumes = volumes if volumes is not None else [1_000_000] * len(closes)
    return [
        PricePoint.flat(start + timedelta(days=i), close, volume)
        for i, (close, volume) in enumerate(zip(closes, volumes))
    ]


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Drop cached settings and STOCKWATCH_ env overrides around each test."""
    from src.settings import get_settings

    for key in ("STOCKWATCH_LOG_LEVEL", "STOCKWATCH_LOG_FORMAT", "STOCKWATCH_ANOMALY_WINDOW"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(name="make_series")
def make_series_fixture():
    return make_series


@pytest.fixture
def repo():
    """Repository with the reference scenario stocks.

    AAA: 21 days, volume 1M then 5M on the last day.
    BBB: one price point.
    CCC: close 100 -> 150 from 2024-01-01.
    DDD: close 50 -> 60 (+20%) from 2024-01-01.
    EEE: data only before 2024-01-01.
    """
    return InMemoryPriceRepository.from_points({
        "AAA": make_series([10] * 21, [1_000_000] * 20 + [5_000_000]),
        "BBB": make_series([25]),
        "CCC": make_series([100, 110, 120, 130, 150]),
        "DDD": make_series([50, 55, 52, 58, 60]),
        "EEE": make_series([40, 41, 42], start=date(2023, 12, 1)),
    })
