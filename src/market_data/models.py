"""Market data models.

Immutable daily OHLCV records and stock metadata consumed by the
anomaly detector and the investment simulator.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from src.errors.exceptions import InvalidPriceDataError

Numeric = Union[int, float, str, Decimal]

PRICE_FIELDS = ("open", "high", "low", "close")


def to_decimal(value: Numeric, field_name: str = "value") -> Decimal:
    """Coerce a number to Decimal via its string form (no binary float noise)."""
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise InvalidPriceDataError(f"{field_name} is not numeric: {value!r}", field=field_name)
    if not result.is_finite():
        raise InvalidPriceDataError(f"{field_name} must be finite: {value!r}", field=field_name)
    return result


def to_date(value: Union[date, datetime, str]) -> date:
    """Coerce a date, datetime, or ISO date string to a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class PricePoint:
    """Single trading day of OHLCV data.

    Prices are stored as Decimal, volume as int. Construction enforces
    ``low <= open, close <= high`` and ``volume >= 0``.
    """

    date: date
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: int

    def __post_init__(self):
        object.__setattr__(self, "date", to_date(self.date))
        for name in PRICE_FIELDS:
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))

        volume = self.volume
        if isinstance(volume, (float, Decimal, str)):
            volume = to_decimal(volume, "volume")
            if volume != volume.to_integral_value():
                raise InvalidPriceDataError(f"volume must be a whole number: {self.volume!r}", field="volume")
        object.__setattr__(self, "volume", int(volume))

        if self.volume < 0:
            raise InvalidPriceDataError(f"volume must be >= 0 on {self.date}", field="volume")
        if self.low > self.high:
            raise InvalidPriceDataError(f"low {self.low} above high {self.high} on {self.date}", field="low")
        for name in ("open", "close"):
            value = getattr(self, name)
            if not self.low <= value <= self.high:
                raise InvalidPriceDataError(
                    f"{name} {value} outside [{self.low}, {self.high}] on {self.date}",
                    field=name,
                )

    @classmethod
    def flat(cls, day: Union[date, str], close: Numeric, volume: int = 0) -> "PricePoint":
        """Build a point whose open/high/low all equal the close."""
        return cls(date=day, open=close, high=close, low=close, close=close, volume=volume)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }


@dataclass(frozen=True)
class Stock:
    """Tracked stock metadata."""

    symbol: str
    name: str = ""
    exchange: Optional[str] = None
    sector: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
