"""Buy-and-hold investment simulation.

Buys ``amount`` worth of fractional shares at the close of the first
trading day on or after the start date, then values the position at
every later close. No splits, dividends, fees or taxes are modeled;
closes are taken as already adjusted.
"""

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional, Sequence

from src.errors.exceptions import (
    InvalidPriceDataError,
    NoDataForRangeError,
    UnknownSymbolError,
    ValidationError,
)
from src.logging_config.performance import log_performance
from src.market_data.models import Numeric, PricePoint, to_decimal
from src.market_data.repository import TimeSeriesRepository

from .config import SimulatorConfig
from .models import SimulationResult, ValuePoint

logger = logging.getLogger(__name__)

ZERO = Decimal(0)
HUNDRED = Decimal(100)
PRECISION = 28


class SimulationEngine:
    """Deterministic simulation over a repository snapshot."""

    def __init__(
        self,
        repository: TimeSeriesRepository,
        config: Optional[SimulatorConfig] = None,
    ):
        self.repository = repository
        self.config = config or SimulatorConfig()

    @log_performance(threshold_ms=500)
    def simulate(
        self,
        symbol: str,
        amount: Numeric,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> SimulationResult:
        """Simulate investing ``amount`` in ``symbol`` at ``start_date``.

        Args:
            symbol: Stock symbol.
            amount: Amount to invest; must be positive.
            start_date: Entry is the first trading day on or after it.
            end_date: Optional last day to value; defaults to latest data.

        Returns:
            SimulationResult with the value curve from entry to end.

        Raises:
            ValidationError: Non-positive amount or end before start.
            UnknownSymbolError: No price data at all for ``symbol``.
            NoDataForRangeError: No price data on or after ``start_date``.
        """
        amount = to_decimal(amount, "amount")
        if amount <= 0:
            raise ValidationError("Investment amount must be greater than 0", field="amount")
        if end_date is not None and end_date < start_date:
            raise ValidationError(
                f"end_date ({end_date}) must not be before start_date ({start_date})",
                field="end_date",
            )

        points = self.repository.get_prices(symbol, from_date=start_date, to_date=end_date)
        if not points:
            if not self.repository.has_symbol(symbol):
                raise UnknownSymbolError(symbol)
            raise NoDataForRangeError(symbol, start_date)

        return self._simulate_points(symbol, amount, start_date, points)

    def _simulate_points(
        self,
        symbol: str,
        amount: Decimal,
        requested_start: date,
        points: Sequence[PricePoint],
    ) -> SimulationResult:
        entry, last = points[0], points[-1]
        if entry.close <= 0:
            raise InvalidPriceDataError(
                f"Entry close for {symbol} on {entry.date} must be positive", field="close"
            )

        with localcontext() as ctx:
            ctx.prec = PRECISION
            shares = amount / entry.close
            curve = tuple(self._value_point(shares, amount, p) for p in points)

            final_value = shares * last.close
            absolute_return = final_value - amount
            percent_return = absolute_return / amount * HUNDRED
            price_change = last.close - entry.close
            price_change_percent = price_change / entry.close * HUNDRED
            days_held = (last.date - entry.date).days
            annualized = self._annualized(final_value / amount, days_held)

        result = SimulationResult(
            symbol=symbol,
            amount_invested=amount,
            start_date=entry.date,
            end_date=last.date,
            shares_bought=shares,
            start_price=entry.close,
            end_price=last.close,
            final_value=self._money(final_value),
            absolute_return=self._money(absolute_return),
            percent_return=self._percent(percent_return),
            value_curve=curve,
            days_held=days_held,
            annualized_return=self._percent(annualized),
            price_change=self._money(price_change),
            price_change_percent=self._percent(price_change_percent),
            requested_start_date=requested_start,
        )
        logger.debug(
            "Simulated %s from %s to %s: %s%%",
            symbol, result.start_date, result.end_date, result.percent_return,
        )
        return result

    def _value_point(self, shares: Decimal, amount: Decimal, point: PricePoint) -> ValuePoint:
        value = shares * point.close
        profit_loss = value - amount
        return ValuePoint(
            date=point.date,
            price=point.close,
            value=self._money(value),
            profit_loss=self._money(profit_loss),
            profit_loss_percent=self._percent(profit_loss / amount * HUNDRED),
        )

    def _annualized(self, growth: Decimal, days_held: int) -> Decimal:
        """Compound annual growth rate in percent; 0 for a same-day hold."""
        if days_held <= 0:
            return ZERO
        if growth <= 0:
            return -HUNDRED
        years = Decimal(days_held) / Decimal(self.config.days_per_year)
        return (growth ** (1 / years) - 1) * HUNDRED

    def _money(self, value: Decimal) -> Decimal:
        return quantize(value, self.config.money_places)

    def _percent(self, value: Decimal) -> Decimal:
        return quantize(value, self.config.percent_places)


def quantize(value: Decimal, places: Decimal) -> Decimal:
    """Round half-up to ``places``.

    Precision is widened so very large annualized figures from short
    holding periods can still be quantized.
    """
    with localcontext() as ctx:
        ctx.prec = max(PRECISION, value.adjusted() - places.as_tuple().exponent + 2)
        return value.quantize(places, rounding=ROUND_HALF_UP)
