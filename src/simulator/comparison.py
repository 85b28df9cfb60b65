"""Side-by-side comparison of buy-and-hold simulations."""

import logging
from datetime import date
from decimal import Decimal, localcontext
from typing import Iterable, List, Optional

from src.errors.config import ErrorCode
from src.errors.exceptions import ValidationError
from src.logging_config.performance import log_performance
from src.market_data.models import Numeric, to_decimal

from .config import SimulatorConfig
from .engine import HUNDRED, PRECISION, SimulationEngine, quantize
from .models import ComparisonResult, ComparisonSummary, SimulationResult

logger = logging.getLogger(__name__)


def rank_results(results: Iterable[SimulationResult]) -> List[SimulationResult]:
    """Highest percent return first; equal returns in symbol order."""
    return sorted(results, key=lambda r: (-r.percent_return, r.symbol))


class ComparisonEngine:
    """Runs one simulation per symbol with a shared amount and start date."""

    def __init__(
        self,
        simulation_engine: SimulationEngine,
        config: Optional[SimulatorConfig] = None,
    ):
        self.simulation_engine = simulation_engine
        self.config = config or simulation_engine.config

    @log_performance(threshold_ms=1000)
    def compare(
        self,
        symbols: Iterable[str],
        amount: Numeric,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> ComparisonResult:
        """Compare the same investment across 2-5 distinct symbols.

        All-or-nothing: if any symbol lacks data the whole comparison
        fails, since a partial ranking would be misleading.

        Raises:
            ValidationError: Wrong number of symbols or duplicates.
            NoDataForRangeError: Naming the first symbol without data.
        """
        symbols = self._check_symbols(symbols)
        amount = to_decimal(amount, "amount")

        results = [
            self.simulation_engine.simulate(symbol, amount, start_date, end_date)
            for symbol in symbols
        ]

        ranked = tuple(rank_results(results))
        logger.debug("Compared %d symbols, best %s", len(ranked), ranked[0].symbol)
        return ComparisonResult(
            amount=amount,
            start_date=start_date,
            end_date=end_date,
            results=ranked,
            summary=self._summarize(ranked),
        )

    def _check_symbols(self, symbols: Iterable[str]) -> List[str]:
        symbols = list(symbols)
        low, high = self.config.min_compare_symbols, self.config.max_compare_symbols
        if not low <= len(symbols) <= high:
            raise ValidationError(
                f"Comparison needs {low}-{high} symbols, got {len(symbols)}",
                error_code=ErrorCode.INVALID_SYMBOLS_LIST,
                field="symbols",
            )
        if len(set(symbols)) != len(symbols):
            raise ValidationError(
                "Comparison symbols must be distinct",
                error_code=ErrorCode.INVALID_SYMBOLS_LIST,
                field="symbols",
            )
        return symbols

    def _summarize(self, ranked: tuple) -> ComparisonSummary:
        money, pct = self.config.money_places, self.config.percent_places
        with localcontext() as ctx:
            ctx.prec = PRECISION
            total_investment = sum((r.amount_invested for r in ranked), Decimal(0))
            total_final = sum((r.final_value for r in ranked), Decimal(0))
            total_pl = total_final - total_investment
            total_pct = total_pl / total_investment * HUNDRED if total_investment else Decimal(0)
            average = sum((r.percent_return for r in ranked), Decimal(0)) / len(ranked)

        return ComparisonSummary(
            total_stocks=len(ranked),
            total_investment=quantize(total_investment, money),
            total_final_value=quantize(total_final, money),
            total_profit_loss=quantize(total_pl, money),
            total_percent_return=quantize(total_pct, pct),
            average_percent_return=quantize(average, pct),
            best_performer=ranked[0].symbol,
            worst_performer=ranked[-1].symbol,
        )
