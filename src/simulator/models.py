"""Simulation and comparison result models."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd


@dataclass(frozen=True)
class ValuePoint:
    """Position value on one trading day."""

    date: date
    price: Decimal
    value: Decimal
    profit_loss: Decimal
    profit_loss_percent: Decimal


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of a hypothetical lump-sum buy-and-hold investment."""

    symbol: str
    amount_invested: Decimal
    start_date: date
    end_date: date
    shares_bought: Decimal
    start_price: Decimal
    end_price: Decimal
    final_value: Decimal
    absolute_return: Decimal
    percent_return: Decimal
    value_curve: Tuple[ValuePoint, ...]
    days_held: int = 0
    annualized_return: Decimal = Decimal(0)
    price_change: Decimal = Decimal(0)
    price_change_percent: Decimal = Decimal(0)
    requested_start_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "investment": {
                "amount": str(self.amount_invested),
                "requested_start_date": (
                    self.requested_start_date.isoformat() if self.requested_start_date else None
                ),
                "start_date": self.start_date.isoformat(),
                "end_date": self.end_date.isoformat(),
                "days_held": self.days_held,
            },
            "prices": {
                "start_price": str(self.start_price),
                "end_price": str(self.end_price),
                "price_change": str(self.price_change),
                "price_change_percent": str(self.price_change_percent),
            },
            "shares": str(self.shares_bought),
            "returns": {
                "final_value": str(self.final_value),
                "absolute_return": str(self.absolute_return),
                "percent_return": str(self.percent_return),
                "annualized_return": str(self.annualized_return),
            },
            "value_curve": [
                {"date": p.date.isoformat(), "price": str(p.price), "value": str(p.value)}
                for p in self.value_curve
            ],
        }

    def to_frame(self) -> pd.DataFrame:
        """Value curve as a DataFrame indexed by date (Decimal columns)."""
        frame = pd.DataFrame(
            [
                {
                    "date": pd.Timestamp(p.date),
                    "price": p.price,
                    "value": p.value,
                    "profit_loss": p.profit_loss,
                    "profit_loss_percent": p.profit_loss_percent,
                }
                for p in self.value_curve
            ],
            columns=["date", "price", "value", "profit_loss", "profit_loss_percent"],
        )
        return frame.set_index("date")


@dataclass(frozen=True)
class ComparisonSummary:
    """Totals and extremes across a comparison."""

    total_stocks: int
    total_investment: Decimal
    total_final_value: Decimal
    total_profit_loss: Decimal
    total_percent_return: Decimal
    average_percent_return: Decimal
    best_performer: Optional[str]
    worst_performer: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_stocks": self.total_stocks,
            "total_investment": str(self.total_investment),
            "total_final_value": str(self.total_final_value),
            "total_profit_loss": str(self.total_profit_loss),
            "total_percent_return": str(self.total_percent_return),
            "average_percent_return": str(self.average_percent_return),
            "best_performer": self.best_performer,
            "worst_performer": self.worst_performer,
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Simulations for 2-5 symbols sharing amount and start date, ranked."""

    amount: Decimal
    start_date: date
    results: Tuple[SimulationResult, ...]
    summary: ComparisonSummary
    end_date: Optional[date] = None

    @property
    def symbols(self) -> List[str]:
        return [r.symbol for r in self.results]

    def __iter__(self):
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index: int) -> SimulationResult:
        return self.results[index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": str(self.amount),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "comparison": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
        }

    def to_frame(self) -> pd.DataFrame:
        """One value column per symbol, aligned on date."""
        columns = {r.symbol: r.to_frame()["value"] for r in self.results}
        return pd.DataFrame(columns, columns=self.symbols)
