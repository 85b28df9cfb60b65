"""Plain-text reports for simulations and comparisons."""

from decimal import Decimal

from .models import ComparisonResult, SimulationResult


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


def _pct(value: Decimal) -> str:
    return f"{value:+.2f}%"


def format_simulation(result: SimulationResult) -> str:
    """Render a single simulation as a short report."""
    lines = [
        "=" * 60,
        f"BUY-AND-HOLD SIMULATION: {result.symbol}",
        "=" * 60,
        f"  Invested:          {_money(result.amount_invested)}",
        f"  Period:            {result.start_date} -> {result.end_date} ({result.days_held} days)",
        f"  Entry / exit:      {_money(result.start_price)} -> {_money(result.end_price)}",
        f"  Shares bought:     {result.shares_bought:.6f}",
        f"  Final value:       {_money(result.final_value)}",
        f"  Profit / loss:     {_money(result.absolute_return)} ({_pct(result.percent_return)})",
        f"  Annualized return: {_pct(result.annualized_return)}",
    ]
    return "\n".join(lines)


def format_comparison(comparison: ComparisonResult) -> str:
    """Render a ranked comparison table with its summary."""
    lines = [
        "=" * 60,
        f"COMPARISON: {_money(comparison.amount)} each from {comparison.start_date}",
        "=" * 60,
        f"  {'#':>2}  {'Symbol':<10} {'Final value':>18} {'Return':>10}",
    ]
    for rank, result in enumerate(comparison.results, start=1):
        lines.append(
            f"  {rank:>2}  {result.symbol:<10} {_money(result.final_value):>18} {_pct(result.percent_return):>10}"
        )

    summary = comparison.summary
    lines += [
        "-" * 60,
        f"  Total invested:    {_money(summary.total_investment)}",
        f"  Total value:       {_money(summary.total_final_value)}",
        f"  Total return:      {_pct(summary.total_percent_return)}",
        f"  Average return:    {_pct(summary.average_percent_return)}",
        f"  Best / worst:      {summary.best_performer} / {summary.worst_performer}",
    ]
    return "\n".join(lines)
