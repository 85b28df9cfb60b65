"""CLI entry point.

    python main.py detect   --prices prices.csv
    python main.py simulate --prices prices.csv --symbol AAA --amount 10000000 --start-date 2024-01-02
    python main.py compare  --prices prices.csv --symbols AAA BBB --amount 10000000 --start-date 2024-01-02
"""

import argparse
import json
import sys
from typing import List, Optional

from src.anomaly_detection import (
    AnomalySweep,
    DetectorConfig,
    InMemoryAlertStore,
    SweepConfig,
    rank_events,
)
from src.errors import (
    NoDataForRangeError,
    ValidationError,
    validate_amount,
    validate_start_date,
    validate_symbol,
    validate_symbols_list,
)
from src.logging_config import LogFormat, LoggingConfig, LogLevel, configure_logging
from src.market_data import InMemoryPriceRepository
from src.settings import get_settings
from src.simulator import (
    ComparisonEngine,
    SimulationEngine,
    SimulatorConfig,
    format_comparison,
    format_simulation,
)

EXIT_DATA_ERROR = 1
EXIT_VALIDATION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="StockWatch - anomaly detection and investment simulation"
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Log at DEBUG level"
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print machine-readable JSON instead of a report"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    detect = sub.add_parser("detect", help="Run the anomaly sweep over all stocks")
    detect.add_argument("--prices", required=True, help="CSV: symbol,date,open,high,low,close,volume")
    detect.add_argument("--window", type=int, default=settings.anomaly_window)
    detect.add_argument("--threshold", type=float, default=settings.anomaly_threshold)

    simulate = sub.add_parser("simulate", help="Simulate a buy-and-hold investment")
    simulate.add_argument("--prices", required=True)
    simulate.add_argument("--symbol", required=True)
    simulate.add_argument("--amount", required=True)
    simulate.add_argument("--start-date", required=True)
    simulate.add_argument("--end-date", default=None)

    compare = sub.add_parser("compare", help="Compare an investment across 2-5 stocks")
    compare.add_argument("--prices", required=True)
    compare.add_argument("--symbols", nargs="+", required=True)
    compare.add_argument("--amount", required=True)
    compare.add_argument("--start-date", required=True)
    compare.add_argument("--end-date", default=None)

    return parser


def run_detect(args, repo: InMemoryPriceRepository) -> int:
    settings = get_settings()
    config = SweepConfig(
        detector=DetectorConfig(
            window=args.window,
            threshold=args.threshold,
            min_observations=settings.anomaly_min_observations,
        ),
        timeout_seconds=settings.sweep_timeout_seconds,
        max_attempts=settings.sweep_max_attempts,
    )
    store = InMemoryAlertStore(dedup=settings.alert_dedup)
    summary = AnomalySweep(repo, store, config=config).run_with_retries()

    if args.json:
        payload = summary.to_dict()
        payload["anomalies"] = [e.to_dict() for e in rank_events(summary.events)]
        print(json.dumps(payload, indent=2))
        return 0

    print(f"Stocks processed: {summary.stocks_processed}")
    print(f"Alerts created:   {summary.alerts_created}")
    print(f"Errors:           {summary.errors}")
    for event in rank_events(summary.events):
        print(f"  [{event.severity.value.upper():6s}] {event.message}")
    return 0


def run_simulate(args, repo: InMemoryPriceRepository) -> int:
    settings = get_settings()
    symbol = validate_symbol(args.symbol)
    amount = validate_amount(args.amount, settings.min_investment, settings.max_investment)
    start = validate_start_date(args.start_date)
    end = validate_start_date(args.end_date) if args.end_date else None

    engine = SimulationEngine(repo, SimulatorConfig.from_settings(settings))
    result = engine.simulate(symbol, amount, start, end)
    print(json.dumps(result.to_dict(), indent=2) if args.json else format_simulation(result))
    return 0


def run_compare(args, repo: InMemoryPriceRepository) -> int:
    settings = get_settings()
    symbols = validate_symbols_list(
        args.symbols, settings.min_compare_symbols, settings.max_compare_symbols
    )
    amount = validate_amount(args.amount, settings.min_investment, settings.max_investment)
    start = validate_start_date(args.start_date)
    end = validate_start_date(args.end_date) if args.end_date else None

    config = SimulatorConfig.from_settings(settings)
    engine = ComparisonEngine(SimulationEngine(repo, config), config)
    comparison = engine.compare(symbols, amount, start, end)
    print(json.dumps(comparison.to_dict(), indent=2) if args.json else format_comparison(comparison))
    return 0


COMMANDS = {
    "detect": run_detect,
    "simulate": run_simulate,
    "compare": run_compare,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(
        LoggingConfig(
            level=LogLevel.DEBUG if args.verbose else LogLevel.WARNING,
            format=LogFormat.CONSOLE,
        ),
        stream=sys.stderr,
    )

    try:
        repo = InMemoryPriceRepository.from_csv(args.prices)
        return COMMANDS[args.command](args, repo)
    except ValidationError as exc:
        print(f"Invalid input: {exc.message}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except NoDataForRangeError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_DATA_ERROR
    except OSError as exc:
        print(f"Error: cannot read prices file: {exc}", file=sys.stderr)
        return EXIT_DATA_ERROR


if __name__ == "__main__":
    sys.exit(main())
