"""Batch anomaly sweep over every tracked stock.

One stock failing (bad data, a store error) is recorded in its own
result and never stops the sweep for the remaining stocks.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from src.logging_config.context import RunContext
from src.logging_config.performance import PerformanceTimer
from src.market_data.repository import TimeSeriesRepository

from .alert_store import Alert, AlertStore
from .config import SweepConfig, SweepStatus
from .detector import AnomalyDetector, AnomalyEvent

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StockSweepResult:
    """Outcome of sweeping a single stock."""

    symbol: str
    status: SweepStatus = SweepStatus.OK
    events: List[AnomalyEvent] = field(default_factory=list)
    alerts: List[Alert] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SweepStatus.OK


@dataclass
class SweepSummary:
    """Aggregate of one sweep run."""

    run_id: str = ""
    results: List[StockSweepResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=_utc_now)
    finished_at: Optional[datetime] = None
    attempts: int = 1

    @property
    def stocks_processed(self) -> int:
        return len(self.results)

    @property
    def alerts_created(self) -> int:
        return sum(len(r.alerts) for r in self.results)

    @property
    def errors(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def events(self) -> List[AnomalyEvent]:
        return [e for r in self.results for e in r.events]

    def failures(self) -> List[StockSweepResult]:
        return [r for r in self.results if not r.ok]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "stocks_processed": self.stocks_processed,
            "alerts_created": self.alerts_created,
            "errors": self.errors,
            "attempts": self.attempts,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "failures": [{"symbol": r.symbol, "error": r.error} for r in self.failures()],
        }


class AnomalySweep:
    """Runs volume and price detection for each stock and stores alerts."""

    def __init__(
        self,
        repository: TimeSeriesRepository,
        alert_store: AlertStore,
        detector: Optional[AnomalyDetector] = None,
        config: Optional[SweepConfig] = None,
    ):
        self.repository = repository
        self.alert_store = alert_store
        self.config = config or SweepConfig()
        self.detector = detector or AnomalyDetector(repository, self.config.detector)

    def run(self, symbols: Optional[Iterable[str]] = None) -> SweepSummary:
        """Sweep ``symbols`` (default: every tracked symbol) sequentially."""
        timer = PerformanceTimer("anomaly_sweep", threshold_ms=self.config.timeout_seconds * 1000)
        with RunContext(job="anomaly_sweep") as ctx, timer:
            summary = SweepSummary(run_id=ctx.run_id)
            targets = list(symbols) if symbols is not None else self.repository.list_symbols()
            logger.info("Starting anomaly detection sweep over %d stocks", len(targets))

            for symbol in targets:
                with ctx.for_symbol(symbol):
                    summary.results.append(self._sweep_one(symbol))

            summary.finished_at = _utc_now()
            logger.info(
                "Anomaly detection sweep completed",
                extra={
                    "stocks_processed": summary.stocks_processed,
                    "alerts_created": summary.alerts_created,
                    "errors": summary.errors,
                },
            )
        return summary

    def run_with_retries(self, symbols: Optional[Iterable[str]] = None) -> SweepSummary:
        """Re-run a sweep that failed as a whole, up to ``max_attempts`` times.

        Per-stock failures do not count; only errors escaping ``run``
        (for example the repository being unreachable) trigger a retry.
        """
        symbols = list(symbols) if symbols is not None else None
        last_exc: Optional[Exception] = None
        for attempt in range(1, self.config.max_attempts + 1):
            try:
                summary = self.run(symbols)
                summary.attempts = attempt
                return summary
            except Exception as exc:
                last_exc = exc
                logger.warning(
                    "Anomaly sweep attempt %d/%d failed: %s",
                    attempt, self.config.max_attempts, exc,
                )
        logger.error("Anomaly sweep failed after %d attempts", self.config.max_attempts, exc_info=last_exc)
        raise last_exc

    def _sweep_one(self, symbol: str) -> StockSweepResult:
        result = StockSweepResult(symbol=symbol)
        detector_config = self.config.detector
        try:
            for check in (self.detector.detect_volume_anomaly, self.detector.detect_price_anomaly):
                event = check(symbol, detector_config.window, detector_config.threshold)
                if event is None:
                    continue
                result.events.append(event)
                result.alerts.append(self.alert_store.create_alert(event))
                logger.info("%s anomaly detected", event.kind.value, extra={"severity": event.severity.value})
        except Exception as exc:
            result.status = SweepStatus.FAILED
            result.error = f"{type(exc).__name__}: {exc}"
            logger.error("Anomaly detection failed for stock %s", symbol, exc_info=True)
        return result
