"""Per-stock anomaly detection on volume and close-to-close returns.

Each check scores the latest observation against the trailing window
that precedes it. A relative z-score is used instead of absolute
thresholds because volume and volatility differ by orders of
magnitude between stocks.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from src.errors.exceptions import InsufficientDataError, ValidationError
from src.market_data.repository import TimeSeriesRepository

from .config import (
    AnomalyKind,
    AnomalySeverity,
    DetectorConfig,
    DEFAULT_SEVERITY_STEP,
)
from .statistics import mean_stddev, percent_changes, z_score

logger = logging.getLogger(__name__)

INFINITY = Decimal("Infinity")
Z_SCORE_PLACES = Decimal("0.0001")


@dataclass(frozen=True)
class AnomalyEvent:
    """Candidate anomaly for one stock, one kind, one observation day."""

    symbol: str
    kind: AnomalyKind
    severity: AnomalySeverity
    z_score: Decimal
    message: str
    observed_date: date
    observed_value: Decimal
    mean: Decimal
    stddev: Decimal
    window: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "type": self.kind.value,
            "severity": self.severity.value,
            "z_score": str(self.z_score),
            "message": self.message,
            "observed_date": self.observed_date.isoformat(),
        }


def classify_severity(z: Decimal, threshold: Decimal) -> Optional[AnomalySeverity]:
    """Map ``|z|`` to a severity tier relative to the threshold.

    ``[t, t+1)`` is low, ``[t+1, t+2)`` medium, ``>= t+2`` high.
    Returns None below the threshold.
    """
    magnitude = abs(z)
    if magnitude < threshold:
        return None
    if magnitude >= threshold + 2 * DEFAULT_SEVERITY_STEP:
        return AnomalySeverity.HIGH
    if magnitude >= threshold + DEFAULT_SEVERITY_STEP:
        return AnomalySeverity.MEDIUM
    return AnomalySeverity.LOW


def rank_events(events: Sequence[AnomalyEvent]) -> List[AnomalyEvent]:
    """Order events by ``|z_score|`` descending, then symbol and kind."""
    return sorted(events, key=lambda e: (-abs(e.z_score), e.symbol, e.kind.value))


def _format_z(z: Decimal) -> str:
    return f"{z:.2f}" if z.is_finite() else ("+inf" if z > 0 else "-inf")


class AnomalyDetector:
    """Volume and price anomaly checks over a read-only repository."""

    def __init__(
        self,
        repository: TimeSeriesRepository,
        config: Optional[DetectorConfig] = None,
    ):
        self.repository = repository
        self.config = config or DetectorConfig()

    # ── Public API ────────────────────────────────────────────────────

    def detect_volume_anomaly(
        self,
        symbol: str,
        window: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> Optional[AnomalyEvent]:
        """Score the latest volume against the preceding ``window`` days.

        Returns a ``volume_spike`` event, or None when the history is too
        short or the z-score is below ``threshold``.
        """
        window = self._resolve_window(window)
        points = self.repository.get_latest(symbol, window + 1)
        if not points:
            logger.debug("No price data for %s", symbol)
            return None

        volumes = [Decimal(p.volume) for p in points]
        latest = points[-1]
        return self._evaluate(
            symbol=symbol,
            kind=AnomalyKind.VOLUME_SPIKE,
            series=volumes,
            observed_date=latest.date,
            window=window,
            threshold=threshold,
        )

    def detect_price_anomaly(
        self,
        symbol: str,
        window: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> Optional[AnomalyEvent]:
        """Score the latest day-over-day close change (in percent).

        ``window + 2`` closes yield the latest change plus ``window``
        reference changes. Kind is ``price_jump``.
        """
        window = self._resolve_window(window)
        points = self.repository.get_latest(symbol, window + 2)
        if len(points) < 2:
            logger.debug("Not enough closes for %s: %d", symbol, len(points))
            return None

        changes = percent_changes([p.close for p in points])
        if not changes or points[-2].close <= 0:
            # Latest change undefined
            return None

        return self._evaluate(
            symbol=symbol,
            kind=AnomalyKind.PRICE_JUMP,
            series=changes,
            observed_date=points[-1].date,
            window=window,
            threshold=threshold,
        )

    def detect(
        self,
        symbol: str,
        window: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> List[AnomalyEvent]:
        """Run the volume check then the price check for one stock."""
        events = []
        for check in (self.detect_volume_anomaly, self.detect_price_anomaly):
            event = check(symbol, window, threshold)
            if event is not None:
                events.append(event)
        return events

    # ── Internal ──────────────────────────────────────────────────────

    def _resolve_window(self, window: Optional[int]) -> int:
        if window is None:
            return self.config.window
        if window < 1:
            raise ValidationError(f"window must be >= 1, got {window}", field="window")
        return window

    def _evaluate(
        self,
        symbol: str,
        kind: AnomalyKind,
        series: Sequence[Decimal],
        observed_date: date,
        window: int,
        threshold: Optional[float],
    ) -> Optional[AnomalyEvent]:
        limit = Decimal(str(threshold if threshold is not None else self.config.threshold))
        if limit <= 0:
            raise ValidationError(f"threshold must be > 0, got {limit}", field="threshold")
        try:
            mean, stddev = mean_stddev(series, window, self.config.min_observations)
        except InsufficientDataError as exc:
            logger.debug("Skipping %s check for %s: %s", kind.value, symbol, exc.message)
            return None

        observed = series[-1]
        if stddev == 0 and observed != mean:
            # Any move away from a perfectly flat history is unbounded
            z = INFINITY.copy_sign(observed - mean)
        else:
            z = z_score(observed, mean, stddev)

        severity = classify_severity(z, limit)
        if severity is None:
            return None

        if z.is_finite():
            z = z.quantize(Z_SCORE_PLACES)
        message = self._message(symbol, kind, observed, z)
        logger.info(message, extra={"z_score": str(z), "severity": severity.value})

        return AnomalyEvent(
            symbol=symbol,
            kind=kind,
            severity=severity,
            z_score=z,
            message=message,
            observed_date=observed_date,
            observed_value=observed,
            mean=mean,
            stddev=stddev,
            window=window,
        )

    @staticmethod
    def _message(symbol: str, kind: AnomalyKind, observed: Decimal, z: Decimal) -> str:
        if kind == AnomalyKind.VOLUME_SPIKE:
            return f"Volume anomaly detected for {symbol}: {observed:.0f} (z-score: {_format_z(z)})"
        return f"Price anomaly detected for {symbol}: {observed:.2f}% change (z-score: {_format_z(z)})"
