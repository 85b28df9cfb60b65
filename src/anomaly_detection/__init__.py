"""Per-stock anomaly detection on trading volume and price moves."""

from .config import (
    AnomalyKind,
    AnomalySeverity,
    SweepStatus,
    DetectorConfig,
    SweepConfig,
)
from .statistics import (
    mean_stddev,
    percent_changes,
    z_score,
)
from .detector import (
    AnomalyEvent,
    AnomalyDetector,
    classify_severity,
    rank_events,
)
from .alert_store import (
    Alert,
    AlertStore,
    InMemoryAlertStore,
    SqlAlertStore,
)
from .sweep import (
    StockSweepResult,
    SweepSummary,
    AnomalySweep,
)

__all__ = [
    # Config
    "AnomalyKind",
    "AnomalySeverity",
    "SweepStatus",
    "DetectorConfig",
    "SweepConfig",
    # Statistics
    "mean_stddev",
    "percent_changes",
    "z_score",
    # Detector
    "AnomalyEvent",
    "AnomalyDetector",
    "classify_severity",
    "rank_events",
    # Alerts
    "Alert",
    "AlertStore",
    "InMemoryAlertStore",
    "SqlAlertStore",
    # Sweep
    "StockSweepResult",
    "SweepSummary",
    "AnomalySweep",
]
