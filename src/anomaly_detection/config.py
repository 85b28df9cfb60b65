"""Configuration for per-stock anomaly detection."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from src.errors.exceptions import ValidationError
from src.settings import Settings, get_settings


class AnomalyKind(str, Enum):
    VOLUME_SPIKE = "volume_spike"
    PRICE_JUMP = "price_jump"


class AnomalySeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SweepStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"


# Default thresholds
DEFAULT_WINDOW = 20
DEFAULT_ZSCORE_THRESHOLD = 3.0
DEFAULT_MIN_OBSERVATIONS = 2
DEFAULT_SEVERITY_STEP = Decimal("1")

# Job boundary
DEFAULT_SWEEP_TIMEOUT_SECONDS = 300
DEFAULT_SWEEP_MAX_ATTEMPTS = 3


@dataclass
class DetectorConfig:
    """Lookback window and z-score threshold for one detection call."""

    window: int = DEFAULT_WINDOW
    threshold: float = DEFAULT_ZSCORE_THRESHOLD
    min_observations: int = DEFAULT_MIN_OBSERVATIONS

    def __post_init__(self):
        if self.window < 1:
            raise ValidationError(f"window must be >= 1, got {self.window}", field="window")
        if self.threshold <= 0:
            raise ValidationError(f"threshold must be > 0, got {self.threshold}", field="threshold")
        if self.min_observations < 2:
            raise ValidationError(
                f"min_observations must be >= 2, got {self.min_observations}", field="min_observations"
            )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DetectorConfig":
        settings = settings or get_settings()
        return cls(
            window=settings.anomaly_window,
            threshold=settings.anomaly_threshold,
            min_observations=settings.anomaly_min_observations,
        )


@dataclass
class SweepConfig:
    """Batch sweep configuration."""

    detector: Optional[DetectorConfig] = None
    timeout_seconds: int = DEFAULT_SWEEP_TIMEOUT_SECONDS
    max_attempts: int = DEFAULT_SWEEP_MAX_ATTEMPTS

    def __post_init__(self):
        if self.detector is None:
            self.detector = DetectorConfig()
        if self.max_attempts < 1:
            raise ValidationError(f"max_attempts must be >= 1, got {self.max_attempts}", field="max_attempts")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SweepConfig":
        settings = settings or get_settings()
        return cls(
            detector=DetectorConfig.from_settings(settings),
            timeout_seconds=settings.sweep_timeout_seconds,
            max_attempts=settings.sweep_max_attempts,
        )
