"""Buy-and-hold investment simulator and multi-stock comparison."""

from .config import (
    SimulatorConfig,
    MONEY_PLACES,
    PERCENT_PLACES,
)
from .models import (
    ValuePoint,
    SimulationResult,
    ComparisonSummary,
    ComparisonResult,
)
from .engine import SimulationEngine
from .comparison import ComparisonEngine, rank_results
from .reporting import format_comparison, format_simulation

__all__ = [
    # Config
    "SimulatorConfig",
    "MONEY_PLACES",
    "PERCENT_PLACES",
    # Models
    "ValuePoint",
    "SimulationResult",
    "ComparisonSummary",
    "ComparisonResult",
    # Engines
    "SimulationEngine",
    "ComparisonEngine",
    "rank_results",
    # Reporting
    "format_comparison",
    "format_simulation",
]
