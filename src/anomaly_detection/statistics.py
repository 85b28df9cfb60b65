"""Trailing-window statistics over Decimal series."""

from decimal import Decimal, localcontext
from typing import Sequence, Tuple

from src.errors.exceptions import InsufficientDataError

from .config import DEFAULT_MIN_OBSERVATIONS

ZERO = Decimal(0)

# Working precision for every statistic
PRECISION = 28


def _mean(values: Sequence[Decimal]) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return sum(values, ZERO) / len(values)


def _sample_std(values: Sequence[Decimal], mean: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = PRECISION
        variance = sum(((v - mean) ** 2 for v in values), ZERO) / (len(values) - 1)
        return variance.sqrt()


def reference_window(series: Sequence[Decimal], window: int) -> Sequence[Decimal]:
    """The up-to-``window`` observations preceding the last element."""
    if window < 1 or len(series) < 2:
        return series[:0]
    return series[max(0, len(series) - 1 - window):-1]


def mean_stddev(
    series: Sequence[Decimal],
    window: int,
    min_observations: int = DEFAULT_MIN_OBSERVATIONS,
) -> Tuple[Decimal, Decimal]:
    """Sample mean and standard deviation of the trailing reference window.

    The last element of ``series`` is the value under test and is
    excluded, so it cannot pull the baseline towards itself. Up to
    ``window`` observations before it are used.

    Raises:
        InsufficientDataError: If fewer than ``min_observations``
            reference observations are available.
    """
    reference = reference_window(series, window)
    if len(reference) < min_observations:
        raise InsufficientDataError(required=min_observations, available=len(reference))

    mean = _mean(reference)
    return mean, _sample_std(reference, mean)


def z_score(value: Decimal, mean: Decimal, stddev: Decimal) -> Decimal:
    """``(value - mean) / stddev``, or 0 for a zero standard deviation."""
    if stddev == 0:
        return ZERO
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return (value - mean) / stddev


def percent_changes(closes: Sequence[Decimal]) -> list:
    """Day-over-day percentage changes of a close series.

    Pairs whose previous close is not positive are skipped.
    """
    changes = []
    with localcontext() as ctx:
        ctx.prec = PRECISION
        for previous, current in zip(closes, closes[1:]):
            if previous > 0:
                changes.append((current - previous) / previous * 100)
    return changes
