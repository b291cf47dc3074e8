"""
Simple moving average period rules.

Longer requested ranges get a longer smoothing window. The period is a pure
function of the range length so the same request always draws the same line.
"""

from .config import MAX_MOVING_AVERAGE_PERIOD, MOVING_AVERAGE_STEPS


def moving_average_period(range_length_days: int) -> int:
    """Return the moving average period (days) for a range of the given length.

    Parameters
    ----------
    range_length_days : Inclusive length of the requested range, >= 1.
    """
    if range_length_days < 1:
        raise ValueError(f"Range length must be positive, got {range_length_days}")
    for max_length, period in MOVING_AVERAGE_STEPS:
        if range_length_days <= max_length:
            return period
    return MAX_MOVING_AVERAGE_PERIOD


def lookback_days(period: int) -> int:
    """Extra days of history needed so the first plotted day has a full window."""
    return period - 1


def min_coverage(period: int) -> int:
    """Minimum contributing days before a grouped point is shown."""
    return period // 2
