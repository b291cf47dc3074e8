"""
Date helpers: UTC calendar-day normalisation and inclusive date ranges.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def normalise_date(val: Any) -> date:
    """Convert a date, datetime, Timestamp or ISO string to a UTC calendar day.

    Timezone-aware values are converted to UTC before the time is dropped.
    Naive values are taken to already be in UTC.

    Raises
    ------
    ValueError
        If the value is missing or cannot be parsed.
    """
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        raise ValueError("Cannot normalise a missing date")
    try:
        ts = pd.Timestamp(val)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"Could not parse date value: {val!r}") from exc
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC")
    return ts.date()


def shift_days(day: date, days: int) -> date:
    """Return ``day`` moved by ``days`` (negative moves back)."""
    return day + timedelta(days=days)


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of UTC calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(
                f"Date range end {self.end} is before start {self.start}"
            )

    @classmethod
    def from_values(cls, start: Any, end: Any) -> "DateRange":
        return cls(normalise_date(start), normalise_date(end))

    @property
    def length_days(self) -> int:
        """Number of days in the range, counting both ends."""
        return (self.end - self.start).days + 1

    def format(self, fmt: str) -> tuple[str, str]:
        return self.start.strftime(fmt), self.end.strftime(fmt)
