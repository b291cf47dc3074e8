"""Pytest fixtures shared across KPI pipeline tests."""

from __future__ import annotations

from datetime import date

import pandas as pd
import pytest

from kpi_mapper import GoalThresholds, WindowedKpi


class FakeStorage:
    """DataStorage returning canned row sets in order and recording requests."""

    def __init__(self, results=None, error: Exception | None = None):
        self.results = list(results or [])
        self.error = error
        self.requests = []

    def query(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.results.pop(0)


class RecordingErrorLog:
    """ErrorLog that remembers every record() call."""

    def __init__(self, fail: bool = False):
        self.records = []
        self.fail = fail

    def record(self, error, context):
        self.records.append((error, context))
        if self.fail:
            raise RuntimeError("log sink unavailable")


def row(day: date, value, group=None, group_by: str = "PLAN_NAME") -> dict:
    """Build a result row the way a storage returns it."""
    result = {"DATE": day, "AVG_VALUE": value}
    if group is not None:
        result[group_by] = group
    return result


@pytest.fixture
def kpi() -> WindowedKpi:
    """Return a build-time KPI grouped by plan name."""

    return WindowedKpi(
        title="Build Time From Queue",
        table="builds",
        date_column="BUILD_COMPLETED_DATE",
        value_column="MINUTES",
        group_by="PLAN_NAME",
        y_axis_title="Minutes (lower is better)",
        goals=GoalThresholds(target=30.0, stretch=20.0),
    )


@pytest.fixture
def error_log() -> RecordingErrorLog:
    return RecordingErrorLog()


@pytest.fixture
def builds_frame() -> pd.DataFrame:
    """Return a small raw build table spanning early January 2024."""

    return pd.DataFrame(
        [
            ("2024-01-01 09:00", 10.0, "A", "S2018A"),
            ("2024-01-01 17:30", 20.0, "A", "S2018B"),
            ("2024-01-02 08:00", 30.0, "A", "S2018A"),
            ("2024-01-03 12:00", 5.0, "B", "S2018A"),
            ("2024-01-04 23:59", 6.0, "A", "S2018A"),
            ("2024-01-10 10:00", 99.0, "A", "S2018A"),
        ],
        columns=["BUILD_COMPLETED_DATE", "MINUTES", "PLAN_NAME", "CYCLE"],
    )
