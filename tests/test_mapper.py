"""Tests for the KpiMapper orchestration contract."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

import pandas as pd
import pytest
from conftest import FakeStorage, RecordingErrorLog, row

from kpi_mapper import (
    ChartPayload,
    DateRange,
    KpiMapper,
    LoggingErrorLog,
    MalformedResultError,
    NoData,
    StorageError,
)

START = date(2024, 3, 1)
END = date(2024, 3, 30)


def _overall(n: int = 2) -> list[dict]:
    return [row(START + timedelta(days=i), 10.0 + i) for i in range(n)]


def _grouped(n: int = 6) -> list[dict]:
    return [row(START + timedelta(days=i), 5.0 + i, "A" if i % 2 else "B") for i in range(n)]


def test_compute_series_issues_overall_then_grouped_with_lead_in(kpi, error_log) -> None:
    """Query start moves back two days, then back again by the lookback."""

    storage = FakeStorage([_overall(), _grouped()])
    mapper = KpiMapper(kpi, storage, error_log)

    mapper.compute_series(START, END)

    overall, grouped = storage.requests
    assert overall.group_by is None
    assert grouped.group_by == "PLAN_NAME"
    # 30 days -> 3-day window -> 2 lookback days
    assert overall.plot_start == date(2024, 2, 28)
    assert overall.window_start == date(2024, 2, 26)
    assert grouped.end == END


def test_compute_series_returns_payload_bounded_by_requested_range(kpi, error_log) -> None:
    mapper = KpiMapper(kpi, FakeStorage([_overall(), _grouped()]), error_log)

    result = mapper.compute_series(START, END)

    assert isinstance(result, ChartPayload)
    assert result.x_axis_bounds == DateRange(START, END)
    assert result.series_names == ["Overall", "B", "A"]


def test_compute_series_normalises_inputs_to_utc_days(kpi, error_log) -> None:
    storage = FakeStorage([_overall(), _grouped()])
    mapper = KpiMapper(kpi, storage, error_log)
    eastern = timezone(timedelta(hours=-5))

    result = mapper.compute_series(
        datetime(2024, 2, 29, 22, 0, tzinfo=eastern),
        "2024-03-30T10:00:00",
    )

    assert result.x_axis_bounds == DateRange(START, END)


@pytest.mark.parametrize(
    ("overall_rows", "grouped_rows"),
    [(1, 6), (0, 10), (2, 5), (10, 0)],
)
def test_compute_series_signals_no_data(kpi, error_log, overall_rows, grouped_rows) -> None:
    storage = FakeStorage([_overall(overall_rows), _grouped(grouped_rows)])
    mapper = KpiMapper(kpi, storage, error_log)

    result = mapper.compute_series(START, END)

    assert isinstance(result, NoData)
    assert not result
    assert result.title == kpi.title
    assert len(storage.requests) == 2
    assert error_log.records == []


def test_storage_error_propagates_unchanged(kpi, error_log) -> None:
    failure = StorageError("connection reset")
    mapper = KpiMapper(kpi, FakeStorage(error=failure), error_log)

    with pytest.raises(StorageError) as excinfo:
        mapper.compute_series(START, END)

    assert excinfo.value is failure


def test_reversed_range_is_rejected(kpi, error_log) -> None:
    mapper = KpiMapper(kpi, FakeStorage(), error_log)

    with pytest.raises(ValueError):
        mapper.compute_series(END, START)


def test_find_earliest_and_latest_date(kpi, error_log) -> None:
    storage = FakeStorage([
        [{"DATE": datetime(2018, 1, 2, 9, 30)}],
        [{"DATE": "2018-06-30"}],
    ])
    mapper = KpiMapper(kpi, storage, error_log)

    assert mapper.find_earliest_date() == date(2018, 1, 2)
    assert mapper.find_latest_date() == date(2018, 6, 30)
    assert [r.kind for r in storage.requests] == ["earliest_date", "latest_date"]


@pytest.mark.parametrize(
    "results",
    [
        [],
        [{"DATE": date(2018, 1, 2)}, {"DATE": date(2018, 1, 3)}],
        [{"DATE": None}],
        [{"OTHER": date(2018, 1, 2)}],
        [{"DATE": pd.NaT}],
        [{"DATE": float("nan")}],
        [{"DATE": "not a date"}],
    ],
)
def test_find_earliest_date_rejects_malformed_results(kpi, error_log, results) -> None:
    mapper = KpiMapper(kpi, FakeStorage([results]), error_log)

    with pytest.raises(MalformedResultError):
        mapper.find_earliest_date()

    assert len(error_log.records) == 1
    error, context = error_log.records[0]
    assert isinstance(error, MalformedResultError)
    assert context == "query: SELECT MIN(BUILD_COMPLETED_DATE) AS 'DATE' FROM builds;"


def test_find_latest_date_rejects_malformed_results(kpi, error_log) -> None:
    mapper = KpiMapper(kpi, FakeStorage([[]]), error_log)

    with pytest.raises(MalformedResultError, match="end date"):
        mapper.find_latest_date()

    assert len(error_log.records) == 1
    assert "MAX(BUILD_COMPLETED_DATE)" in error_log.records[0][1]


def test_failing_error_log_does_not_mask_malformed_result(kpi) -> None:
    mapper = KpiMapper(kpi, FakeStorage([[]]), RecordingErrorLog(fail=True))

    with pytest.raises(MalformedResultError):
        mapper.find_earliest_date()


def test_default_error_log_writes_to_logging(kpi, caplog) -> None:
    mapper = KpiMapper(kpi, FakeStorage([[{"DATE": None}]]))
    assert isinstance(mapper.error_log, LoggingErrorLog)

    with caplog.at_level(logging.ERROR, logger="kpi_mapper.error_log"):
        with pytest.raises(MalformedResultError):
            mapper.find_earliest_date()

    assert "query: SELECT MIN(BUILD_COMPLETED_DATE)" in caplog.text
