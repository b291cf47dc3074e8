"""
Data storages: anything that can answer a DataRequest with result rows.

DataFrameStorage evaluates requests in memory with pandas. It mirrors what
the MySQL rendering of the same request returns.
"""

import logging
from typing import Protocol

import numpy as np
import pandas as pd

from .config import DATE_FIELD, VALUE_FIELD
from .errors import StorageError
from .queries import EARLIEST_DATE, SERIES, DataRequest

logger = logging.getLogger(__name__)

_DAY = "_day"
_VALUE = "_value"
_GROUP = "_group"


class DataStorage(Protocol):
    """Read-only row source.

    query() returns rows as dicts in the order the request defines and raises
    StorageError on any failure.
    """

    def query(self, request: DataRequest) -> list[dict]:
        ...


def _as_days(values: pd.Series) -> pd.Series:
    """Parse a column to naive UTC midnight timestamps."""
    days = pd.to_datetime(values)
    if days.dt.tz is not None:
        days = days.dt.tz_convert("UTC").dt.tz_localize(None)
    return days.dt.normalize()


class DataFrameStorage:
    """DataStorage backed by one DataFrame per table name."""

    def __init__(self, tables: dict[str, pd.DataFrame]):
        self._tables = dict(tables)

    def query(self, request: DataRequest) -> list[dict]:
        frame = self._table(request.table)
        self._require_columns(frame, request)

        try:
            if request.kind == SERIES:
                rows = self._series(frame, request)
            else:
                rows = self._boundary_date(frame, request)
        except (KeyError, ValueError, TypeError) as exc:
            raise StorageError(
                f"Query against '{request.table}' failed: {exc}"
            ) from exc

        logger.debug("%s query on '%s' returned %d rows", request.kind, request.table, len(rows))
        return rows

    def _table(self, name: str) -> pd.DataFrame:
        try:
            return self._tables[name]
        except KeyError:
            raise StorageError(f"Unknown table '{name}'") from None

    @staticmethod
    def _require_columns(frame: pd.DataFrame, request: DataRequest) -> None:
        needed = [request.date_column]
        if request.kind == SERIES:
            needed.append(request.value_column)
            if request.group_by:
                needed.append(request.group_by)
            if request.has_filter:
                needed.append(request.filter_column)
        missing = [c for c in needed if c not in frame.columns]
        if missing:
            raise StorageError(
                f"Table '{request.table}' has no column(s): {', '.join(missing)}"
            )

    @staticmethod
    def _boundary_date(frame: pd.DataFrame, request: DataRequest) -> list[dict]:
        # MIN()/MAX() over no rows still yields one row, with a NULL date
        days = _as_days(frame[request.date_column]).dropna()
        if days.empty:
            return [{DATE_FIELD: None}]
        day = days.min() if request.kind == EARLIEST_DATE else days.max()
        return [{DATE_FIELD: day.date()}]

    def _series(self, frame: pd.DataFrame, request: DataRequest) -> list[dict]:
        days = _as_days(frame[request.date_column])
        mask = days.between(pd.Timestamp(request.window_start), pd.Timestamp(request.end))
        if request.has_filter:
            mask &= frame[request.filter_column] == request.filter_value

        selected = pd.DataFrame({
            _DAY: days[mask],
            _VALUE: pd.to_numeric(frame.loc[mask, request.value_column], errors="coerce"),
        })
        if request.group_by:
            selected[_GROUP] = frame.loc[mask, request.group_by]

        if selected.empty:
            return []

        keys = [_GROUP, _DAY] if request.group_by else [_DAY]
        daily = selected.groupby(keys, dropna=False, sort=True)[_VALUE].mean().reset_index()

        rows: list[dict] = []
        if request.group_by:
            for key, part in daily.groupby(_GROUP, dropna=False, sort=True):
                rows.extend(self._trailing_rows(part, request, key))
        else:
            rows.extend(self._trailing_rows(daily, request, None))
        return rows

    @staticmethod
    def _trailing_rows(daily: pd.DataFrame, request: DataRequest, key) -> list[dict]:
        """Trailing moving average over one group's per-day averages."""
        series = daily.set_index(_DAY)[_VALUE].sort_index()
        window = f"{request.lookback_days + 1}D"

        means = series.rolling(window, min_periods=1).mean()
        coverage = series.notna().astype(float).rolling(window, min_periods=1).sum()

        if request.min_coverage is not None:
            means = means.where(coverage >= request.min_coverage)
        if request.group_by and pd.isna(key):
            # NULL keys never match themselves in the window join
            means = pd.Series(np.nan, index=means.index)

        means = means[means.index >= pd.Timestamp(request.plot_start)]

        rows = []
        for day, value in means.items():
            row = {
                DATE_FIELD: day.date(),
                VALUE_FIELD: None if pd.isna(value) else float(value),
            }
            if request.group_by:
                row[request.group_by] = None if pd.isna(key) else key
            rows.append(row)
        return rows
