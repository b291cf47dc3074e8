"""
Data requests sent to a DataStorage.

A DataRequest describes what to fetch without tying it to a query
language. Storages evaluate it however they like. to_sql() renders the
MySQL form, which is also the text recorded when a query misbehaves.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from .config import DATE_FIELD, DATE_FORMAT_MYSQL, VALUE_FIELD

SERIES = "series"
EARLIEST_DATE = "earliest_date"
LATEST_DATE = "latest_date"

REQUEST_KINDS = {SERIES, EARLIEST_DATE, LATEST_DATE}


@dataclass(frozen=True)
class DataRequest:
    """Date-bounded, optionally filtered, optionally grouped request.

    For ``kind == "series"`` the storage returns one row per observed day in
    ``[plot_start, end]``. Each row holds the trailing average of the per-day
    averages over ``[day - lookback_days, day]``. When ``min_coverage`` is set,
    a row whose window has fewer contributing days carries a null value.

    For ``earliest_date``/``latest_date`` only ``table`` and ``date_column``
    matter. The storage returns a single row holding the MIN/MAX date.
    """

    kind: str
    table: str
    date_column: str
    value_column: str | None = None
    plot_start: date | None = None
    end: date | None = None
    lookback_days: int = 0
    min_coverage: int | None = None
    filter_column: str | None = None
    filter_value: object = None
    group_by: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in REQUEST_KINDS:
            raise ValueError(f"Unknown request kind '{self.kind}'")
        if self.kind == SERIES:
            if self.value_column is None or self.plot_start is None or self.end is None:
                raise ValueError("Series requests need value_column, plot_start and end")
            if self.lookback_days < 0:
                raise ValueError("lookback_days must not be negative")

    @property
    def window_start(self) -> date | None:
        """First day of raw data the request reads."""
        if self.plot_start is None:
            return None
        return self.plot_start - timedelta(days=self.lookback_days)

    @property
    def has_filter(self) -> bool:
        # Empty column or value means no filter
        return bool(self.filter_column) and self.filter_value not in (None, "")

    def to_sql(self) -> str:
        """Render the request as MySQL text."""
        if self.kind == EARLIEST_DATE:
            return (
                f"SELECT MIN({self.date_column}) AS '{DATE_FIELD}' "
                f"FROM {self.table};"
            )
        if self.kind == LATEST_DATE:
            return (
                f"SELECT MAX({self.date_column}) AS '{DATE_FIELD}' "
                f"FROM {self.table};"
            )
        return self._series_sql()

    def _series_sql(self) -> str:
        start = self.plot_start.strftime(DATE_FORMAT_MYSQL)
        end = self.end.strftime(DATE_FORMAT_MYSQL)
        n = self.lookback_days
        condition = f"AND {self.filter_column} = '{self.filter_value}'" if self.has_filter else ""
        group_select = f", {self.group_by}" if self.group_by else ""
        group_clause = f", {self.group_by}" if self.group_by else ""

        daily = (
            f"(SELECT {self.date_column} AS 'DAY', AVG({self.value_column}) AS 'DAY_AVG'"
            f"{group_select} FROM {self.table} "
            f"WHERE ({self.date_column} BETWEEN DATE_SUB('{start}', INTERVAL {n} DAY) AND '{end}') "
            f"{condition} GROUP BY DAY{group_clause})"
        )

        if self.min_coverage is None:
            value_expr = "AVG(T2.DAY_AVG)"
        else:
            value_expr = (
                f"CASE WHEN COUNT(T2.DAY) < {self.min_coverage} "
                f"THEN NULL ELSE AVG(T2.DAY_AVG) END"
            )

        join = f"T2.DAY BETWEEN DATE_SUB(T1.DAY, INTERVAL {n} DAY) AND T1.DAY"
        if self.group_by:
            join = f"({join}) AND (T2.{self.group_by} = T1.{self.group_by})"
            select_group = f", T1.{self.group_by} AS '{self.group_by}'"
            order = f"ORDER BY {self.group_by} ASC, {DATE_FIELD} ASC"
        else:
            select_group = ""
            order = f"ORDER BY {DATE_FIELD} ASC"

        return (
            f"SELECT T1.DAY AS '{DATE_FIELD}', {value_expr} AS '{VALUE_FIELD}'{select_group} "
            f"FROM {daily} T1 LEFT JOIN {daily} T2 ON {join} "
            f"WHERE T1.DAY BETWEEN '{start}' AND '{end}' "
            f"GROUP BY {DATE_FIELD}{group_clause} {order}"
        )
