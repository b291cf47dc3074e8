"""
Windowed KPI: simple moving average of a per-day value, overall and split
by a group column.

Days with no data are not plotted. Grouped points whose trailing window has
too few contributing days are emitted as gaps rather than smoothed values.
"""

import logging
from dataclasses import dataclass
from datetime import date

import pandas as pd

from .charts import ChartPayload, GoalThresholds, TraceLine
from .config import (
    DATE_FIELD,
    GROUP_LINE_WIDTH,
    MIN_GROUPED_ROWS,
    MIN_OVERALL_ROWS,
    MIN_TRACE_ROWS,
    OVERALL_GROUP,
    OVERALL_LINE_WIDTH,
    VALUE_FIELD,
)
from .dates import DateRange
from .periods import lookback_days, min_coverage, moving_average_period
from .queries import EARLIEST_DATE, LATEST_DATE, SERIES, DataRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowedKpi:
    """KpiPolicy for a moving-average KPI with a per-group breakdown.

    Attributes
    ----------
    title : Chart title.
    table : Storage table holding one row per raw measurement.
    date_column, value_column : Day of the measurement and the measured value.
    group_by : Column used to split the overall line into sub-series.
    filter_column, filter_value : Optional equality filter. Empty means none.
    y_axis_title : Label for the value axis.
    goals : Target and stretch thresholds drawn on the chart.
    """

    title: str
    table: str
    date_column: str
    value_column: str
    group_by: str
    y_axis_title: str
    goals: GoalThresholds
    filter_column: str | None = None
    filter_value: object = None

    def derive_period(self, range_length_days: int) -> int:
        return moving_average_period(range_length_days)

    def build_requests(
        self,
        effective_start: date,
        end: date,
        range_length_days: int,
    ) -> list[DataRequest]:
        """Return ``[overall, grouped]`` series requests. The order is fixed."""
        period = self.derive_period(range_length_days)
        common = {
            "kind": SERIES,
            "table": self.table,
            "date_column": self.date_column,
            "value_column": self.value_column,
            "plot_start": effective_start,
            "end": end,
            "lookback_days": lookback_days(period),
            "filter_column": self.filter_column,
            "filter_value": self.filter_value,
        }
        overall = DataRequest(**common)
        grouped = DataRequest(
            **common,
            min_coverage=min_coverage(period),
            group_by=self.group_by,
        )
        return [overall, grouped]

    def is_sufficient(self, row_sets: list[list[dict]]) -> bool:
        overall_rows, grouped_rows = row_sets[0], row_sets[1]
        return len(overall_rows) >= MIN_OVERALL_ROWS and len(grouped_rows) >= MIN_GROUPED_ROWS

    def assemble(self, row_sets: list[list[dict]], chart_range: DateRange) -> ChartPayload:
        """Map row sets to one trace line per group, in first-seen order."""
        trace_lines: dict[str, TraceLine] = {}

        for rows in row_sets:
            # insufficient data, ignore trace line
            if len(rows) < MIN_TRACE_ROWS:
                continue

            for row in rows:
                name = self._group_name(row.get(self.group_by))
                if name not in trace_lines:
                    width = OVERALL_LINE_WIDTH if name == OVERALL_GROUP else GROUP_LINE_WIDTH
                    trace_lines[name] = TraceLine(name=name, width=width)
                trace_lines[name].append(row[DATE_FIELD], row.get(VALUE_FIELD))

        logger.debug("kpi %s: assembled %d trace lines", self.title, len(trace_lines))
        return ChartPayload(
            series=list(trace_lines.values()),
            title=self.title,
            x_axis_bounds=chart_range,
            y_axis_title=self.y_axis_title,
            goals=self.goals,
        )

    @staticmethod
    def _group_name(value) -> str:
        # Only the overall line has no group value
        if value is None or value == "" or (isinstance(value, float) and pd.isna(value)):
            return OVERALL_GROUP
        return value if isinstance(value, str) else str(value)

    def earliest_date_request(self) -> DataRequest:
        return DataRequest(kind=EARLIEST_DATE, table=self.table, date_column=self.date_column)

    def latest_date_request(self) -> DataRequest:
        return DataRequest(kind=LATEST_DATE, table=self.table, date_column=self.date_column)
