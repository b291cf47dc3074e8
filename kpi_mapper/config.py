"""
Configuration: KPI registry, goal thresholds, date formats, constants.

KPI_REGISTRY maps each KPI key to the table and columns it reads, the column
used to split it into sub-series, and the goal thresholds drawn on its chart.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# File paths — adjust these if source files move
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent

BUILD_HISTORY_FILE = DATA_DIR / "qa_builds_and_runs_from_bamboo.xlsx"

# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------
BUILDS_TABLE = "qa_builds_and_runs_from_bamboo"
BUILDS_DATE_COLUMN = "BUILD_COMPLETED_DATE"
BUILDS_VALUE_COLUMN = "MINUTES_TOTAL_QUEUE_AND_BUILD"

# Column names every result row carries
DATE_FIELD = "DATE"
VALUE_FIELD = "AVG_VALUE"

# ---------------------------------------------------------------------------
# Date formats
# ---------------------------------------------------------------------------
DATE_FORMAT_CHARTS = "%Y-%m-%d"
DATE_FORMAT_MYSQL = "%Y-%m-%d"

# ---------------------------------------------------------------------------
# Windowing
# ---------------------------------------------------------------------------
# Query start is pulled back this many days so Plotly does not indent
# the first point of the chart.
LEAD_IN_DAYS = 2

# (max range length in days, moving average period in days), ascending.
# Ranges longer than the last bound use MAX_MOVING_AVERAGE_PERIOD.
MOVING_AVERAGE_STEPS: list[tuple[int, int]] = [
    (7, 1),
    (31, 3),
    (92, 7),
    (183, 14),
    (366, 30),
]
MAX_MOVING_AVERAGE_PERIOD = 60

# Minimum rows per result set before a chart is produced
MIN_OVERALL_ROWS = 2
MIN_GROUPED_ROWS = 6
# Minimum rows for a single trace line to be drawn
MIN_TRACE_ROWS = 2

# ---------------------------------------------------------------------------
# Chart appearance
# ---------------------------------------------------------------------------
OVERALL_GROUP = "Overall"
OVERALL_LINE_WIDTH = 3
GROUP_LINE_WIDTH = 1

TARGET_GOAL_COLOR = "#f39c12"
STRETCH_GOAL_COLOR = "#2ecc71"

# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------
KPI_GOALS: dict[str, dict[str, float]] = {
    "build_time_from_queue": {
        "target_minutes": 30.0,
        "stretch_minutes": 20.0,
    },
}

# ---------------------------------------------------------------------------
# KPI Registry
# ---------------------------------------------------------------------------
# group_by: column used to split the overall line into sub-series
# filter_column / filter_value: equality filter (None = no filter)
# goal: key into KPI_GOALS
KPI_REGISTRY: dict[str, dict] = {
    "build_time_by_plan": {
        "title": "Build Time From Queue, by Plan",
        "table": BUILDS_TABLE,
        "date_column": BUILDS_DATE_COLUMN,
        "value_column": BUILDS_VALUE_COLUMN,
        "group_by": "PLAN_NAME",
        "filter_column": None,
        "filter_value": None,
        "y_axis_title": "Minutes (lower is better)",
        "goal": "build_time_from_queue",
    },
    "build_time_by_agent": {
        "title": "Build Time From Queue, by Agent Type",
        "table": BUILDS_TABLE,
        "date_column": BUILDS_DATE_COLUMN,
        "value_column": BUILDS_VALUE_COLUMN,
        "group_by": "AGENT_TYPE",
        "filter_column": None,
        "filter_value": None,
        "y_axis_title": "Minutes (lower is better)",
        "goal": "build_time_from_queue",
    },
    "build_time_by_plan_current_cycle": {
        "title": "Build Time From Queue, by Plan (S2018A)",
        "table": BUILDS_TABLE,
        "date_column": BUILDS_DATE_COLUMN,
        "value_column": BUILDS_VALUE_COLUMN,
        "group_by": "PLAN_NAME",
        "filter_column": "CYCLE",
        "filter_value": "S2018A",
        "y_axis_title": "Minutes (lower is better)",
        "goal": "build_time_from_queue",
    },
}
