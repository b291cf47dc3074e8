"""
Windowed KPI series for QA build history.

Turns per-day build records into smoothed, chart-ready KPI series that a
Plotly.js front end can render directly.

To swap the in-memory store for a database feed:
    Implement storage.DataStorage.query() against the database. Render each
    DataRequest with DataRequest.to_sql() and return the result rows as
    dicts. The orchestrator and the assembly step remain unchanged.

To connect to Streamlit/Dash:
    Call KpiMapper.compute_series(start, end). It returns either a
    ChartPayload (use payload.to_plotly()) or NoData.

To add new KPIs:
    Add an entry to config.KPI_REGISTRY naming the table, date/value
    columns, group-by column and goal key. registry.build_kpis() picks it up.
"""

from .charts import ChartPayload, GoalThresholds, TraceLine
from .dates import DateRange
from .errors import KpiError, MalformedResultError, StorageError
from .mapper import ErrorLog, KpiMapper, KpiPolicy, LoggingErrorLog, NoData
from .queries import DataRequest
from .storage import DataFrameStorage, DataStorage
from .windowed import WindowedKpi

__all__ = [
    "ChartPayload",
    "DataFrameStorage",
    "DataRequest",
    "DataStorage",
    "DateRange",
    "ErrorLog",
    "GoalThresholds",
    "KpiError",
    "KpiMapper",
    "KpiPolicy",
    "LoggingErrorLog",
    "MalformedResultError",
    "NoData",
    "StorageError",
    "TraceLine",
    "WindowedKpi",
]
