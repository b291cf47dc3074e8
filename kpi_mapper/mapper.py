"""
KPI orchestration: turn a date range into storage requests and hand the
results to a KPI policy for assembly.

KpiMapper owns the request/response contract. Everything KPI-specific
(period rule, request shapes, sufficiency gate, assembly) comes from a
KpiPolicy, so one mapper works for every KPI.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

import pandas as pd

from .charts import ChartPayload
from .config import DATE_FIELD, LEAD_IN_DAYS
from .dates import DateRange, normalise_date, shift_days
from .errors import MalformedResultError
from .queries import DataRequest
from .storage import DataStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoData:
    """Computation finished but there were too few points to chart.

    Falsy, so ``if result:`` separates it from a ChartPayload. It is a
    result, not an error.
    """

    title: str
    reason: str = "insufficient data"

    def __bool__(self) -> bool:
        return False


class KpiPolicy(Protocol):
    title: str

    def derive_period(self, range_length_days: int) -> int:
        ...

    def build_requests(
        self, effective_start: date, end: date, range_length_days: int
    ) -> list[DataRequest]:
        ...

    def is_sufficient(self, row_sets: list[list[dict]]) -> bool:
        ...

    def assemble(self, row_sets: list[list[dict]], chart_range: DateRange) -> ChartPayload:
        ...

    def earliest_date_request(self) -> DataRequest:
        ...

    def latest_date_request(self) -> DataRequest:
        ...


class ErrorLog(Protocol):
    """Fire-and-forget sink for errors worth a human's attention."""

    def record(self, error: BaseException, context: str) -> None:
        ...


class LoggingErrorLog:
    """ErrorLog that writes to the ``logging`` module."""

    def __init__(self, name: str = "kpi_mapper.error_log"):
        self._logger = logging.getLogger(name)

    def record(self, error: BaseException, context: str) -> None:
        self._logger.error("%s | %s", error, context)


class KpiMapper:
    """Maps storage rows to a Plotly-ready KPI chart for one KPI policy."""

    def __init__(
        self,
        policy: KpiPolicy,
        storage: DataStorage,
        error_log: ErrorLog | None = None,
    ):
        self.policy = policy
        self.storage = storage
        self.error_log = error_log if error_log is not None else LoggingErrorLog()

    @property
    def title(self) -> str:
        return self.policy.title

    def compute_series(self, start: Any, end: Any) -> ChartPayload | NoData:
        """Return the KPI chart for ``[start, end]``, or NoData.

        Parameters
        ----------
        start, end : Anything normalise_date() accepts. Both ends inclusive.

        Raises
        ------
        StorageError
            If the storage fails. Never converted into NoData.
        """
        chart_range = DateRange.from_values(start, end)
        range_length = chart_range.length_days
        effective_start = shift_days(chart_range.start, -LEAD_IN_DAYS)

        period = self.policy.derive_period(range_length)
        logger.debug(
            "kpi %s: %d day range, moving average period %d",
            self.title, range_length, period,
        )

        requests = self.policy.build_requests(effective_start, chart_range.end, range_length)

        row_sets = []
        for request in requests:
            row_sets.append(self.storage.query(request))

        if not self.policy.is_sufficient(row_sets):
            logger.info(
                "kpi %s: insufficient data for %s to %s (%s rows)",
                self.title, chart_range.start, chart_range.end,
                [len(rows) for rows in row_sets],
            )
            return NoData(self.title)

        return self.policy.assemble(row_sets, chart_range)

    def find_earliest_date(self) -> date:
        """Earliest day with data for this KPI."""
        return self._find_single_date(self.policy.earliest_date_request(), "start")

    def find_latest_date(self) -> date:
        """Latest day with data for this KPI."""
        return self._find_single_date(self.policy.latest_date_request(), "end")

    def _find_single_date(self, request: DataRequest, which: str) -> date:
        results = self.storage.query(request)

        if len(results) != 1:
            self._fail(
                request,
                f"kpi {self.title}: {which} date query must return only 1 result, "
                f"got {len(results)}",
            )

        value = results[0].get(DATE_FIELD)
        if value is None or (not isinstance(value, str) and pd.isna(value)) or value == "":
            self._fail(
                request,
                f'kpi {self.title}: {which} date query must return a "{DATE_FIELD}" column',
            )

        try:
            return normalise_date(value)
        except ValueError:
            self._fail(
                request,
                f"kpi {self.title}: {which} date query returned an unparseable "
                f"{DATE_FIELD}: {value!r}",
            )

    def _fail(self, request: DataRequest, message: str) -> None:
        err = MalformedResultError(message)
        try:
            self.error_log.record(err, f"query: {request.to_sql()}")
        except Exception:
            logger.exception("kpi %s: could not record error: %s", self.title, message)
        raise err
