"""
Named KPI definitions built from config.KPI_REGISTRY.
"""

import logging

from .charts import GoalThresholds
from .config import KPI_GOALS, KPI_REGISTRY
from .windowed import WindowedKpi

logger = logging.getLogger(__name__)


def _goals_for(goal_key: str) -> GoalThresholds:
    goals = KPI_GOALS[goal_key]
    return GoalThresholds(
        target=goals["target_minutes"],
        stretch=goals["stretch_minutes"],
    )


def get_kpi(key: str) -> WindowedKpi:
    """Return the WindowedKpi registered under ``key``.

    Raises KeyError for unknown keys.
    """
    try:
        entry = KPI_REGISTRY[key]
    except KeyError:
        raise KeyError(f"Unknown KPI '{key}'. Known: {sorted(KPI_REGISTRY)}") from None

    return WindowedKpi(
        title=entry["title"],
        table=entry["table"],
        date_column=entry["date_column"],
        value_column=entry["value_column"],
        group_by=entry["group_by"],
        y_axis_title=entry["y_axis_title"],
        goals=_goals_for(entry["goal"]),
        filter_column=entry.get("filter_column"),
        filter_value=entry.get("filter_value"),
    )


def build_kpis() -> dict[str, WindowedKpi]:
    """Return every registered KPI keyed by name, in registry order."""
    kpis = {key: get_kpi(key) for key in KPI_REGISTRY}
    logger.info("Built %d KPI definitions", len(kpis))
    return kpis
