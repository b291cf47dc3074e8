"""Tests for KPI definitions built from the registry."""

from __future__ import annotations

from datetime import date

import pytest

from kpi_mapper.config import KPI_GOALS, KPI_REGISTRY
from kpi_mapper.registry import build_kpis, get_kpi


def test_build_kpis_covers_registry_in_order() -> None:
    kpis = build_kpis()

    assert list(kpis) == list(KPI_REGISTRY)
    for key, kpi in kpis.items():
        assert kpi.title == KPI_REGISTRY[key]["title"]
        assert kpi.group_by == KPI_REGISTRY[key]["group_by"]


def test_goals_come_from_goal_config() -> None:
    kpi = get_kpi("build_time_by_plan")
    goals = KPI_GOALS["build_time_from_queue"]

    assert kpi.goals.target == goals["target_minutes"]
    assert kpi.goals.stretch == goals["stretch_minutes"]


def test_filtered_kpi_requests_are_filtered() -> None:
    kpi = get_kpi("build_time_by_plan_current_cycle")

    requests = kpi.build_requests(date(2018, 1, 1), date(2018, 1, 30), 30)

    assert all(r.has_filter and r.filter_value == "S2018A" for r in requests)


def test_unknown_kpi_raises_key_error() -> None:
    with pytest.raises(KeyError, match="deploy_frequency"):
        get_kpi("deploy_frequency")
