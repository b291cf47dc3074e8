"""Tests for the ChartPayload Plotly.js figure shape."""

from __future__ import annotations

from datetime import date

from kpi_mapper import ChartPayload, DateRange, GoalThresholds, TraceLine


def _payload() -> ChartPayload:
    overall = TraceLine(name="Overall", width=3)
    overall.append(date(2024, 1, 1), 12.5)
    overall.append(date(2024, 1, 2), None)
    return ChartPayload(
        series=[overall, TraceLine(name="A", width=1)],
        title="Build Time",
        x_axis_bounds=DateRange(date(2024, 1, 1), date(2024, 1, 31)),
        y_axis_title="Minutes",
        goals=GoalThresholds(target=30.0, stretch=20.0),
    )


def test_to_plotly_has_figure_sections() -> None:
    figure = _payload().to_plotly()

    assert set(figure) == {"data", "layout", "frames", "config"}
    assert figure["frames"] == []
    assert figure["config"] == {"displayModeBar": False}


def test_traces_keep_parallel_arrays_and_gaps() -> None:
    overall, other = _payload().to_plotly()["data"]

    assert overall["name"] == "Overall"
    assert overall["x"] == ["2024-01-01", "2024-01-02"]
    assert overall["y"] == [12.5, None]
    assert overall["line"] == {"width": 3}
    assert other["line"] == {"width": 1}
    assert other["x"] == other["y"] == []


def test_layout_carries_bounds_axis_title_and_goal_lines() -> None:
    layout = _payload().to_plotly()["layout"]

    assert layout["title"] == "Build Time"
    assert layout["showlegend"] is True
    assert layout["xaxis"]["range"] == ["2024-01-01", "2024-01-31"]
    assert layout["yaxis"]["title"] == "Minutes"
    assert [shape["y0"] for shape in layout["shapes"]] == [30.0, 20.0]
    assert all(shape["y0"] == shape["y1"] for shape in layout["shapes"])
