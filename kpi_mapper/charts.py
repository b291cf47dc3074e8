"""
Chart payload types and Plotly.js building blocks.

ChartPayload is the hand-off to the rendering layer. to_plotly() turns it
into the figure dict Plotly.js (or plotly.graph_objects) consumes, so field
names here are part of the wire contract.
"""

from dataclasses import dataclass, field
from datetime import date

from .config import (
    DATE_FORMAT_CHARTS,
    STRETCH_GOAL_COLOR,
    TARGET_GOAL_COLOR,
)
from .dates import DateRange


@dataclass
class TraceLine:
    """One named line: parallel x (dates) and y (values, None = gap) arrays."""

    name: str
    width: int
    x: list[date] = field(default_factory=list)
    y: list[float | None] = field(default_factory=list)

    def append(self, day: date, value: float | None) -> None:
        self.x.append(day)
        self.y.append(value)

    def to_plotly(self) -> dict:
        return get_trace_line_data(self.name, self.x, self.y, self.width)


@dataclass(frozen=True)
class GoalThresholds:
    target: float
    stretch: float


@dataclass
class ChartPayload:
    """Chart-ready KPI result."""

    series: list[TraceLine]
    title: str
    x_axis_bounds: DateRange
    y_axis_title: str
    goals: GoalThresholds
    show_legend: bool = True

    @property
    def series_names(self) -> list[str]:
        return [trace.name for trace in self.series]

    def to_plotly(self) -> dict:
        """Return a Plotly.js figure dict: data, layout, frames, config."""
        return {
            "data": [trace.to_plotly() for trace in self.series],
            "layout": {
                "title": self.title,
                "showlegend": self.show_legend,
                "legend": get_legend_info(),
                "xaxis": get_date_xaxis(self.x_axis_bounds),
                "yaxis": get_yaxis(self.y_axis_title),
                "shapes": get_shapes_from_goals(self.goals),
            },
            "frames": [],
            "config": {"displayModeBar": False},
        }


# ---------------------------------------------------------------------------
# Plotly.js helpers
# ---------------------------------------------------------------------------

def get_trace_line_data(
    name: str,
    x: list,
    y: list,
    width: int,
) -> dict:
    """Plotly scatter trace drawn as a line. None in ``y`` leaves a gap."""
    return {
        "name": name,
        "type": "scatter",
        "mode": "lines",
        "x": [
            day.strftime(DATE_FORMAT_CHARTS) if isinstance(day, date) else day
            for day in x
        ],
        "y": list(y),
        "line": {"width": width},
        "connectgaps": False,
    }


def get_legend_info() -> dict:
    return {"orientation": "h", "x": 0, "y": -0.2}


def get_date_xaxis(bounds: DateRange) -> dict:
    start, end = bounds.format(DATE_FORMAT_CHARTS)
    return {
        "type": "date",
        "range": [start, end],
        "tickformat": "%d %b %Y",
    }


def get_yaxis(title: str) -> dict:
    return {"title": title, "rangemode": "tozero"}


def get_shapes_from_goals(goals: GoalThresholds) -> list[dict]:
    """Horizontal dashed lines across the full plot width, one per goal."""
    shapes = []
    for value, color in (
        (goals.target, TARGET_GOAL_COLOR),
        (goals.stretch, STRETCH_GOAL_COLOR),
    ):
        shapes.append({
            "type": "line",
            "xref": "paper",
            "x0": 0,
            "x1": 1,
            "yref": "y",
            "y0": value,
            "y1": value,
            "line": {"color": color, "width": 2, "dash": "dash"},
        })
    return shapes
