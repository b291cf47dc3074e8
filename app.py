"""
QA build KPIs — Interactive Dashboard

Run with:  streamlit run app.py
"""

from datetime import timedelta

import plotly.graph_objects as go
import streamlit as st

from kpi_mapper import DataFrameStorage, KpiMapper
from kpi_mapper.config import BUILD_HISTORY_FILE, BUILDS_TABLE
from kpi_mapper.loaders import load_build_history
from kpi_mapper.periods import moving_average_period
from kpi_mapper.registry import build_kpis
from kpi_mapper.simulator import generate_build_history

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="QA Build KPIs",
    layout="wide",
    initial_sidebar_state="expanded",
)

PRESET_RANGES = {
    "Last 7 days": 7,
    "Last 30 days": 30,
    "Last quarter": 92,
    "Last 6 months": 183,
    "Last year": 365,
}


# ---------------------------------------------------------------------------
# Data loading (cached)
# ---------------------------------------------------------------------------
@st.cache_data
def load_builds():
    if BUILD_HISTORY_FILE.exists():
        return load_build_history(str(BUILD_HISTORY_FILE)), False
    return generate_build_history(n_days=400), True


builds, simulated = load_builds()
storage = DataFrameStorage({BUILDS_TABLE: builds})
kpis = build_kpis()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("QA Build KPIs")
st.sidebar.divider()

kpi_key = st.sidebar.selectbox(
    "KPI",
    list(kpis),
    format_func=lambda key: kpis[key].title,
)
mapper = KpiMapper(kpis[kpi_key], storage)

earliest = mapper.find_earliest_date()
latest = mapper.find_latest_date()

preset = st.sidebar.radio("Range", list(PRESET_RANGES) + ["Custom"])
if preset == "Custom":
    picked = st.sidebar.date_input(
        "From / to",
        value=(max(earliest, latest - timedelta(days=29)), latest),
        min_value=earliest,
        max_value=latest,
    )
    if len(picked) != 2:
        st.stop()
    start, end = picked
else:
    end = latest
    start = max(earliest, latest - timedelta(days=PRESET_RANGES[preset] - 1))

st.sidebar.divider()
st.sidebar.caption(
    "Data: simulated build history" if simulated else f"Data: {BUILD_HISTORY_FILE.name}"
)

# ===========================================================================
# Chart
# ===========================================================================
st.title(mapper.title)
range_days = (end - start).days + 1
st.caption(
    f"{start} to {end} ({range_days} days), "
    f"{moving_average_period(range_days)}-day simple moving average"
)

result = mapper.compute_series(start, end)

if not result:
    st.warning("Not enough data in this range to draw a trend.")
else:
    figure = result.to_plotly()
    fig = go.Figure(data=figure["data"], layout=figure["layout"])
    fig.update_layout(height=500, plot_bgcolor="rgba(0,0,0,0)")
    st.plotly_chart(fig, use_container_width=True, config=figure["config"])

    col1, col2 = st.columns(2)
    with col1:
        st.metric("Target goal", f"{result.goals.target:g} min")
    with col2:
        st.metric("Stretch goal", f"{result.goals.stretch:g} min")
