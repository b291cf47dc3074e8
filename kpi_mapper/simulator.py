"""
Simulated build-history generator.

Generates plausible queue-plus-build durations for a handful of Bamboo plans.
All values are synthetic.
"""

import numpy as np
import pandas as pd

from .config import BUILDS_DATE_COLUMN, BUILDS_VALUE_COLUMN

# ---------------------------------------------------------------------------
# Typical plan parameters (minutes)
# ---------------------------------------------------------------------------
_PLANS = {
    "Core - Nightly": {"mean": 34.0, "std": 6.0, "builds_per_day": 3, "agent": "linux"},
    "Core - PR": {"mean": 22.0, "std": 5.0, "builds_per_day": 8, "agent": "linux"},
    "Web - PR": {"mean": 15.0, "std": 4.0, "builds_per_day": 6, "agent": "linux"},
    "Installer": {"mean": 48.0, "std": 9.0, "builds_per_day": 1, "agent": "windows"},
}

_CYCLES = ["S2018A", "S2018B"]


def generate_build_history(
    start: str = "2018-01-01",
    n_days: int = 180,
    missing_day_rate: float = 0.1,
    seed: int = 42,
) -> pd.DataFrame:
    """Generate simulated completed builds.

    Each plan builds a Poisson-distributed number of times per day. Whole
    days are dropped at ``missing_day_rate`` so charts show real gaps. The
    first half of the range belongs to cycle S2018A, the rest to S2018B.

    Returns
    -------
    DataFrame with columns:
        BUILD_COMPLETED_DATE, MINUTES_TOTAL_QUEUE_AND_BUILD, PLAN_NAME,
        AGENT_TYPE, CYCLE
    """
    rng = np.random.default_rng(seed)
    days = pd.date_range(start, periods=n_days, freq="D")
    rows = []

    for i, day in enumerate(days):
        if rng.random() < missing_day_rate:
            continue
        cycle = _CYCLES[0] if i < n_days // 2 else _CYCLES[1]
        # Slow improvement over the range
        drift = 1.0 - 0.15 * (i / max(n_days - 1, 1))

        for plan, params in _PLANS.items():
            for _ in range(rng.poisson(params["builds_per_day"])):
                minutes = rng.normal(params["mean"] * drift, params["std"])
                rows.append({
                    BUILDS_DATE_COLUMN: day + pd.Timedelta(minutes=int(rng.integers(0, 24 * 60))),
                    BUILDS_VALUE_COLUMN: round(max(minutes, 1.0), 2),
                    "PLAN_NAME": plan,
                    "AGENT_TYPE": params["agent"],
                    "CYCLE": cycle,
                })

    return pd.DataFrame(
        rows,
        columns=[BUILDS_DATE_COLUMN, BUILDS_VALUE_COLUMN, "PLAN_NAME", "AGENT_TYPE", "CYCLE"],
    )
