"""
QA build KPIs — End-to-end pipeline smoke test.

Loads build history (the Excel export if present, otherwise simulated data),
computes every registered KPI over a few date ranges and prints summaries.

Usage:
    python main.py
"""

import logging
from datetime import timedelta

from kpi_mapper import DataFrameStorage, KpiMapper
from kpi_mapper.config import BUILD_HISTORY_FILE, BUILDS_TABLE
from kpi_mapper.loaders import load_build_history
from kpi_mapper.periods import moving_average_period
from kpi_mapper.registry import build_kpis
from kpi_mapper.simulator import generate_build_history

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

RANGES_DAYS = [7, 30, 90, 365]


def main() -> None:
    """Run the KPI pipeline and print smoke-test outputs."""

    print("=" * 70)
    print("  QA BUILD KPIs")
    print("  Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load source data
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING SOURCE DATA")
    print("-" * 40)

    if BUILD_HISTORY_FILE.exists():
        builds = load_build_history(str(BUILD_HISTORY_FILE))
        print(f"\nBuild history: {len(builds)} rows loaded from {BUILD_HISTORY_FILE.name}")
    else:
        builds = generate_build_history(n_days=400)
        print(f"\nBuild history: {len(builds)} simulated rows")
    print(builds.head().to_string(index=False))

    storage = DataFrameStorage({BUILDS_TABLE: builds})

    # ------------------------------------------------------------------
    # 2. Compute KPIs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] KPI SERIES")
    print("-" * 40)

    checks = []
    no_data = 0
    for key, kpi in build_kpis().items():
        mapper = KpiMapper(kpi, storage)
        earliest = mapper.find_earliest_date()
        latest = mapper.find_latest_date()
        print(f"\n{kpi.title}  [{key}]")
        print(f"  data available {earliest} to {latest}")

        for days in RANGES_DAYS:
            start = latest - timedelta(days=days - 1)
            result = mapper.compute_series(start, latest)
            period = moving_average_period(days)
            if not result:
                print(f"  {days:4d} days (SMA {period:2d}): no data")
                no_data += 1
                continue
            points = sum(len(trace.x) for trace in result.series)
            print(
                f"  {days:4d} days (SMA {period:2d}): "
                f"{len(result.series)} series, {points} points -> {result.series_names}"
            )
            checks.append(result.series_names[0] == "Overall")

    # ------------------------------------------------------------------
    # 3. Acceptance checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] ACCEPTANCE CRITERIA CHECKS")
    print("-" * 40)
    passed = sum(checks)
    print(f"\n  [{'PASS' if passed == len(checks) else 'FAIL'}] "
          f"{passed}/{len(checks)} charts produced with 'Overall' first")
    print(f"  [INFO] {no_data} range(s) had insufficient data")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
