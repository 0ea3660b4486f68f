"""
Contractor Registration Dashboard: End-to-end analytics pipeline.

Runs the full data pipeline from period workbooks to dashboard-ready
outputs and prints smoke-test summaries. When no workbooks are found in
the data directory, simulated ones are written to a temporary folder.

Usage:
    python main.py
"""

import logging
import tempfile

from contractor_dashboard.config import DEFAULT_CONFIG, PROJECT_NAME
from contractor_dashboard.dashboard import (
    get_available_periods,
    get_concentration_table,
    get_improvement_history,
    get_missing_table,
    get_period_overview,
    get_trend_chart,
    get_units_table,
)
from contractor_dashboard.loaders import WorkbookLoader, discover_periods
from contractor_dashboard.pipeline import load_all_periods
from contractor_dashboard.simulator import write_simulated_periods

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run the full analytics pipeline and print smoke-test outputs."""

    print("=" * 70)
    print(f"  {PROJECT_NAME.upper()}")
    print("  Analytics Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load source data
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING SOURCE DATA")
    print("-" * 40)

    config = DEFAULT_CONFIG
    sources = discover_periods(config)
    if sources:
        run_pipeline(sources, config)
        return

    with tempfile.TemporaryDirectory() as tmp_dir:
        logger.warning(
            "No workbooks in %s; writing simulated periods to %s",
            config.data_dir, tmp_dir,
        )
        run_pipeline(write_simulated_periods(tmp_dir, n_periods=4), config)


def run_pipeline(sources, config) -> None:
    """Load the given period sources and print dashboard outputs and checks."""
    loader = WorkbookLoader()
    snapshots = load_all_periods(loader, sources, config)
    print(f"\nPeriods loaded: {get_available_periods(snapshots)}")

    if not snapshots:
        print("\nNo periods could be processed.")
        return

    # ------------------------------------------------------------------
    # 2. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    latest = snapshots[-1]
    overview = get_period_overview(snapshots, latest.code, config)
    print(f"\nOverview ({latest.name}):")
    for key, value in overview.items():
        if key == "evolution":
            continue
        print(f"  {key:24s} | {value}")

    print("\nUnits:")
    print(get_units_table(latest).to_string(index=False))

    print("\nConcentration (top critical units):")
    concentration = get_concentration_table(latest)
    if not concentration.empty:
        print(concentration.to_string(index=False))
    print(f"  Share of missing: {latest.concentration.share_pct:.1f}%")

    if latest.critical:
        worst = latest.critical[0].unit
        print(f"\nMissing contracts ({worst}):")
        print(get_missing_table(latest, worst).head(10).to_string(index=False))

    print("\nEvolution chart series:")
    print(get_trend_chart(snapshots, config=config).to_string(index=False))

    print("\nCompletion by period:")
    print(get_improvement_history(snapshots).to_string(index=False))

    # ------------------------------------------------------------------
    # 3. Acceptance checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] ACCEPTANCE CRITERIA CHECKS")
    print("-" * 40)

    for snapshot in snapshots:
        classified = snapshot.at_target_count + snapshot.in_progress_count + snapshot.critical_count
        check = classified == snapshot.total_units
        print(
            f"  [{'PASS' if check else 'FAIL'}] {snapshot.code}: "
            f"{classified} classified of {snapshot.total_units} units"
        )

        flattened = sum(len(v) for v in snapshot.missing_by_unit.values())
        check = flattened == len(snapshot.missing_records)
        print(
            f"  [{'PASS' if check else 'FAIL'}] {snapshot.code}: "
            f"{flattened} grouped of {len(snapshot.missing_records)} missing contracts"
        )

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
