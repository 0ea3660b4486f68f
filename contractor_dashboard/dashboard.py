"""
Dashboard-ready output functions.

These are the entry points for a front end. Each function returns plain
dicts or DataFrames suitable for rendering KPI cards, unit tables, the
evolution chart and drill-down lists.
"""

import logging
from dataclasses import asdict

import pandas as pd

from .config import DEFAULT_CONFIG, DashboardConfig
from .models import PeriodSnapshot
from .trends import analyze_evolution, build_trend_series, compare_periods, project_trend

logger = logging.getLogger(__name__)

UNIT_COLUMNS = [
    "unit", "expected_registry", "expected_field", "captured", "missing",
    "completion_ratio", "tier", "percentage_label",
]

MISSING_COLUMNS = [
    "sequence", "period", "organization", "unit", "contractor", "tax_id",
    "contract_number", "headcount", "start_date", "end_date",
]


def get_available_periods(snapshots: list[PeriodSnapshot]) -> list[str]:
    """Period codes in chronological order for tabs/dropdowns."""
    return [s.code for s in snapshots]


def _find(snapshots: list[PeriodSnapshot], code: str) -> int | None:
    for idx, snapshot in enumerate(snapshots):
        if snapshot.code == code:
            return idx
    return None


def get_period_overview(
    snapshots: list[PeriodSnapshot],
    selected_period: str,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> dict:
    """Single entry point for the KPI cards of one period.

    Parameters
    ----------
    snapshots : Processed periods, oldest first.
    selected_period : Period code (e.g. "NOV").

    Returns
    -------
    Dict with totals, tier counts, comparison with the previous period,
    projection over the periods up to the selected one, evolution since the
    first period, the gain in percentage points and the registry growth since
    the first period, and total missing split between critical and
    in-progress units. Growth figures are None for the first period;
    registry_growth_pct is also None when the first registry total is 0.
    Empty dict when the period is unknown.
    """
    idx = _find(snapshots, selected_period)
    if idx is None:
        logger.warning("No data for period '%s'", selected_period)
        return {}

    current = snapshots[idx]
    previous = snapshots[idx - 1] if idx > 0 else None
    first = snapshots[0]

    comparison = compare_periods(current, previous)
    projection = project_trend(snapshots[: idx + 1], config=config)
    evolution = analyze_evolution(current, first if first is not current else None)

    gain_vs_first = None
    registry_growth = None
    registry_growth_pct = None
    if first is not current:
        gain_vs_first = (current.completion_ratio - first.completion_ratio) * 100
        registry_growth = current.total_registry_expected - first.total_registry_expected
        if first.total_registry_expected:
            registry_growth_pct = registry_growth / first.total_registry_expected * 100

    return {
        "period": current.code,
        "period_name": current.name,
        "has_totals": current.has_totals,
        "completion_ratio": current.completion_ratio,
        "total_registry_expected": current.total_registry_expected,
        "total_field_expected": current.total_field_expected,
        "total_captured": current.total_captured,
        "total_missing": current.total_missing,
        "total_units": current.total_units,
        "at_target_count": current.at_target_count,
        "in_progress_count": current.in_progress_count,
        "critical_count": current.critical_count,
        "duplicate_count": current.duplicate_count,
        "comparison": asdict(comparison),
        "projection": asdict(projection) if projection else None,
        "evolution": asdict(evolution),
        "gain_vs_first_pp": gain_vs_first,
        "registry_growth": registry_growth,
        "registry_growth_pct": registry_growth_pct,
        "missing_in_critical": sum(u.missing for u in current.critical),
        "missing_in_progress": sum(u.missing for u in current.in_progress),
        "baseline_period": first.code,
    }


def get_units_table(
    snapshot: PeriodSnapshot,
    tier: str | None = None,
) -> pd.DataFrame:
    """Classified units for one period, optionally limited to one tier.

    Returns
    -------
    DataFrame with columns:
        unit, expected_registry, expected_field, captured, missing,
        completion_ratio, tier, percentage_label
    Tier order is at_target, in_progress, critical; within a tier the
    classification order is kept.
    """
    groups = {
        "at_target": snapshot.at_target,
        "in_progress": snapshot.in_progress,
        "critical": snapshot.critical,
    }
    if tier is not None:
        groups = {tier: groups.get(tier, ())}

    rows = [asdict(u) for units in groups.values() for u in units]
    return pd.DataFrame(rows, columns=UNIT_COLUMNS)


def get_missing_table(
    snapshot: PeriodSnapshot,
    unit: str | None = None,
) -> pd.DataFrame:
    """Missing contracts, all of them or the drill-down list for one unit."""
    if unit is None:
        records = snapshot.missing_records
    else:
        records = snapshot.missing_by_unit.get(unit, ())

    rows = [asdict(r) for r in records]
    return pd.DataFrame(rows, columns=MISSING_COLUMNS)


def get_concentration_table(snapshot: PeriodSnapshot) -> pd.DataFrame:
    """Top critical units with their share of total missing contracts."""
    total = snapshot.total_missing
    rows = [
        {
            "unit": u.unit,
            "missing": u.missing,
            "share_pct": (u.missing / total) * 100 if total else 0.0,
        }
        for u in snapshot.concentration.top_units
    ]
    return pd.DataFrame(rows, columns=["unit", "missing", "share_pct"])


def get_trend_chart(
    snapshots: list[PeriodSnapshot],
    selected_period: str | None = None,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    """Evolution chart series including projected periods.

    The projection is computed over the periods up to selected_period (or
    all of them), while the actual series always covers every period.
    """
    history = snapshots
    if selected_period is not None:
        idx = _find(snapshots, selected_period)
        if idx is not None:
            history = snapshots[: idx + 1]

    projection = project_trend(history, config=config)
    return build_trend_series(snapshots, projection, config=config)


def get_improvement_history(
    snapshots: list[PeriodSnapshot],
    selected_period: str | None = None,
) -> pd.DataFrame:
    """Completion per period with the change from the period before.

    Returns
    -------
    DataFrame with columns period, completion_pct, delta_pp. delta_pp is
    None for the first period. Rows stop at selected_period when given.
    """
    history = snapshots
    if selected_period is not None:
        idx = _find(snapshots, selected_period)
        if idx is not None:
            history = snapshots[: idx + 1]

    rows = []
    for idx, snapshot in enumerate(history):
        delta = None
        if idx > 0:
            delta = (snapshot.completion_ratio - history[idx - 1].completion_ratio) * 100
        rows.append({
            "period": snapshot.code,
            "completion_pct": snapshot.completion_ratio * 100,
            "delta_pp": delta,
        })
    return pd.DataFrame(rows, columns=["period", "completion_pct", "delta_pp"])
