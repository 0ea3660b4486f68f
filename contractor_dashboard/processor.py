"""
Period metrics: pure functions with no side effects.

Provides grouping of missing contracts, new-projects backfill, tier
classification, Pareto concentration and the per-period snapshot.
"""

import logging
from dataclasses import replace

from .config import (
    DEFAULT_CONFIG,
    EXCELLENT_TOLERANCE,
    NEW_PROJECTS_PATTERN,
    UNASSIGNED_UNIT,
    DashboardConfig,
)
from .loaders.utils import contains_pattern
from .models import (
    AT_TARGET,
    CRITICAL,
    IN_PROGRESS,
    Classification,
    ClassifiedUnit,
    ConcentrationSummary,
    IndicatorSheet,
    MissingContractRecord,
    PeriodSnapshot,
    PeriodSource,
    UnitIndicator,
)

logger = logging.getLogger(__name__)


def format_ratio(ratio: float) -> str:
    """0.857 -> '85.7%'"""
    return f"{ratio * 100:.1f}%"


def group_missing_by_unit(
    records: list[MissingContractRecord],
) -> dict[str, tuple[MissingContractRecord, ...]]:
    """Group missing contracts by unit, keeping file order inside each group.

    Records without a unit land in the UNASSIGNED bucket.
    """
    grouped: dict[str, list[MissingContractRecord]] = {}
    for record in records:
        unit = record.unit or UNASSIGNED_UNIT
        grouped.setdefault(unit, []).append(record)
    return {unit: tuple(items) for unit, items in grouped.items()}


def backfill_new_projects(
    indicator: UnitIndicator,
    records: list[MissingContractRecord],
) -> UnitIndicator:
    """Fill the new-projects indicator from the MISSING sheet.

    missing and expected_field become the number of missing contracts
    whose unit mentions new projects; nothing is captured yet, so the
    completion ratio is 0.
    """
    count = sum(1 for r in records if contains_pattern(r.unit, NEW_PROJECTS_PATTERN))
    return replace(indicator, missing=count, expected_field=count, completion_ratio=0.0)


def classify_unit(
    unit: UnitIndicator,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> str:
    """Return 'at_target', 'in_progress' or 'critical'.

    Logic
    -----
    at_target    if ratio >= excellent - 0.0001
    in_progress  if ratio >= in_progress threshold (inclusive)
    critical     otherwise
    """
    ratio = unit.completion_ratio
    if ratio >= config.excellent_threshold - EXCELLENT_TOLERANCE:
        return AT_TARGET
    if ratio >= config.in_progress_threshold:
        return IN_PROGRESS
    return CRITICAL


def classify_units(
    units: list[UnitIndicator],
    config: DashboardConfig = DEFAULT_CONFIG,
) -> Classification:
    """Partition units into the three tiers.

    critical and in_progress are ordered worst first (most missing);
    at_target is ordered by unit name.
    """
    tiers: dict[str, list[ClassifiedUnit]] = {
        AT_TARGET: [],
        IN_PROGRESS: [],
        CRITICAL: [],
    }

    for unit in units:
        tier = classify_unit(unit, config)
        tiers[tier].append(ClassifiedUnit(
            unit=unit.unit,
            expected_registry=unit.expected_registry,
            expected_field=unit.expected_field,
            captured=unit.captured,
            missing=unit.missing,
            completion_ratio=unit.completion_ratio,
            tier=tier,
            percentage_label=format_ratio(unit.completion_ratio),
        ))

    tiers[CRITICAL].sort(key=lambda u: u.missing, reverse=True)
    tiers[IN_PROGRESS].sort(key=lambda u: u.missing, reverse=True)
    tiers[AT_TARGET].sort(key=lambda u: u.unit)

    return Classification(
        at_target=tuple(tiers[AT_TARGET]),
        in_progress=tuple(tiers[IN_PROGRESS]),
        critical=tuple(tiers[CRITICAL]),
    )


def calc_concentration(
    critical: tuple[ClassifiedUnit, ...] | list[ClassifiedUnit],
    total_missing: int,
    top_n: int = 4,
) -> ConcentrationSummary:
    """Share of total missing work held by the worst critical units.

    critical must already be sorted by missing, descending. Returns an
    empty summary when total_missing is 0.
    """
    if total_missing == 0:
        return ConcentrationSummary()

    top = tuple(critical[:top_n])
    top_missing = sum(u.missing for u in top)
    share = (top_missing / total_missing) * 100
    return ConcentrationSummary(top_units=top, top_missing=top_missing, share_pct=share)


def process_period(
    indicators: IndicatorSheet,
    missing_records: list[MissingContractRecord],
    duplicate_count: int,
    source: PeriodSource,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> PeriodSnapshot:
    """Build the snapshot for one period.

    Parameters
    ----------
    indicators : From extract_unit_indicators() / extract_period().
    missing_records : From extract_missing_contracts().
    duplicate_count : From count_duplicates().
    source : Period metadata (code, display name, file).

    Totals are read from the TOTAL row, never re-summed from the units.
    Without a TOTAL row every total is 0 and has_totals is False.
    """
    missing_by_unit = group_missing_by_unit(missing_records)

    units = list(indicators.units)
    new_projects = indicators.new_projects
    if new_projects is not None:
        new_projects = backfill_new_projects(new_projects, missing_records)
        units.append(new_projects)

    classification = classify_units(units, config)

    total = indicators.total
    if total is None:
        logger.warning(
            "Period %s has no TOTAL row; totals default to 0", source.code
        )
        total = UnitIndicator(unit="")

    concentration = calc_concentration(
        classification.critical, total.missing, config.concentration_top_n
    )

    snapshot = PeriodSnapshot(
        code=source.code,
        name=source.name,
        source=source.file,
        completion_ratio=total.completion_ratio,
        total_registry_expected=total.expected_registry,
        total_field_expected=total.expected_field,
        total_captured=total.captured,
        total_missing=total.missing,
        at_target=classification.at_target,
        in_progress=classification.in_progress,
        critical=classification.critical,
        missing_records=tuple(missing_records),
        missing_by_unit=missing_by_unit,
        duplicate_count=duplicate_count,
        concentration=concentration,
        units=tuple(units),
        new_projects=new_projects,
        has_totals=indicators.total is not None,
    )

    logger.info(
        "Processed %s: %s captured, %d units (%d at target, %d in progress, %d critical)",
        source.code,
        format_ratio(snapshot.completion_ratio),
        snapshot.total_units,
        snapshot.at_target_count,
        snapshot.in_progress_count,
        snapshot.critical_count,
    )
    return snapshot
