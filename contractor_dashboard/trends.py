"""
Cross-period analysis: period-over-period deltas, per-unit evolution,
linear projection and the evolution chart series.

Every function takes snapshots ordered oldest first.
"""

import logging
import math

import pandas as pd

from .config import (
    DEFAULT_CONFIG,
    EVOLUTION_NOISE,
    EVOLUTION_TOP_IMPROVEMENTS,
    DashboardConfig,
)
from .models import (
    EvolutionEntry,
    EvolutionResult,
    PeriodSnapshot,
    Projection,
    TrendComparison,
)

logger = logging.getLogger(__name__)


def compare_periods(
    current: PeriodSnapshot,
    previous: PeriodSnapshot | None,
) -> TrendComparison:
    """Deltas between a period and the one before it.

    incorporated estimates contracts registered during the period: the drop
    in missing contracts plus growth of the field-side total. It can be
    negative, meaning no net incorporation.
    """
    if previous is None:
        return TrendComparison()

    return TrendComparison(
        ratio_delta=current.completion_ratio - previous.completion_ratio,
        missing_delta=current.total_missing - previous.total_missing,
        registry_delta=current.total_registry_expected - previous.total_registry_expected,
        at_target_delta=current.at_target_count - previous.at_target_count,
        incorporated=(previous.total_missing - current.total_missing)
        + (current.total_field_expected - previous.total_field_expected),
    )


def format_points(delta: float) -> str:
    """0.12 -> '+12pp', -0.05 -> '-5pp'"""
    points = f"{delta * 100:.0f}pp"
    return f"+{points}" if delta > 0 else points


def analyze_evolution(
    current: PeriodSnapshot,
    baseline: PeriodSnapshot | None,
) -> EvolutionResult:
    """Units whose completion ratio moved more than one point since baseline.

    Improvements are returned best first, top 5 only. Regressions are
    returned worst first, all of them. Units missing from the baseline
    are ignored.
    """
    if baseline is None:
        return EvolutionResult()

    before_by_unit = {u.unit: u for u in baseline.units}
    improvements = []
    regressions = []

    for unit in current.units:
        before = before_by_unit.get(unit.unit)
        if before is None:
            continue

        delta = unit.completion_ratio - before.completion_ratio
        if abs(delta) <= EVOLUTION_NOISE:
            continue

        entry = EvolutionEntry(
            unit=unit.unit,
            before=before.completion_ratio,
            after=unit.completion_ratio,
            delta=delta,
            delta_label=format_points(delta),
            missing=unit.missing,
        )
        if delta > 0:
            improvements.append(entry)
        else:
            regressions.append(entry)

    improvements.sort(key=lambda e: e.delta, reverse=True)
    regressions.sort(key=lambda e: e.delta)

    return EvolutionResult(
        improvements=tuple(improvements[:EVOLUTION_TOP_IMPROVEMENTS]),
        regressions=tuple(regressions),
    )


def project_trend(
    snapshots: list[PeriodSnapshot],
    target_ratio: float | None = None,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> Projection | None:
    """Linear projection from the last two periods.

    Returns None with fewer than two snapshots.

    - velocity: change in completion ratio over the last interval
    - next_ratio: last ratio + velocity, capped at 1.0
    - acceleration: percent change of velocity against the interval before;
      None with fewer than three snapshots or when that velocity is 0
    - periods_to_target: periods needed to reach target_ratio at the current
      velocity; None when velocity is not positive, 0 when already reached
    """
    if len(snapshots) < 2:
        return None

    if target_ratio is None:
        target_ratio = config.target_ratio

    last = snapshots[-1]
    second_last = snapshots[-2]

    velocity = last.completion_ratio - second_last.completion_ratio
    next_ratio = min(1.0, last.completion_ratio + velocity)

    acceleration = None
    if len(snapshots) >= 3:
        prior_velocity = second_last.completion_ratio - snapshots[-3].completion_ratio
        if prior_velocity != 0:
            acceleration = ((velocity - prior_velocity) / prior_velocity) * 100
        else:
            logger.debug("Prior velocity is 0; acceleration not applicable")

    periods_to_target = None
    if velocity > 0:
        periods_to_target = max(0, math.ceil((target_ratio - last.completion_ratio) / velocity))

    return Projection(
        next_ratio=next_ratio,
        velocity=velocity,
        acceleration=acceleration,
        periods_to_target=periods_to_target,
        target_ratio=target_ratio,
    )


def _projection_labels(
    last_code: str, horizon: int, config: DashboardConfig
) -> list[str]:
    codes = [p["code"] for p in sorted(config.periods, key=lambda p: p["order"])]
    following = []
    if last_code in codes:
        following = codes[codes.index(last_code) + 1:]
    labels = following[:horizon]
    while len(labels) < horizon:
        labels.append(f"+{len(labels) + 1}")
    return labels


def build_trend_series(
    snapshots: list[PeriodSnapshot],
    projection: Projection | None = None,
    horizon: int = 2,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    """Evolution chart series: actual periods followed by projected ones.

    Returns
    -------
    DataFrame with columns:
        period, completion_pct, missing, is_projection

    Projected completion grows by velocity each step, capped at 100%.
    Projected missing shrinks by last.missing * velocity each step,
    rounded and floored at 0.
    """
    rows = [
        {
            "period": s.code,
            "completion_pct": round(s.completion_ratio * 100, 1),
            "missing": s.total_missing,
            "is_projection": False,
        }
        for s in snapshots
    ]

    if projection is not None and len(snapshots) >= 2:
        last = snapshots[-1]
        step_pct = projection.velocity * 100
        reduction = last.total_missing * projection.velocity
        pct = round(last.completion_ratio * 100, 1)
        labels = _projection_labels(last.code, horizon, config)

        for i, label in enumerate(labels, start=1):
            pct = min(100.0, pct + step_pct)
            rows.append({
                "period": label,
                "completion_pct": round(pct, 1),
                "missing": max(0, round(last.total_missing - reduction * i)),
                "is_projection": True,
            })

    return pd.DataFrame(rows, columns=["period", "completion_pct", "missing", "is_projection"])
