"""Period comparison, per-unit evolution, projection and chart series."""

import pytest
from conftest import make_snapshot, unit

from contractor_dashboard.trends import (
    analyze_evolution,
    build_trend_series,
    compare_periods,
    format_points,
    project_trend,
)


def series(*ratios, missing=None):
    missing = missing or [0] * len(ratios)
    codes = ["SEP", "OCT", "NOV", "DEC", "JAN", "FEB"]
    return [
        make_snapshot(code=codes[i], ratio=r, missing=m, order=i + 1)
        for i, (r, m) in enumerate(zip(ratios, missing))
    ]


class TestComparePeriods:
    def test_no_previous(self):
        comparison = compare_periods(make_snapshot(ratio=0.5, missing=10), None)
        assert comparison.ratio_delta == 0
        assert comparison.missing_delta == 0
        assert comparison.registry_delta == 0
        assert comparison.at_target_delta == 0
        assert comparison.incorporated == 0

    def test_two_periods(self):
        a = make_snapshot(code="A", ratio=0.80, registry=100, field=120, captured=80, missing=20)
        b = make_snapshot(code="B", ratio=0.909, registry=110, field=120, captured=100, missing=10)
        comparison = compare_periods(b, a)
        assert comparison.ratio_delta == pytest.approx(0.109)
        assert comparison.missing_delta == -10
        assert comparison.registry_delta == 10
        assert comparison.incorporated == 10

    def test_at_target_delta(self):
        a = make_snapshot(units=[unit("A", 1.0), unit("B", 0.5)])
        b = make_snapshot(units=[unit("A", 1.0), unit("B", 1.0)])
        assert compare_periods(b, a).at_target_delta == 1

    def test_incorporated_can_be_negative(self):
        a = make_snapshot(field=100, missing=10)
        b = make_snapshot(field=90, missing=15)
        assert compare_periods(b, a).incorporated == -15


class TestAnalyzeEvolution:
    def test_no_baseline(self):
        result = analyze_evolution(make_snapshot(units=[unit("A", 0.5)]), None)
        assert result.improvements == ()
        assert result.regressions == ()

    def test_improvements_and_regressions(self):
        baseline = make_snapshot(units=[
            unit("A", 0.5), unit("B", 0.8), unit("C", 0.9), unit("D", 0.6), unit("OLD", 0.1),
        ])
        current = make_snapshot(units=[
            unit("A", 0.7), unit("B", 0.805), unit("C", 0.7, missing=6), unit("D", 0.55),
            unit("NEW", 0.9),
        ])
        result = analyze_evolution(current, baseline)
        assert [e.unit for e in result.improvements] == ["A"]
        assert [e.unit for e in result.regressions] == ["C", "D"]
        assert result.improvements[0].delta_label == "+20pp"
        assert result.regressions[0].delta_label == "-20pp"
        assert result.regressions[0].missing == 6

    def test_improvements_top_five(self):
        names = [f"U{i}" for i in range(7)]
        baseline = make_snapshot(units=[unit(n, 0.1) for n in names])
        current = make_snapshot(units=[unit(n, 0.2 + i * 0.1) for i, n in enumerate(names)])
        result = analyze_evolution(current, baseline)
        assert [e.unit for e in result.improvements] == ["U6", "U5", "U4", "U3", "U2"]

    def test_format_points(self):
        assert format_points(0.12) == "+12pp"
        assert format_points(-0.05) == "-5pp"


class TestProjectTrend:
    def test_single_snapshot(self):
        assert project_trend(series(0.5)) is None

    def test_empty(self):
        assert project_trend([]) is None

    def test_velocity_and_clamp(self):
        projection = project_trend(series(0.8, 0.95))
        assert projection.velocity == pytest.approx(0.15)
        assert projection.next_ratio == 1.0
        assert projection.acceleration is None
        assert projection.periods_to_target == 0

    def test_three_periods(self):
        projection = project_trend(series(0.5, 0.6, 0.8))
        assert projection.velocity == pytest.approx(0.2)
        assert projection.next_ratio == pytest.approx(1.0)
        assert projection.acceleration == pytest.approx(100.0)
        assert projection.periods_to_target == 1
        assert projection.target_ratio == 0.9

    def test_zero_prior_velocity(self):
        projection = project_trend(series(0.7, 0.7, 0.8))
        assert projection.acceleration is None

    def test_non_positive_velocity(self):
        assert project_trend(series(0.8, 0.7)).periods_to_target is None
        assert project_trend(series(0.7, 0.7)).periods_to_target is None

    def test_custom_target(self):
        projection = project_trend(series(0.4, 0.5), target_ratio=0.75)
        assert projection.periods_to_target == 3


class TestBuildTrendSeries:
    def test_actual_only_without_projection(self):
        df = build_trend_series(series(0.5, 0.6, missing=[50, 40]))
        assert df["period"].tolist() == ["SEP", "OCT"]
        assert not df["is_projection"].any()

    def test_projected_rows(self):
        snapshots = series(0.5, 0.6, missing=[50, 40])
        df = build_trend_series(snapshots, project_trend(snapshots))
        assert df["period"].tolist() == ["SEP", "OCT", "NOV", "DEC"]
        assert df["completion_pct"].tolist() == [50.0, 60.0, 70.0, 80.0]
        assert df["missing"].tolist() == [50, 40, 36, 32]
        assert df["is_projection"].tolist() == [False, False, True, True]

    def test_projection_capped_and_labels_run_out(self):
        snapshots = [
            make_snapshot(code="JAN", ratio=0.8, missing=10, order=5),
            make_snapshot(code="FEB", ratio=0.95, missing=5, order=6),
        ]
        df = build_trend_series(snapshots, project_trend(snapshots))
        assert df["period"].tolist() == ["JAN", "FEB", "+1", "+2"]
        assert df["completion_pct"].tolist()[-2:] == [100.0, 100.0]
