"""Shared builders for workbook rows and processed periods."""

import pytest

from contractor_dashboard.config import DEFAULT_CONFIG
from contractor_dashboard.loaders import workbook_from_rows
from contractor_dashboard.models import IndicatorSheet, PeriodSource, UnitIndicator
from contractor_dashboard.processor import process_period

INDICATOR_HEADER = [
    "Unit", "Total Registry Contracts", "Total Field Contracts",
    "Captured", "Missing", "% Captured",
]

MISSING_HEADER = [
    "Sequence", "Month", "Company", "Standardized Unit", "Contractor", "Tax ID",
    "Contract Number", "Total Headcount", "Start Date", "End Date",
]


def indicator_rows(*rows):
    return [["Registration indicators"], INDICATOR_HEADER, *rows]


def missing_rows(*rows):
    return [["Contracts missing from registry"], MISSING_HEADER, *rows]


def missing_row(seq, unit, contractor="Apex Services", headcount=5, start=45901, end="31/12/2025"):
    return [seq, "SEP", "Mining Co", unit, contractor, f"RFC{seq}", f"CT-{seq}", headcount, start, end]


def make_workbook(indicators=None, missing=None, duplicates=None):
    sheets = {}
    if indicators is not None:
        sheets["Indicators"] = indicators
    if missing is not None:
        sheets["MISSING"] = missing
    if duplicates is not None:
        sheets["Duplicate_Detail"] = duplicates
    return workbook_from_rows(sheets)


def make_snapshot(
    code="SEP",
    ratio=0.0,
    registry=0,
    field=0,
    captured=0,
    missing=0,
    units=(),
    records=(),
    with_total=True,
    order=1,
    config=DEFAULT_CONFIG,
):
    total = None
    if with_total:
        total = UnitIndicator(
            unit="TOTAL GENERAL",
            expected_registry=registry,
            expected_field=field,
            captured=captured,
            missing=missing,
            completion_ratio=ratio,
        )
    sheet = IndicatorSheet(units=list(units), total=total)
    source = PeriodSource(code=code, name=code, file=f"{code}.xlsx", order=order)
    return process_period(sheet, list(records), 0, source, config)


def unit(name, ratio, missing=0, captured=0, field=0, registry=0):
    return UnitIndicator(
        unit=name,
        expected_registry=registry,
        expected_field=field,
        captured=captured,
        missing=missing,
        completion_ratio=ratio,
    )


@pytest.fixture
def sample_workbook():
    return make_workbook(
        indicators=indicator_rows(
            ["NORTH MINE", 100, 120, 90, 30, 0.75],
            ["SOUTH MINE", 50, 50, 50, 0, 1],
            ["SMELTER", 40, 60, 30, 30, 50],
            [None, None, None, None, None, None],
            ["TOTAL GENERAL", 190, 230, 170, 60, "73.9%"],
        ),
        missing=missing_rows(
            missing_row(1, "NORTH MINE"),
            missing_row(2, "SMELTER"),
            missing_row(3, "NORTH MINE", contractor=None),
            missing_row(4, None),
        ),
        duplicates=[["Duplicates detected"], ["Contractor", "Count"], ["A", 2], ["B", 2]],
    )
