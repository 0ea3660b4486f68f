"""
Extractor for the period workbook sheets.

Sheets: Indicators, MISSING, Duplicate_Detail (names configurable).

Indicators and MISSING carry a title row above the real header, so the
header sits on row index 1 (0-based). Duplicate_Detail is only counted.
"""

import logging
from collections.abc import Sequence
from typing import Any

from ..config import (
    DEFAULT_CONFIG,
    NEW_PROJECTS_PATTERN,
    TOTAL_PATTERN,
    DashboardConfig,
)
from ..models import IndicatorSheet, MissingContractRecord, UnitIndicator, WorkbookData
from .utils import (
    clean_text,
    contains_pattern,
    format_cell_date,
    is_blank,
    is_blank_row,
    parse_count,
    parse_number,
    parse_percentage,
)

logger = logging.getLogger(__name__)


def sheet_to_records(
    rows: Sequence[Sequence[Any]] | None,
    header_row: int = 0,
) -> list[dict[str, Any]]:
    """Convert raw sheet rows into header-keyed dicts.

    Assumptions
    -----------
    - Column names come from rows[header_row]; columns with an empty
      header are left out of every record.
    - Rows below the header that are entirely empty are skipped.
    - Cells past the header width are ignored; short rows are padded
      with None.

    Returns an empty list when the sheet or its header row is absent.
    """
    if not rows or len(rows) <= header_row:
        return []

    header = rows[header_row] or ()
    columns = [
        (idx, str(name).strip())
        for idx, name in enumerate(header)
        if not is_blank(name)
    ]

    records = []
    for row in rows[header_row + 1:]:
        if is_blank_row(row):
            continue
        record = {}
        for idx, name in columns:
            record[name] = row[idx] if idx < len(row) else None
        records.append(record)

    return records


def _sheet_records(
    workbook: WorkbookData, key: str, config: DashboardConfig
) -> list[dict[str, Any]]:
    sheet_name = config.sheet_names[key]
    rows = workbook.rows(sheet_name)
    if not rows:
        logger.warning("Sheet '%s' is empty or not found", sheet_name)
        return []
    return sheet_to_records(rows, header_row=config.header_row)


def _to_indicator(record: dict[str, Any], unit: str, cols: dict[str, str]) -> UnitIndicator:
    return UnitIndicator(
        unit=unit,
        expected_registry=parse_number(record.get(cols["expected_registry"])),
        expected_field=parse_number(record.get(cols["expected_field"])),
        captured=parse_count(record.get(cols["captured"])),
        missing=parse_count(record.get(cols["missing"])),
        completion_ratio=parse_percentage(record.get(cols["percentage"])),
    )


def extract_unit_indicators(
    workbook: WorkbookData,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> IndicatorSheet:
    """Extract per-unit indicators and the TOTAL aggregate row.

    The last row whose unit name contains "TOTAL" becomes the aggregate;
    exports list subtotals above the grand total, so a later TOTAL-like
    row replaces an earlier one. The first row whose unit contains
    "NEW PROJECTS" is held in the new_projects slot; further matches stay
    in the per-unit list.
    """
    cols = config.indicator_columns
    units: list[UnitIndicator] = []
    total = None
    new_projects = None

    for record in _sheet_records(workbook, "indicators", config):
        unit = clean_text(record.get(cols["unit"]))
        if not unit:
            continue

        indicator = _to_indicator(record, unit, cols)

        if contains_pattern(unit, TOTAL_PATTERN):
            if total is not None:
                logger.warning(
                    "Aggregate row '%s' replaced by '%s'", total.unit, unit
                )
            total = indicator
        elif contains_pattern(unit, NEW_PROJECTS_PATTERN) and new_projects is None:
            new_projects = indicator
        else:
            units.append(indicator)

    if total is None:
        logger.warning("No TOTAL row found in indicator sheet")

    logger.info("Extracted %d unit indicators", len(units))
    return IndicatorSheet(units=units, total=total, new_projects=new_projects)


def extract_missing_contracts(
    workbook: WorkbookData,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> list[MissingContractRecord]:
    """Extract contracts not yet captured in the registry.

    Rows without a contractor name are incomplete and dropped.
    """
    cols = config.missing_columns
    contracts = []

    for record in _sheet_records(workbook, "missing", config):
        contractor = record.get(cols["contractor"])
        if is_blank(contractor):
            continue

        contracts.append(MissingContractRecord(
            sequence=record.get(cols["sequence"]),
            period=record.get(cols["period"]),
            organization=record.get(cols["organization"]),
            unit=clean_text(record.get(cols["unit"])),
            contractor=str(contractor).strip(),
            tax_id=record.get(cols["tax_id"]),
            contract_number=record.get(cols["contract_number"]),
            headcount=parse_count(record.get(cols["headcount"])),
            start_date=format_cell_date(record.get(cols["start_date"])),
            end_date=format_cell_date(record.get(cols["end_date"])),
        ))

    logger.info("Extracted %d missing contracts", len(contracts))
    return contracts


def count_duplicates(
    workbook: WorkbookData,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> int:
    """Raw row count of the duplicates sheet minus its header rows.

    A coarse proxy: rows are counted, not parsed.
    """
    rows = workbook.rows(config.sheet_names["duplicates"])
    if not rows:
        return 0
    return max(0, len(rows) - config.duplicate_header_rows)


def synthesize_new_projects(
    indicators: IndicatorSheet,
    missing: list[MissingContractRecord],
) -> IndicatorSheet:
    """Ensure a new-projects indicator exists when missing records need one.

    New projects are not listed in the indicator sheet until they are
    registered, so when only the MISSING sheet mentions them a zeroed
    indicator named after the first such unit is created.
    """
    if indicators.new_projects is not None:
        return indicators

    for record in missing:
        if contains_pattern(record.unit, NEW_PROJECTS_PATTERN):
            return IndicatorSheet(
                units=indicators.units,
                total=indicators.total,
                new_projects=UnitIndicator(unit=record.unit),
            )
    return indicators


def extract_period(
    workbook: WorkbookData,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> tuple[IndicatorSheet, list[MissingContractRecord], int]:
    """Run every extraction for one period workbook."""
    indicators = extract_unit_indicators(workbook, config)
    missing = extract_missing_contracts(workbook, config)
    duplicates = count_duplicates(workbook, config)
    indicators = synthesize_new_projects(indicators, missing)
    return indicators, missing, duplicates
