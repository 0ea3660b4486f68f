"""Data ingestion for period workbooks: loading and sheet extraction."""

from .extractor import sheet_to_records, extract_unit_indicators
from .extractor import extract_missing_contracts, count_duplicates
from .extractor import synthesize_new_projects, extract_period
from .workbook import WorkbookLoader, workbook_from_rows, discover_periods

__all__ = [
    "sheet_to_records",
    "extract_unit_indicators",
    "extract_missing_contracts",
    "count_duplicates",
    "synthesize_new_projects",
    "extract_period",
    "WorkbookLoader",
    "workbook_from_rows",
    "discover_periods",
]
