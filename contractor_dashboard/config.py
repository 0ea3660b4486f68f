"""
Configuration: sheet names, column aliases, thresholds, period calendar.

The module-level constants are the defaults. Every extraction, processing
and trend function takes an explicit DashboardConfig so alternate sheet
layouts or thresholds can be used without touching shared state.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path

# ---------------------------------------------------------------------------
# File paths: adjust these if source files move
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent / "data"

# ---------------------------------------------------------------------------
# Project identity
# ---------------------------------------------------------------------------
PROJECT_NAME = "Contractor Registration Dashboard"

# ---------------------------------------------------------------------------
# Period calendar
# ---------------------------------------------------------------------------
# code: short label used in tabs and charts
# name: display name
# file: workbook file name under DATA_DIR
# order: chronological position
PERIOD_FILES: list[dict] = [
    {"code": "SEP", "name": "SEPTEMBER", "file": "SEPTEMBER_2025.xlsx", "order": 1},
    {"code": "OCT", "name": "OCTOBER", "file": "OCTOBER_2025.xlsx", "order": 2},
    {"code": "NOV", "name": "NOVEMBER", "file": "NOVEMBER_2025.xlsx", "order": 3},
    {"code": "DEC", "name": "DECEMBER", "file": "DECEMBER_2025.xlsx", "order": 4},
    {"code": "JAN", "name": "JANUARY", "file": "JANUARY_2026.xlsx", "order": 5},
    {"code": "FEB", "name": "FEBRUARY", "file": "FEBRUARY_2026.xlsx", "order": 6},
]

# ---------------------------------------------------------------------------
# Source sheets
# ---------------------------------------------------------------------------
SHEET_NAMES: dict[str, str] = {
    "indicators": "Indicators",
    "missing": "MISSING",
    "duplicates": "Duplicate_Detail",
}

# Indicator sheet: field -> column header
INDICATOR_COLUMNS: dict[str, str] = {
    "unit": "Unit",
    "expected_registry": "Total Registry Contracts",
    "expected_field": "Total Field Contracts",
    "captured": "Captured",
    "missing": "Missing",
    "percentage": "% Captured",
}

# Missing-records sheet: field -> column header
MISSING_COLUMNS: dict[str, str] = {
    "sequence": "Sequence",
    "period": "Month",
    "organization": "Company",
    "unit": "Standardized Unit",
    "contractor": "Contractor",
    "tax_id": "Tax ID",
    "contract_number": "Contract Number",
    "headcount": "Total Headcount",
    "start_date": "Start Date",
    "end_date": "End Date",
}

# Both the indicator and missing sheets carry a title row above the header
HEADER_ROW = 1

# The duplicates detail sheet has two header rows
DUPLICATE_HEADER_ROWS = 2

# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------
# excellent: at-target cutoff (1.0 == 100%)
# in_progress: lower bound (inclusive) of the in-progress tier;
#              anything below is critical
THRESHOLDS: dict[str, float] = {
    "excellent": 1.0,
    "in_progress": 0.70,
}

# Tolerance for float equality against the excellent cutoff
EXCELLENT_TOLERANCE = 0.0001

# Goal used for periods-to-target projections
TARGET_RATIO = 0.90

# Noise filter for per-unit evolution (fraction, i.e. 1 percentage point)
EVOLUTION_NOISE = 0.01
EVOLUTION_TOP_IMPROVEMENTS = 5

CONCENTRATION_TOP_N = 4

# ---------------------------------------------------------------------------
# Name patterns (matched case-insensitively as substrings)
# ---------------------------------------------------------------------------
TOTAL_PATTERN = "TOTAL"
NEW_PROJECTS_PATTERN = "NEW PROJECTS"
UNASSIGNED_UNIT = "UNASSIGNED"

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
# Days between the spreadsheet serial-day origin and 1970-01-01
EXCEL_EPOCH_OFFSET_DAYS = 25569
SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class DashboardConfig:
    """Explicit configuration passed into every pipeline operation."""

    sheet_names: dict[str, str] = field(default_factory=lambda: dict(SHEET_NAMES))
    indicator_columns: dict[str, str] = field(
        default_factory=lambda: dict(INDICATOR_COLUMNS)
    )
    missing_columns: dict[str, str] = field(default_factory=lambda: dict(MISSING_COLUMNS))
    excellent_threshold: float = THRESHOLDS["excellent"]
    in_progress_threshold: float = THRESHOLDS["in_progress"]
    target_ratio: float = TARGET_RATIO
    header_row: int = HEADER_ROW
    duplicate_header_rows: int = DUPLICATE_HEADER_ROWS
    concentration_top_n: int = CONCENTRATION_TOP_N
    periods: list[dict] = field(default_factory=lambda: [dict(p) for p in PERIOD_FILES])
    data_dir: Path = DATA_DIR

    def with_overrides(self, **changes) -> "DashboardConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


DEFAULT_CONFIG = DashboardConfig()
