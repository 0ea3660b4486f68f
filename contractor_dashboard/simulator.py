"""
Simulated period workbooks for the contractor registration dashboard.

Generates realistic indicator, MISSING and duplicate sheets for a run of
periods where capture improves over time. All values are synthetic.
"""

from pathlib import Path

import numpy as np
import openpyxl

from .config import DEFAULT_CONFIG, DashboardConfig
from .models import PeriodSource, WorkbookData
from .loaders.workbook import workbook_from_rows

# ---------------------------------------------------------------------------
# Typical unit parameters
# ---------------------------------------------------------------------------
# (unit, field-side contracts, starting completion ratio)
_UNITS = [
    ("NORTH MINE", 140, 0.62),
    ("SOUTH MINE", 95, 0.81),
    ("SMELTER", 60, 0.95),
    ("REFINERY", 48, 1.00),
    ("RAIL TERMINAL", 35, 0.55),
    ("PORT OPERATIONS", 80, 0.70),
    ("EXPLORATION", 22, 0.40),
    ("CORPORATE", 18, 1.00),
]

_NEW_PROJECTS_UNIT = "NEW PROJECTS"

_COMPANIES = ["Mining Co", "Metals Co", "Infrastructure Co"]

_CONTRACTORS = [
    "Apex Services", "Borealis Drilling", "Cobalt Logistics", "Delta Welding",
    "Everest Catering", "Frontier Security", "Granite Haulage", "Helix Electric",
]

# First start date of generated contracts (spreadsheet serial day, 2025-01-01)
_BASE_SERIAL = 45658


def _rng(seed: int) -> np.random.Generator:
    return np.random.default_rng(seed)


def generate_period_rows(
    period_index: int,
    period_code: str = "SEP",
    seed: int = 42,
    new_projects: int = 3,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> dict[str, list[list]]:
    """Generate raw sheet rows for one period.

    Completion improves with period_index. Returns sheet name -> rows, in
    the layout the extractor expects (title row, header row, data).
    """
    rng = _rng(seed + period_index)
    icols = config.indicator_columns
    mcols = config.missing_columns

    indicator_header = [
        icols["unit"], icols["expected_registry"], icols["expected_field"],
        icols["captured"], icols["missing"], icols["percentage"],
    ]
    missing_header = [mcols[k] for k in (
        "sequence", "period", "organization", "unit", "contractor", "tax_id",
        "contract_number", "headcount", "start_date", "end_date",
    )]

    indicator_rows = [["Registration indicators"], indicator_header]
    missing_rows = [["Contracts missing from registry"], missing_header]
    totals = np.zeros(4)
    sequence = 1

    for unit, field_total, start_ratio in _UNITS:
        gain = period_index * float(rng.uniform(0.02, 0.08))
        ratio = min(1.0, start_ratio + gain)
        captured = int(round(field_total * ratio))
        missing = field_total - captured
        registry_total = captured + int(rng.integers(0, 3))

        # percentages come as fractions in most periods, whole numbers in some
        pct = round(ratio * 100, 1) if period_index % 2 else round(ratio, 4)
        indicator_rows.append([unit, registry_total, field_total, captured, missing, pct])
        totals += [registry_total, field_total, captured, missing]

        for _ in range(missing):
            missing_rows.append(_contract_row(rng, sequence, period_code, unit))
            sequence += 1

    for _ in range(new_projects):
        missing_rows.append(_contract_row(rng, sequence, period_code, _NEW_PROJECTS_UNIT))
        sequence += 1

    registry, field_total, captured, missing = (int(v) for v in totals)
    total_ratio = round(captured / field_total, 4) if field_total else 0
    indicator_rows.append(["TOTAL GENERAL", registry, field_total, captured, missing, total_ratio])

    duplicates = int(rng.integers(0, 12))
    duplicate_rows = [["Duplicates detected"], ["Contractor", "Contract Number", "Count"]]
    for i in range(duplicates):
        duplicate_rows.append([str(rng.choice(_CONTRACTORS)), f"DUP-{i:04d}", 2])

    return {
        config.sheet_names["indicators"]: indicator_rows,
        config.sheet_names["missing"]: missing_rows,
        config.sheet_names["duplicates"]: duplicate_rows,
    }


def _contract_row(rng: np.random.Generator, sequence: int, period_code: str, unit: str) -> list:
    start = _BASE_SERIAL + int(rng.integers(0, 300))
    return [
        sequence,
        period_code,
        str(rng.choice(_COMPANIES)),
        unit,
        str(rng.choice(_CONTRACTORS)),
        f"RFC{int(rng.integers(100000, 999999))}",
        f"CT-{sequence:05d}",
        int(rng.integers(1, 60)),
        start,
        start + int(rng.integers(30, 365)),
    ]


def generate_workbook(
    period_index: int,
    period_code: str = "SEP",
    seed: int = 42,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> WorkbookData:
    """In-memory WorkbookData for one simulated period."""
    return workbook_from_rows(
        generate_period_rows(period_index, period_code, seed, config=config)
    )


def write_workbook(path: str | Path, sheets: dict[str, list[list]]) -> Path:
    """Write sheet rows to an .xlsx file with openpyxl."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for sheet_name, rows in sheets.items():
        ws = wb.create_sheet(title=sheet_name)
        for row in rows:
            ws.append(row)
    wb.save(path)
    wb.close()
    return path


def write_simulated_periods(
    directory: str | Path,
    n_periods: int = 3,
    seed: int = 42,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> list[PeriodSource]:
    """Write one simulated workbook per configured period into directory.

    Returns the PeriodSource list for the written files, oldest first.
    """
    directory = Path(directory)
    sources = []
    periods = sorted(config.periods, key=lambda p: p["order"])[:n_periods]
    for idx, period in enumerate(periods):
        rows = generate_period_rows(idx, period["code"], seed, config=config)
        path = write_workbook(directory / period["file"], rows)
        sources.append(PeriodSource(
            code=period["code"],
            name=period["name"],
            file=period["file"],
            order=period["order"],
            path=path,
        ))
    return sources
