"""
Workbook loader: opens period workbooks with openpyxl and hands the raw
rows to the extractor.

Loaded workbooks are cached per resolved path. The cache belongs to the
loader instance; call invalidate() to force a re-read.
"""

import logging
from datetime import date, datetime, time
from pathlib import Path

import openpyxl
from openpyxl.utils.datetime import to_excel

from ..config import DEFAULT_CONFIG, DashboardConfig
from ..models import PeriodSource, WorkbookData

logger = logging.getLogger(__name__)


def _cell_value(val):
    """Datetimes become spreadsheet serial numbers; other values pass through."""
    if isinstance(val, (datetime, date, time)):
        return to_excel(val)
    return val


def workbook_from_rows(sheets: dict[str, list]) -> WorkbookData:
    """Build WorkbookData from in-memory rows (sheet name -> rows)."""
    return WorkbookData(
        sheets={name: [tuple(row) for row in rows] for name, rows in sheets.items()},
        sheet_names=list(sheets),
    )


class WorkbookLoader:
    """Reads .xlsx files into WorkbookData with an explicit cache."""

    def __init__(self):
        self._cache: dict[Path, WorkbookData] = {}

    def load(self, path: str | Path) -> WorkbookData:
        key = Path(path).resolve()
        if key in self._cache:
            logger.info("Using cached workbook: %s", key)
            return self._cache[key]

        try:
            wb = openpyxl.load_workbook(key, read_only=True, data_only=True)
        except Exception:
            logger.exception("Failed to open workbook: %s", key)
            raise

        try:
            sheets = {}
            for ws in wb.worksheets:
                sheets[ws.title] = [
                    tuple(_cell_value(v) for v in row)
                    for row in ws.iter_rows(values_only=True)
                ]
            sheet_names = list(wb.sheetnames)
        finally:
            wb.close()

        data = WorkbookData(sheets=sheets, sheet_names=sheet_names)
        self._cache[key] = data
        logger.info("Loaded workbook %s (%d sheets)", key, len(sheet_names))
        return data

    def invalidate(self, path: str | Path | None = None) -> None:
        """Drop one cached workbook, or all of them when path is None."""
        if path is None:
            self._cache.clear()
            logger.info("Workbook cache cleared")
            return
        self._cache.pop(Path(path).resolve(), None)

    def is_cached(self, path: str | Path) -> bool:
        return Path(path).resolve() in self._cache


def discover_periods(config: DashboardConfig = DEFAULT_CONFIG) -> list[PeriodSource]:
    """Return the configured periods whose workbook exists under data_dir."""
    available = []
    for period in config.periods:
        path = Path(config.data_dir) / period["file"]
        if path.exists():
            available.append(PeriodSource(
                code=period["code"],
                name=period["name"],
                file=period["file"],
                order=period["order"],
                path=path,
            ))
            logger.info("Found: %s", period["file"])
        else:
            logger.debug("Not found: %s", period["file"])

    available.sort(key=lambda p: p.order)
    return available
