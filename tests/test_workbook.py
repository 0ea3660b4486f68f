"""Workbook loading with openpyxl, the loader cache and period discovery."""

from datetime import datetime

import openpyxl
import pytest

from contractor_dashboard.config import DEFAULT_CONFIG
from contractor_dashboard.loaders import (
    WorkbookLoader,
    discover_periods,
    extract_missing_contracts,
    extract_unit_indicators,
)
from contractor_dashboard.simulator import generate_period_rows, write_workbook


@pytest.fixture
def workbook_path(tmp_path):
    return write_workbook(tmp_path / "SEPTEMBER_2025.xlsx", generate_period_rows(0, "SEP"))


class TestWorkbookLoader:
    def test_reads_all_sheets(self, workbook_path):
        data = WorkbookLoader().load(workbook_path)
        assert data.sheet_names == ["Indicators", "MISSING", "Duplicate_Detail"]
        assert data.rows("Indicators")[1][0] == "Unit"

    def test_extraction_from_file(self, workbook_path):
        data = WorkbookLoader().load(workbook_path)
        sheet = extract_unit_indicators(data)
        assert sheet.total is not None
        assert len(sheet.units) == 8
        assert sheet.total.missing == sum(u.missing for u in sheet.units)

    def test_datetime_cells_become_serials(self, tmp_path):
        path = tmp_path / "dates.xlsx"
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "MISSING"
        ws.append(["title"])
        ws.append(["Contractor", "Start Date"])
        ws.append(["Apex", datetime(2025, 9, 1)])
        wb.save(path)

        data = WorkbookLoader().load(path)
        assert data.rows("MISSING")[2][1] == pytest.approx(45901)
        records = extract_missing_contracts(data)
        assert records[0].start_date == "1/9/2025"

    def test_cache_and_invalidate(self, workbook_path):
        loader = WorkbookLoader()
        first = loader.load(workbook_path)
        assert loader.is_cached(workbook_path)
        assert loader.load(workbook_path) is first

        loader.invalidate(workbook_path)
        assert not loader.is_cached(workbook_path)
        assert loader.load(workbook_path) is not first

        loader.invalidate()
        assert not loader.is_cached(workbook_path)

    def test_unreadable_file_raises(self, tmp_path):
        bad = tmp_path / "broken.xlsx"
        bad.write_bytes(b"not a workbook")
        with pytest.raises(Exception):
            WorkbookLoader().load(bad)


class TestDiscoverPeriods:
    def test_only_existing_files_in_order(self, tmp_path):
        for name in ["NOVEMBER_2025.xlsx", "SEPTEMBER_2025.xlsx"]:
            write_workbook(tmp_path / name, generate_period_rows(0))
        config = DEFAULT_CONFIG.with_overrides(data_dir=tmp_path)
        periods = discover_periods(config)
        assert [p.code for p in periods] == ["SEP", "NOV"]
        assert periods[0].path == tmp_path / "SEPTEMBER_2025.xlsx"

    def test_empty_directory(self, tmp_path):
        assert discover_periods(DEFAULT_CONFIG.with_overrides(data_dir=tmp_path)) == []
