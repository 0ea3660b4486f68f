"""
Fixed-schema record types shared by the extractor, processor and trend
analyzer. All records are frozen; a processed period is never mutated.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

AT_TARGET = "at_target"
IN_PROGRESS = "in_progress"
CRITICAL = "critical"


@dataclass(frozen=True)
class WorkbookData:
    """Raw workbook as handed over by the loader.

    sheets maps sheet name -> ordered rows; each row is an ordered sequence
    of cell values (number, string or None).
    """

    sheets: dict[str, list[tuple]]
    sheet_names: list[str]

    def rows(self, sheet_name: str) -> list[tuple] | None:
        return self.sheets.get(sheet_name)


@dataclass(frozen=True)
class PeriodSource:
    """Static metadata for one reporting period."""

    code: str
    name: str
    file: str
    order: int
    path: Path | None = None


@dataclass(frozen=True)
class UnitIndicator:
    unit: str
    expected_registry: float = 0.0
    expected_field: float = 0.0
    captured: int = 0
    missing: int = 0
    completion_ratio: float = 0.0


@dataclass(frozen=True)
class ClassifiedUnit(UnitIndicator):
    tier: str = CRITICAL
    percentage_label: str = "0.0%"


@dataclass(frozen=True)
class IndicatorSheet:
    """Indicator sheet split into per-unit rows and the special slots."""

    units: list[UnitIndicator] = field(default_factory=list)
    total: UnitIndicator | None = None
    new_projects: UnitIndicator | None = None


@dataclass(frozen=True)
class MissingContractRecord:
    sequence: Any = None
    period: Any = None
    organization: Any = None
    unit: str | None = None
    contractor: str | None = None
    tax_id: Any = None
    contract_number: Any = None
    headcount: int = 0
    start_date: str | None = None
    end_date: str | None = None


@dataclass(frozen=True)
class ConcentrationSummary:
    top_units: tuple[ClassifiedUnit, ...] = ()
    top_missing: int = 0
    share_pct: float = 0.0


@dataclass(frozen=True)
class Classification:
    at_target: tuple[ClassifiedUnit, ...] = ()
    in_progress: tuple[ClassifiedUnit, ...] = ()
    critical: tuple[ClassifiedUnit, ...] = ()


@dataclass(frozen=True)
class PeriodSnapshot:
    """Complete processed state of one reporting period.

    Totals come from the workbook's own TOTAL row. has_totals is False when
    that row was absent, in which case every total is a placeholder zero.
    """

    code: str
    name: str
    source: str | None
    completion_ratio: float
    total_registry_expected: float
    total_field_expected: float
    total_captured: int
    total_missing: int
    at_target: tuple[ClassifiedUnit, ...]
    in_progress: tuple[ClassifiedUnit, ...]
    critical: tuple[ClassifiedUnit, ...]
    missing_records: tuple[MissingContractRecord, ...]
    missing_by_unit: dict[str, tuple[MissingContractRecord, ...]]
    duplicate_count: int
    concentration: ConcentrationSummary
    units: tuple[UnitIndicator, ...]
    new_projects: UnitIndicator | None = None
    has_totals: bool = True

    @property
    def at_target_count(self) -> int:
        return len(self.at_target)

    @property
    def in_progress_count(self) -> int:
        return len(self.in_progress)

    @property
    def critical_count(self) -> int:
        return len(self.critical)

    @property
    def total_units(self) -> int:
        return len(self.units)


@dataclass(frozen=True)
class TrendComparison:
    ratio_delta: float = 0.0
    missing_delta: int = 0
    registry_delta: float = 0.0
    at_target_delta: int = 0
    incorporated: float = 0.0


@dataclass(frozen=True)
class EvolutionEntry:
    unit: str
    before: float
    after: float
    delta: float
    delta_label: str
    missing: int = 0


@dataclass(frozen=True)
class EvolutionResult:
    improvements: tuple[EvolutionEntry, ...] = ()
    regressions: tuple[EvolutionEntry, ...] = ()


@dataclass(frozen=True)
class Projection:
    next_ratio: float
    velocity: float
    acceleration: float | None
    periods_to_target: int | None
    target_ratio: float
