"""
Pipeline orchestration: load every period workbook, process each one
independently, return the snapshots ordered oldest first.
"""

import logging

from .config import DEFAULT_CONFIG, DashboardConfig
from .loaders import WorkbookLoader, extract_period
from .models import PeriodSnapshot, PeriodSource, WorkbookData
from .processor import format_ratio, process_period

logger = logging.getLogger(__name__)


def process_workbook(
    workbook: WorkbookData,
    source: PeriodSource,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> PeriodSnapshot:
    """Extract and process one already-loaded workbook."""
    indicators, missing, duplicates = extract_period(workbook, config)
    return process_period(indicators, missing, duplicates, source, config)


def load_period(
    loader: WorkbookLoader,
    source: PeriodSource,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> PeriodSnapshot:
    path = source.path or config.data_dir / source.file
    workbook = loader.load(path)
    return process_workbook(workbook, source, config)


def load_all_periods(
    loader: WorkbookLoader,
    sources: list[PeriodSource],
    config: DashboardConfig = DEFAULT_CONFIG,
) -> list[PeriodSnapshot]:
    """Load and process every period; a period that fails is skipped.

    Returns snapshots ordered by PeriodSource.order.
    """
    snapshots = []
    for source in sorted(sources, key=lambda s: s.order):
        try:
            snapshot = load_period(loader, source, config)
        except Exception:
            logger.exception("Could not load period %s", source.code)
            continue
        snapshots.append(snapshot)
        logger.info(
            "%s: %s captured", source.code, format_ratio(snapshot.completion_ratio)
        )

    logger.info("Loaded %d of %d periods", len(snapshots), len(sources))
    return snapshots
