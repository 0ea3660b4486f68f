"""
Shared utilities for data ingestion: numeric coercion, percentage
normalisation, spreadsheet date formatting, blank-row detection.

Parse failures never raise. Numbers that cannot be read become 0; this
is the documented lossy policy for the dashboard's source sheets.
"""

import logging
import math
from datetime import date, datetime
from typing import Any

import pandas as pd

from ..config import EXCEL_EPOCH_OFFSET_DAYS, SECONDS_PER_DAY

logger = logging.getLogger(__name__)


def is_blank(val: Any) -> bool:
    """True for None and for strings that are empty after stripping."""
    if val is None:
        return True
    if isinstance(val, str):
        return not val.strip()
    return False


def is_blank_row(row) -> bool:
    if not row:
        return True
    return all(is_blank(cell) for cell in row)


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values.

    Handles percentage strings like "78%" by dropping the sign. Formula
    strings, NaN and infinities are treated as non-numeric.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip()
        if val.startswith("=") or not val:
            return None
        if val.endswith("%"):
            val = val[:-1].strip()
        try:
            num = float(val)
        except ValueError:
            return None
    else:
        try:
            num = float(val)
        except (ValueError, TypeError):
            return None
    if not math.isfinite(num):
        return None
    return num


def parse_number(val: Any) -> float:
    """Numeric policy: null, empty or unparseable -> 0."""
    num = safe_float(val)
    return 0.0 if num is None else num


def parse_count(val: Any) -> int:
    """Non-negative integer count; unparseable -> 0.

    Fractional cells round half up (2.5 -> 3), not to the nearest even.
    """
    num = parse_number(val)
    if num <= 0:
        return 0
    return int(math.floor(num + 0.5))


def parse_percentage(val: Any) -> float:
    """Normalise a percentage to a 0-1 fraction.

    Values <= 1 are taken as fractions already (0.86 -> 0.86, 1 -> 1.0),
    values > 1 as whole-number percents (86 -> 0.86). A literal 1 therefore
    means 100%, never 1%.
    """
    num = safe_float(val)
    if num is None:
        return 0.0
    if num > 1:
        num = num / 100.0
    return min(1.0, max(0.0, num))


def format_date(ts: pd.Timestamp | datetime | date) -> str:
    """Render day/month/year without zero padding (e.g. 1/9/2025)."""
    return f"{ts.day}/{ts.month}/{ts.year}"


def serial_to_timestamp(serial: float) -> pd.Timestamp | None:
    """Convert a spreadsheet serial-day number to a UTC timestamp."""
    seconds = (serial - EXCEL_EPOCH_OFFSET_DAYS) * SECONDS_PER_DAY
    try:
        return pd.Timestamp(seconds, unit="s", tz="UTC")
    except (ValueError, OverflowError):
        logger.warning("Could not convert serial number %s to date", serial)
        return None


def format_cell_date(val: Any) -> str | None:
    """Date policy for contract start/end cells.

    Numbers are spreadsheet serial days, datetimes are formatted directly,
    anything else is passed through as a string. Null yields None.
    """
    if is_blank(val):
        return None
    if isinstance(val, (datetime, date)):
        return format_date(val)
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        if not math.isfinite(val):
            return None
        ts = serial_to_timestamp(val)
        if ts is None:
            return str(val)
        return format_date(ts)
    return str(val)


def clean_text(val: Any) -> str | None:
    """Strip strings; blank -> None; other values converted with str()."""
    if is_blank(val):
        return None
    return str(val).strip()


def contains_pattern(text: str | None, pattern: str) -> bool:
    """Case-insensitive substring test."""
    if not text:
        return False
    return pattern.upper() in str(text).upper()
