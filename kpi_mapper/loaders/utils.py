"""
Shared utilities for spreadsheet ingestion: header detection, cell
coercion.
"""

import logging
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

EXCEL_EPOCH = "1899-12-30"


def cell_to_timestamp(val: Any) -> pd.Timestamp | None:
    """Convert an Excel serial number, datetime or date string to pd.Timestamp.

    Excel serial numbers use the 1899-12-30 epoch. Returns None for blank or
    unparseable values.
    """
    if val is None or (isinstance(val, str) and not val.strip()):
        return None
    if not isinstance(val, str) and pd.isna(val):
        return None
    if isinstance(val, pd.Timestamp):
        return val
    if isinstance(val, (int, float)):
        try:
            return pd.Timestamp(EXCEL_EPOCH) + pd.Timedelta(days=float(val))
        except (ValueError, OverflowError):
            logger.warning("Could not convert serial number %s to date", val)
            return None
    try:
        return pd.Timestamp(val)
    except (ValueError, TypeError):
        logger.warning("Could not parse date value: %s", val)
        return None


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values."""
    if val is None:
        return None
    if isinstance(val, str):
        # Skip formula strings and text labels
        val = val.strip()
        if val.startswith("=") or not val:
            return None
        try:
            return float(val)
        except ValueError:
            return None
    try:
        return float(val)
    except (ValueError, TypeError):
        return None


def clean_label(val: Any) -> str | None:
    """Strip a text cell. Blank cells become None."""
    if val is None:
        return None
    text = str(val).strip()
    return text or None


def find_header_row(
    sheet,
    signature: set[str],
    max_rows: int = 20,
) -> int | None:
    """Scan an openpyxl sheet for the row containing signature strings.

    Returns the 1-based row index where at least two cells match values
    in `signature`, or None if not found within `max_rows`.
    """
    for row_idx in range(1, max_rows + 1):
        matches = 0
        for cell in sheet[row_idx]:
            if cell.value is not None and str(cell.value).strip().upper() in signature:
                matches += 1
        if matches >= 2:
            return row_idx
    return None
