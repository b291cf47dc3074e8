"""
Loader for the QA build-history export (builds and runs from Bamboo).

Structure:
    A free-text banner may precede the header row. The header row is found
    by matching known column names. Each data row is one completed build.
    Completion dates may be datetimes, date strings or Excel serial numbers.
"""

import logging

import openpyxl
import pandas as pd

from ..config import BUILDS_DATE_COLUMN, BUILDS_VALUE_COLUMN
from .utils import cell_to_timestamp, clean_label, find_header_row, safe_float

logger = logging.getLogger(__name__)

BUILD_HISTORY_COLUMNS = [
    BUILDS_DATE_COLUMN,
    BUILDS_VALUE_COLUMN,
    "PLAN_NAME",
    "AGENT_TYPE",
    "CYCLE",
]

_HEADER_SIGNATURE = set(BUILD_HISTORY_COLUMNS)
_LABEL_COLUMNS = ["PLAN_NAME", "AGENT_TYPE", "CYCLE"]


def load_build_history(path: str, sheet_name: str | None = None) -> pd.DataFrame:
    """Load completed builds from an Excel export.

    Assumptions
    -----------
    - The header row lies within the first 20 rows and names at least two
      of BUILD_HISTORY_COLUMNS (case-insensitive).
    - Rows without a parseable completion date are dropped.
    - Columns missing from the sheet are added as empty.

    Parameters
    ----------
    path : Path to the Excel file.
    sheet_name : Sheet to read. Defaults to the first sheet.

    Returns
    -------
    DataFrame with columns BUILD_HISTORY_COLUMNS.
    """
    try:
        wb = openpyxl.load_workbook(path, data_only=True, read_only=False)
    except Exception:
        logger.exception("Failed to open build history file: %s", path)
        raise

    try:
        if sheet_name is None or sheet_name not in wb.sheetnames:
            if sheet_name is not None:
                logger.warning("Sheet '%s' not found, using '%s'", sheet_name, wb.sheetnames[0])
            sheet_name = wb.sheetnames[0]

        ws = wb[sheet_name]

        header_row = find_header_row(ws, _HEADER_SIGNATURE)
        if header_row is None:
            raise ValueError(f"No build history header found in {path} [{sheet_name}]")

        col_map: dict[int, str] = {}
        for cell in ws[header_row]:
            if cell.value is None:
                continue
            name = str(cell.value).strip().upper()
            if name in _HEADER_SIGNATURE:
                col_map[cell.column] = name

        records = []
        skipped = 0
        for row in ws.iter_rows(min_row=header_row + 1, values_only=True):
            values = {name: row[col - 1] for col, name in col_map.items() if col - 1 < len(row)}
            completed = cell_to_timestamp(values.get(BUILDS_DATE_COLUMN))
            if completed is None:
                skipped += 1
                continue

            record = {
                BUILDS_DATE_COLUMN: completed,
                BUILDS_VALUE_COLUMN: safe_float(values.get(BUILDS_VALUE_COLUMN)),
            }
            for label in _LABEL_COLUMNS:
                record[label] = clean_label(values.get(label))
            records.append(record)
    finally:
        wb.close()

    df = pd.DataFrame(records, columns=BUILD_HISTORY_COLUMNS)
    df[BUILDS_DATE_COLUMN] = pd.to_datetime(df[BUILDS_DATE_COLUMN])
    df[BUILDS_VALUE_COLUMN] = pd.to_numeric(df[BUILDS_VALUE_COLUMN], errors="coerce")
    # Missing labels stay None regardless of the pandas string dtype default
    for label in _LABEL_COLUMNS:
        values = df[label].astype(object)
        df[label] = values.where(values.notna(), None)

    if skipped:
        logger.warning("Skipped %d rows without a completion date in %s", skipped, path)
    logger.info("Loaded %d builds from %s [%s]", len(df), path, sheet_name)
    return df
