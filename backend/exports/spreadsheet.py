"""
Spreadsheet serialization for employee exports.
"""

import logging
import os
import tempfile
import time
from contextlib import contextmanager
from typing import Iterator, Optional

import pandas as pd

from .rows import collect_headers

logger = logging.getLogger(__name__)

EXPORT_SHEET_NAME = "Employees"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def export_file_name() -> str:
    # Nanosecond timestamp keeps concurrent exports from colliding
    return f"employees_export_{time.time_ns()}.xlsx"


@contextmanager
def temporary_export_file(directory: Optional[str] = None) -> Iterator[str]:
    """
    Reserve a uniquely named temporary .xlsx path.

    The file is removed when the block exits, whether it succeeded or raised.
    """
    path = os.path.join(directory or tempfile.gettempdir(), export_file_name())
    try:
        yield path
    finally:
        if os.path.exists(path):
            try:
                os.remove(path)
                logger.debug(f"Removed temporary export file {path}")
            except OSError as e:
                logger.warning(f"Could not remove temporary export file {path}: {e}")


def write_employee_workbook(rows: list[dict], path: str) -> int:
    """
    Write rows to a workbook with a single "Employees" sheet.

    Returns:
        Number of data rows written
    """
    df = pd.DataFrame(rows, columns=collect_headers(rows))
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=EXPORT_SHEET_NAME)
    return len(df)
