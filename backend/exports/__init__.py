"""
Employee spreadsheet exports.
"""

from .pipeline import ExportJobPipeline, UNKNOWN_EXPORT_ERROR
from .rows import flatten_employee, collect_headers
from .spreadsheet import EXPORT_SHEET_NAME, XLSX_CONTENT_TYPE

__all__ = [
    "ExportJobPipeline",
    "UNKNOWN_EXPORT_ERROR",
    "flatten_employee",
    "collect_headers",
    "EXPORT_SHEET_NAME",
    "XLSX_CONTENT_TYPE",
]
