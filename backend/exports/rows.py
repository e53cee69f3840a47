"""
Flattening employee records into spreadsheet rows.
"""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

# Bookkeeping columns that only exist to serve the app itself
INTERNAL_FIELDS = frozenset({"searchable_fields", "qr_code_data"})


def is_excluded_field(name: str) -> bool:
    """Document and photo links never leave the system; neither do internal fields."""
    return "url" in name.lower() or name in INTERNAL_FIELDS


def export_value(value):
    """Reduce a stored value to a spreadsheet cell: primitives, or YYYY-MM-DD for dates."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return value


def flatten_employee(record: dict) -> dict:
    """Produce one export row from an employee record, preserving column order."""
    return {
        key: export_value(value)
        for key, value in record.items()
        if not is_excluded_field(key)
    }


def collect_headers(rows: list[dict]) -> list[str]:
    """Union of row keys, in the order they are first seen (first row first)."""
    headers: dict[str, None] = {}
    for row in rows:
        for key in row:
            headers.setdefault(key, None)
    return list(headers)
