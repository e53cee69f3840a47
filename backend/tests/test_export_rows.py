"""
Tests for flattening employee records into export rows.
"""

from datetime import date, datetime, timezone

from exports.rows import collect_headers, export_value, flatten_employee, is_excluded_field
from models.employee import EmployeeStatus


class TestExcludedFields:
    """Which columns never reach a spreadsheet."""

    def test_url_fields_excluded_case_insensitive(self):
        """Any field name containing 'url' is dropped, regardless of case."""
        assert is_excluded_field("profile_picture_url")
        assert is_excluded_field("identity_proof_url_front")
        assert is_excluded_field("signatureURL")
        assert is_excluded_field("UrlOfSomething")

    def test_internal_fields_excluded(self):
        """searchable_fields and qr_code_data are bookkeeping only."""
        assert is_excluded_field("searchable_fields")
        assert is_excluded_field("qr_code_data")

    def test_regular_fields_kept(self):
        assert not is_excluded_field("full_name")
        assert not is_excluded_field("joining_date")
        assert not is_excluded_field("status")


class TestExportValue:
    """Cell value normalization."""

    def test_datetime_becomes_calendar_date(self):
        """Time of day is discarded."""
        value = datetime(2024, 3, 15, 23, 59, 59, tzinfo=timezone.utc)
        assert export_value(value) == "2024-03-15"

    def test_date_becomes_iso(self):
        assert export_value(date(1990, 1, 2)) == "1990-01-02"

    def test_enum_becomes_value(self):
        assert export_value(EmployeeStatus.ON_LEAVE) == "OnLeave"

    def test_primitives_unchanged(self):
        assert export_value("TCS") == "TCS"
        assert export_value(42) == 42
        assert export_value(None) is None


class TestFlattenEmployee:
    """Row construction from a full record."""

    def test_flatten_drops_urls_and_internal_fields(self):
        record = {
            "id": "abc",
            "employee_id": "TCS/2024-25/001",
            "full_name": "ASHA NAIR",
            "profile_picture_url": "https://files.test/p.jpg",
            "bank_passbook_statement_url": "https://files.test/b.pdf",
            "qr_code_data": "Employee ID: TCS/2024-25/001",
            "searchable_fields": ["ASHA", "NAIR"],
            "joining_date": datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc),
        }

        row = flatten_employee(record)

        assert row == {
            "id": "abc",
            "employee_id": "TCS/2024-25/001",
            "full_name": "ASHA NAIR",
            "joining_date": "2024-06-01",
        }

    def test_flatten_preserves_column_order(self):
        record = {"b": 1, "photo_url": "x", "a": 2, "c": 3}
        assert list(flatten_employee(record)) == ["b", "a", "c"]


class TestCollectHeaders:
    def test_first_row_order_then_new_keys(self):
        """Headers follow the first row, later keys are appended as first seen."""
        rows = [
            {"employee_id": "1", "full_name": "A"},
            {"employee_id": "2", "district": "Kochi", "full_name": "B"},
            {"pan_number": "X", "employee_id": "3"},
        ]
        assert collect_headers(rows) == ["employee_id", "full_name", "district", "pan_number"]

    def test_empty(self):
        assert collect_headers([]) == []
