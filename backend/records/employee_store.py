"""
Employee Record Store.

Employee records live in PostgreSQL (`employees`). Without a database
connection the store keeps records in memory, which is what development and
the test-suite use. Records are returned as plain dicts keyed by column name,
in table column order.
"""

import asyncio
import logging
import random
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from exceptions import InvalidArgumentError
from models.employee import (
    EmployeeCreate,
    EmployeeStatus,
    EmployeeUpdate,
    MaritalStatus,
    null_required_fields,
)

logger = logging.getLogger(__name__)

# Table column order. Exported spreadsheets follow it.
EMPLOYEE_COLUMNS = [
    "id",
    "employee_id",
    "client_name",
    "resource_id_number",
    "first_name",
    "last_name",
    "full_name",
    "date_of_birth",
    "gender",
    "father_name",
    "mother_name",
    "marital_status",
    "spouse_name",
    "district",
    "pan_number",
    "identity_proof_type",
    "identity_proof_number",
    "identity_proof_url_front",
    "identity_proof_url_back",
    "address_proof_type",
    "address_proof_number",
    "address_proof_url_front",
    "address_proof_url_back",
    "signature_url",
    "epf_uan_number",
    "esic_number",
    "bank_account_number",
    "ifsc_code",
    "bank_name",
    "full_address",
    "email_address",
    "phone_number",
    "profile_picture_url",
    "bank_passbook_statement_url",
    "police_clearance_certificate_url",
    "joining_date",
    "status",
    "exit_date",
    "qr_code_data",
    "searchable_fields",
    "created_at",
    "updated_at",
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with stored timestamps."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def start_of_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def financial_year(today: Optional[date] = None) -> str:
    """Indian financial year label, e.g. "2024-25" for any day from April 2024 to March 2025."""
    today = today or utcnow().date()
    start = today.year if today.month >= 4 else today.year - 1
    return f"{start}-{str(start + 1)[-2:]}"


def generate_employee_id(client_name: Optional[str], today: Optional[date] = None) -> str:
    """Build the human employee code CLIENT/FY/NNN."""
    client = "".join(ch for ch in (client_name or "") if ch.isascii() and ch.isalnum()).upper()
    serial = random.randint(1, 1000)
    return f"{client or 'UNKNOWNCLIENT'}/{financial_year(today)}/{serial:03d}"


def build_full_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}".strip().upper()


def build_qr_data(employee_id: str, full_name: str, phone_number: str) -> str:
    """Text encoded in the employee's QR badge."""
    return f"Employee ID: {employee_id}\nName: {full_name}\nPhone: {phone_number}"


def build_searchable_fields(record: dict) -> list[str]:
    """Upper-cased search tokens: name parts, first/last name, employee code and phone."""
    tokens = (record.get("full_name") or "").upper().split()
    tokens += [
        (record.get("first_name") or "").upper(),
        (record.get("last_name") or "").upper(),
        (record.get("employee_id") or "").upper(),
        record.get("phone_number") or "",
    ]
    # dict keeps first-seen order
    return list(dict.fromkeys(t for t in tokens if t))


class EmployeeStore:
    """
    CRUD and query access to employee records.

    Records are never hard-deleted; leaving the company is a status change.
    """

    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS employees (
        id UUID PRIMARY KEY,
        employee_id TEXT NOT NULL,
        client_name TEXT NOT NULL,
        resource_id_number TEXT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        full_name TEXT NOT NULL,
        date_of_birth DATE,
        gender VARCHAR(10),
        father_name TEXT,
        mother_name TEXT,
        marital_status VARCHAR(20),
        spouse_name TEXT,
        district TEXT,
        pan_number TEXT,
        identity_proof_type TEXT,
        identity_proof_number TEXT,
        identity_proof_url_front TEXT,
        identity_proof_url_back TEXT,
        address_proof_type TEXT,
        address_proof_number TEXT,
        address_proof_url_front TEXT,
        address_proof_url_back TEXT,
        signature_url TEXT,
        epf_uan_number TEXT,
        esic_number TEXT,
        bank_account_number TEXT,
        ifsc_code TEXT,
        bank_name TEXT,
        full_address TEXT,
        email_address TEXT,
        phone_number TEXT NOT NULL,
        profile_picture_url TEXT,
        bank_passbook_statement_url TEXT,
        police_clearance_certificate_url TEXT,
        joining_date TIMESTAMPTZ NOT NULL,
        status VARCHAR(20) NOT NULL DEFAULT 'Active',
        exit_date TIMESTAMPTZ,
        qr_code_data TEXT,
        searchable_fields TEXT[] NOT NULL DEFAULT '{}',
        created_at TIMESTAMPTZ DEFAULT NOW(),
        updated_at TIMESTAMPTZ DEFAULT NOW()
    );

    CREATE INDEX IF NOT EXISTS idx_employees_client_joining ON employees(client_name, joining_date);
    CREATE INDEX IF NOT EXISTS idx_employees_joining ON employees(joining_date);
    CREATE INDEX IF NOT EXISTS idx_employees_phone ON employees(phone_number);
    CREATE INDEX IF NOT EXISTS idx_employees_code ON employees(employee_id);
    CREATE INDEX IF NOT EXISTS idx_employees_search ON employees USING GIN(searchable_fields);
    """

    def __init__(self, db_connection=None):
        self.db = db_connection
        self._memory_store: dict[str, dict] = {}
        self._lock = asyncio.Lock()

    async def init_table(self) -> None:
        """Create employees table if it doesn't exist."""
        if self.db:
            try:
                await self.db.execute(self.CREATE_TABLE_SQL)
                logger.info("Employees table initialized")
            except Exception as e:
                logger.warning(f"Failed to create employees table: {type(e).__name__}")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def new_record(self, data: EmployeeCreate, status: EmployeeStatus = EmployeeStatus.ACTIVE) -> dict:
        """Build a full record for `data`: id, employee code, QR data and search tokens."""
        now = utcnow()
        fields = data.model_dump(mode="python")
        fields["joining_date"] = as_utc(fields["joining_date"])
        if fields.get("marital_status") != MaritalStatus.MARRIED:
            fields["spouse_name"] = None

        record = {column: None for column in EMPLOYEE_COLUMNS}
        record.update({k: v for k, v in fields.items() if k in record})
        record["id"] = str(uuid4())
        record["employee_id"] = generate_employee_id(data.client_name)
        record["full_name"] = build_full_name(data.first_name, data.last_name)
        record["status"] = status
        record["qr_code_data"] = build_qr_data(
            record["employee_id"], record["full_name"], record["phone_number"]
        )
        record["searchable_fields"] = build_searchable_fields(record)
        record["created_at"] = now
        record["updated_at"] = now
        _enum_values(record)
        return record

    @staticmethod
    def _insert_sql(record: dict) -> str:
        columns = list(record.keys())
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        return f"INSERT INTO employees ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *"

    async def create(self, data: EmployeeCreate, status: EmployeeStatus = EmployeeStatus.ACTIVE) -> dict:
        """Enroll a new employee, assigning id, employee code, QR data and search tokens."""
        record = self.new_record(data, status)

        if self.db:
            row = await self.db.fetchrow(self._insert_sql(record), *record.values())
            created = _row_to_record(row)
        else:
            async with self._lock:
                self._memory_store[record["id"]] = record
            created = dict(record)

        logger.info(f"Enrolled employee {created['employee_id']} for client {created['client_name']}")
        return created

    async def create_many(self, records: list[dict]) -> int:
        """
        Insert records built by new_record() as one unit.

        In database mode the batch runs in a single transaction, so either
        every record is written or none is.
        """
        if not records:
            return 0

        if self.db:
            async with self.db.acquire() as conn:
                async with conn.transaction():
                    for record in records:
                        await conn.execute(self._insert_sql(record), *record.values())
        else:
            async with self._lock:
                for record in records:
                    self._memory_store[record["id"]] = dict(record)

        logger.info(f"Inserted batch of {len(records)} employee records")
        return len(records)

    async def update(self, record_id: str, changes: EmployeeUpdate) -> Optional[dict]:
        """
        Apply a partial profile edit.

        Recomputes full_name and searchable_fields, clears exit_date when the
        status is not Exited and spouse_name when not Married.
        Returns the updated record, or None if it does not exist.
        """
        current = await self.get(record_id)
        if not current:
            return None

        updates = changes.model_dump(exclude_unset=True, mode="python")
        nulled = null_required_fields(updates)
        if nulled:
            raise InvalidArgumentError(f"{', '.join(nulled)} cannot be null.", field=nulled[0])

        if "joining_date" in updates and updates["joining_date"] is not None:
            updates["joining_date"] = as_utc(updates["joining_date"])
        if "exit_date" in updates and updates["exit_date"] is not None:
            updates["exit_date"] = as_utc(updates["exit_date"])
        _enum_values(updates)

        merged = {**current, **updates}

        if merged.get("status") != EmployeeStatus.EXITED.value and merged.get("exit_date"):
            updates["exit_date"] = None
        elif merged.get("status") == EmployeeStatus.EXITED.value and not merged.get("exit_date"):
            logger.warning(f"Employee {current['employee_id']} marked Exited without an exit date")

        if merged.get("marital_status") != MaritalStatus.MARRIED.value and merged.get("spouse_name"):
            updates["spouse_name"] = None

        if {"first_name", "last_name"} & updates.keys():
            updates["full_name"] = build_full_name(merged["first_name"], merged["last_name"])
        if {"first_name", "last_name", "phone_number"} & updates.keys():
            merged.update(updates)
            updates["searchable_fields"] = build_searchable_fields(merged)
            updates["qr_code_data"] = build_qr_data(
                merged["employee_id"], merged["full_name"], merged["phone_number"]
            )

        return await self._write(record_id, updates)

    async def regenerate_employee_id(self, record_id: str) -> Optional[dict]:
        """Issue a fresh employee code, rebuilding QR data and search tokens."""
        current = await self.get(record_id)
        if not current:
            return None

        new_code = generate_employee_id(current["client_name"])
        merged = {**current, "employee_id": new_code}
        updates = {
            "employee_id": new_code,
            "qr_code_data": build_qr_data(new_code, current["full_name"], current["phone_number"]),
            "searchable_fields": build_searchable_fields(merged),
        }
        logger.info(f"Regenerated employee code {current['employee_id']} -> {new_code}")
        return await self._write(record_id, updates)

    async def _write(self, record_id: str, updates: dict) -> Optional[dict]:
        updates = {k: v for k, v in updates.items() if k in EMPLOYEE_COLUMNS and k != "id"}
        updates["updated_at"] = utcnow()

        if self.db:
            assignments = []
            values = []
            param_idx = 1
            for column, value in updates.items():
                assignments.append(f"{column} = ${param_idx}")
                values.append(value)
                param_idx += 1
            values.append(record_id)
            row = await self.db.fetchrow(
                f"UPDATE employees SET {', '.join(assignments)} WHERE id = ${param_idx} RETURNING *",
                *values,
            )
            return _row_to_record(row) if row else None

        async with self._lock:
            record = self._memory_store.get(record_id)
            if record is None:
                return None
            record.update(updates)
            return dict(record)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, record_id: str) -> Optional[dict]:
        if self.db:
            row = await self.db.fetchrow("SELECT * FROM employees WHERE id = $1", record_id)
            return _row_to_record(row) if row else None
        record = self._memory_store.get(record_id)
        return dict(record) if record else None

    async def find_by_phone(self, phone_number: str) -> Optional[dict]:
        """Find the record that owns a phone number (digits, local form)."""
        if self.db:
            row = await self.db.fetchrow(
                "SELECT * FROM employees WHERE phone_number = $1 ORDER BY created_at DESC LIMIT 1",
                phone_number,
            )
            return _row_to_record(row) if row else None
        matches = [r for r in self._memory_store.values() if r["phone_number"] == phone_number]
        matches.sort(key=lambda r: r["created_at"], reverse=True)
        return dict(matches[0]) if matches else None

    async def find_by_employee_code(self, employee_id: str) -> Optional[dict]:
        if self.db:
            row = await self.db.fetchrow(
                "SELECT * FROM employees WHERE employee_id = $1 LIMIT 1", employee_id
            )
            return _row_to_record(row) if row else None
        for record in self._memory_store.values():
            if record["employee_id"] == employee_id:
                return dict(record)
        return None

    async def list_employees(
        self,
        client_name: Optional[str] = None,
        status: Optional[EmployeeStatus] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[dict]:
        """List records, newest first. `search` matches one token of searchable_fields."""
        token = search.strip().upper() if search and search.strip() else None
        status_value = status.value if status else None

        if self.db:
            conditions = []
            values = []
            if client_name:
                values.append(client_name)
                conditions.append(f"client_name = ${len(values)}")
            if status_value:
                values.append(status_value)
                conditions.append(f"status = ${len(values)}")
            if token:
                values.append(token)
                conditions.append(f"${len(values)} = ANY(searchable_fields)")
            where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
            values.extend([limit, offset])
            rows = await self.db.fetch(
                f"SELECT * FROM employees {where} ORDER BY created_at DESC "
                f"LIMIT ${len(values) - 1} OFFSET ${len(values)}",
                *values,
            )
            return [_row_to_record(row) for row in rows]

        records = list(self._memory_store.values())
        if client_name:
            records = [r for r in records if r["client_name"] == client_name]
        if status_value:
            records = [r for r in records if r["status"] == status_value]
        if token:
            records = [r for r in records if token in (r["searchable_fields"] or [])]
        records.sort(key=lambda r: r["created_at"], reverse=True)
        return [dict(r) for r in records[offset:offset + limit]]

    async def query_for_export(
        self,
        client_name: Optional[str] = None,
        joined_from: Optional[datetime] = None,
        joined_before: Optional[datetime] = None,
    ) -> list[dict]:
        """
        Select employees for a spreadsheet export.

        Args:
            client_name: Exact client name match
            joined_from: Inclusive lower bound on joining_date
            joined_before: Exclusive upper bound on joining_date
        """
        joined_from = as_utc(joined_from)
        joined_before = as_utc(joined_before)

        if self.db:
            conditions = []
            values = []
            if client_name:
                values.append(client_name)
                conditions.append(f"client_name = ${len(values)}")
            if joined_from:
                values.append(joined_from)
                conditions.append(f"joining_date >= ${len(values)}")
            if joined_before:
                values.append(joined_before)
                conditions.append(f"joining_date < ${len(values)}")
            where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
            rows = await self.db.fetch(
                f"SELECT * FROM employees {where} ORDER BY joining_date, created_at", *values
            )
            return [_row_to_record(row) for row in rows]

        records = list(self._memory_store.values())
        if client_name:
            records = [r for r in records if r["client_name"] == client_name]
        if joined_from:
            records = [r for r in records if r["joining_date"] >= joined_from]
        if joined_before:
            records = [r for r in records if r["joining_date"] < joined_before]
        records.sort(key=lambda r: (r["joining_date"], r["created_at"]))
        return [dict(r) for r in records]

    async def stats(self, now: Optional[datetime] = None, recent_limit: int = 5) -> dict:
        """Dashboard counters plus the most recently created records."""
        now = now or utcnow()
        six_months_ago = now - timedelta(days=182)

        if self.db:
            row = await self.db.fetchrow(
                """
                SELECT
                    COUNT(*) FILTER (WHERE status = 'Active') AS active,
                    COUNT(*) FILTER (WHERE status = 'OnLeave') AS on_leave,
                    COUNT(*) FILTER (WHERE status IN ('Inactive', 'Exited')) AS inactive_or_exited,
                    COUNT(*) FILTER (WHERE joining_date >= $1) AS hires_last_six_months
                FROM employees
                """,
                six_months_ago,
            )
            counts = dict(row)
        else:
            records = list(self._memory_store.values())
            counts = {
                "active": sum(1 for r in records if r["status"] == "Active"),
                "on_leave": sum(1 for r in records if r["status"] == "OnLeave"),
                "inactive_or_exited": sum(1 for r in records if r["status"] in ("Inactive", "Exited")),
                "hires_last_six_months": sum(1 for r in records if r["joining_date"] >= six_months_ago),
            }

        counts["recent"] = await self.list_employees(limit=recent_limit)
        return counts

    async def count(self) -> int:
        if self.db:
            return await self.db.fetchval("SELECT COUNT(*) FROM employees") or 0
        return len(self._memory_store)


def _enum_values(record: dict) -> None:
    """Store enums by value so both backends hold plain strings."""
    for key, value in record.items():
        if isinstance(value, Enum):
            record[key] = value.value


def _row_to_record(row) -> dict:
    record = dict(row)
    record["id"] = str(record["id"])
    record["searchable_fields"] = list(record.get("searchable_fields") or [])
    return record
