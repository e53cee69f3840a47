"""
Attendance log store.

One row per In/Out mark. Logs reference employees by their human code,
the value printed on the QR badge.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

logger = logging.getLogger(__name__)


class AttendanceStore:
    """Append-only attendance log, PostgreSQL or in-memory."""

    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS attendance_logs (
        id UUID PRIMARY KEY,
        employee_id TEXT NOT NULL,
        employee_name TEXT NOT NULL,
        status VARCHAR(3) NOT NULL,
        latitude DOUBLE PRECISION,
        longitude DOUBLE PRECISION,
        location TEXT,
        photo_path TEXT,
        recorded_at TIMESTAMPTZ DEFAULT NOW(),
        recorded_by TEXT
    );

    CREATE INDEX IF NOT EXISTS idx_attendance_employee ON attendance_logs(employee_id, recorded_at DESC);
    """

    def __init__(self, db_connection=None):
        self.db = db_connection
        self._memory_store: list[dict] = []
        self._lock = asyncio.Lock()

    async def init_table(self) -> None:
        if self.db:
            try:
                await self.db.execute(self.CREATE_TABLE_SQL)
                logger.info("Attendance table initialized")
            except Exception as e:
                logger.warning(f"Failed to create attendance_logs table: {type(e).__name__}")

    async def record(
        self,
        employee_id: str,
        employee_name: str,
        status: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        location: Optional[str] = None,
        photo_path: Optional[str] = None,
        recorded_by: Optional[str] = None,
    ) -> dict:
        entry = {
            "id": str(uuid4()),
            "employee_id": employee_id,
            "employee_name": employee_name,
            "status": status,
            "latitude": latitude,
            "longitude": longitude,
            "location": location,
            "photo_path": photo_path,
            "recorded_at": datetime.now(timezone.utc),
            "recorded_by": recorded_by,
        }

        if self.db:
            await self.db.execute(
                """
                INSERT INTO attendance_logs
                    (id, employee_id, employee_name, status, latitude, longitude,
                     location, photo_path, recorded_at, recorded_by)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                """,
                *entry.values(),
            )
        else:
            async with self._lock:
                self._memory_store.append(entry)

        logger.info(f"Attendance {status} recorded for {employee_id}")
        return entry

    async def list_logs(
        self,
        employee_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = 100,
    ) -> list[dict]:
        """Logs newest first. `since` is inclusive, `until` exclusive."""
        if self.db:
            conditions = []
            values = []
            if employee_id:
                values.append(employee_id)
                conditions.append(f"employee_id = ${len(values)}")
            if since:
                values.append(since)
                conditions.append(f"recorded_at >= ${len(values)}")
            if until:
                values.append(until)
                conditions.append(f"recorded_at < ${len(values)}")
            where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
            values.append(limit)
            rows = await self.db.fetch(
                f"SELECT * FROM attendance_logs {where} ORDER BY recorded_at DESC LIMIT ${len(values)}",
                *values,
            )
            return [{**dict(row), "id": str(row["id"])} for row in rows]

        logs = self._memory_store
        if employee_id:
            logs = [log for log in logs if log["employee_id"] == employee_id]
        if since:
            logs = [log for log in logs if log["recorded_at"] >= since]
        if until:
            logs = [log for log in logs if log["recorded_at"] < until]
        logs = sorted(logs, key=lambda log: log["recorded_at"], reverse=True)
        return [dict(log) for log in logs[:limit]]
