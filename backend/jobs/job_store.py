"""
Export Job Store - persistent export job tracking.

Stores job status in PostgreSQL; the record is the only channel through which
clients learn the outcome of an export, so every status change goes through a
conditional write that refuses to leave a terminal state.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from database import rows_affected

logger = logging.getLogger(__name__)

INTERRUPTED_MESSAGE = "Export was interrupted by a server restart. Please start a new export."


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExportJobStatus(str, Enum):
    """Export job status. Monotonic: pending -> processing -> complete | error."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ExportJobStatus.COMPLETE, ExportJobStatus.ERROR)


@dataclass
class ExportJob:
    """Represents one export request and its lifecycle."""
    id: str
    user_id: str
    filters: dict = field(default_factory=dict)
    status: ExportJobStatus = ExportJobStatus.PENDING
    download_url: Optional[str] = None
    employee_count: Optional[int] = None
    error: Optional[str] = None
    exported_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "filters": self.filters,
            "status": self.status.value,
            "download_url": self.download_url,
            "employee_count": self.employee_count,
            "error": self.error,
            "exported_at": self.exported_at.isoformat() if self.exported_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def _parse_json_field(value) -> dict:
    """Parse a JSON field that might be a string or already a dict."""
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return {}
    return {}


def _row_to_job(row) -> ExportJob:
    return ExportJob(
        id=str(row["id"]),
        user_id=row["user_id"],
        filters=_parse_json_field(row["filters"]),
        status=ExportJobStatus(row["status"]),
        download_url=row["download_url"],
        employee_count=row["employee_count"],
        error=row["error"],
        exported_at=row["exported_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class ExportJobStore:
    """
    Persistent export job store using PostgreSQL.

    Without a database connection it keeps jobs in memory (development and
    tests). Both modes implement the same compare-and-set transitions.
    """

    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS export_jobs (
        id UUID PRIMARY KEY,
        user_id TEXT NOT NULL,
        filters JSONB NOT NULL DEFAULT '{}'::jsonb,
        status VARCHAR(20) NOT NULL DEFAULT 'pending',
        download_url TEXT,
        employee_count INTEGER,
        error TEXT,
        exported_at TIMESTAMPTZ,
        created_at TIMESTAMPTZ DEFAULT NOW(),
        updated_at TIMESTAMPTZ DEFAULT NOW()
    );

    CREATE INDEX IF NOT EXISTS idx_export_jobs_user ON export_jobs(user_id, created_at DESC);
    CREATE INDEX IF NOT EXISTS idx_export_jobs_status ON export_jobs(status);
    """

    def __init__(self, db_connection=None):
        self.db = db_connection
        self._memory_store: dict[str, ExportJob] = {}
        self._lock = asyncio.Lock()

    async def init_table(self) -> None:
        """Create export_jobs table if it doesn't exist."""
        if self.db:
            try:
                await self.db.execute(self.CREATE_TABLE_SQL)
                logger.info("Export jobs table initialized")
            except Exception as e:
                logger.warning(f"Failed to create export_jobs table: {type(e).__name__}")

    async def create_job(self, user_id: str, filters: Optional[dict] = None) -> ExportJob:
        """Create a new pending export job owned by user_id."""
        job = ExportJob(id=str(uuid4()), user_id=user_id, filters=filters or {})

        if self.db:
            await self.db.execute(
                """
                INSERT INTO export_jobs (id, user_id, filters, status, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                """,
                job.id,
                job.user_id,
                json.dumps(job.filters),
                job.status.value,
                job.created_at,
                job.updated_at,
            )
        else:
            self._memory_store[job.id] = job

        return job

    async def get_job(self, job_id: str) -> Optional[ExportJob]:
        """Get job by ID."""
        if self.db:
            row = await self.db.fetchrow("SELECT * FROM export_jobs WHERE id = $1", job_id)
            return _row_to_job(row) if row else None
        return self._memory_store.get(job_id)

    async def list_jobs(self, user_id: Optional[str] = None, limit: int = 50) -> list[ExportJob]:
        """List jobs, newest first, optionally limited to one owner."""
        if self.db:
            if user_id:
                rows = await self.db.fetch(
                    "SELECT * FROM export_jobs WHERE user_id = $1 ORDER BY created_at DESC LIMIT $2",
                    user_id,
                    limit,
                )
            else:
                rows = await self.db.fetch(
                    "SELECT * FROM export_jobs ORDER BY created_at DESC LIMIT $1",
                    limit,
                )
            return [_row_to_job(row) for row in rows]

        jobs = list(self._memory_store.values())
        if user_id:
            jobs = [j for j in jobs if j.user_id == user_id]
        return sorted(jobs, key=lambda j: j.created_at, reverse=True)[:limit]

    async def _transition(
        self,
        job_id: str,
        expected: ExportJobStatus,
        new_status: ExportJobStatus,
        **fields,
    ) -> Optional[ExportJob]:
        """
        Move a job from `expected` to `new_status` only if it is still in
        `expected`. Returns the updated job, or None when the job is missing
        or another writer got there first.
        """
        now = utcnow()

        if self.db:
            assignments = ["status = $3", "updated_at = $4"]
            values = [job_id, expected.value, new_status.value, now]
            for name, value in fields.items():
                values.append(value)
                assignments.append(f"{name} = ${len(values)}")

            result = await self.db.execute(
                f"UPDATE export_jobs SET {', '.join(assignments)} WHERE id = $1 AND status = $2",
                *values,
            )
            if rows_affected(result) == 0:
                return None
            return await self.get_job(job_id)

        async with self._lock:
            job = self._memory_store.get(job_id)
            if not job or job.status != expected:
                return None
            job.status = new_status
            job.updated_at = now
            for name, value in fields.items():
                setattr(job, name, value)
            return job

    async def mark_processing(self, job_id: str) -> Optional[ExportJob]:
        """Claim a pending job for the pipeline."""
        return await self._transition(job_id, ExportJobStatus.PENDING, ExportJobStatus.PROCESSING)

    async def complete_job(
        self,
        job_id: str,
        download_url: str,
        employee_count: int,
    ) -> Optional[ExportJob]:
        """Record a successful export. exported_at is assigned here, server side."""
        return await self._transition(
            job_id,
            ExportJobStatus.PROCESSING,
            ExportJobStatus.COMPLETE,
            download_url=download_url,
            employee_count=employee_count,
            exported_at=utcnow(),
        )

    async def fail_job(self, job_id: str, error: str) -> Optional[ExportJob]:
        """Record a failed export."""
        return await self._transition(
            job_id,
            ExportJobStatus.PROCESSING,
            ExportJobStatus.ERROR,
            error=error,
        )

    async def mark_processing_as_error(self) -> int:
        """
        Fail every job still marked processing.

        Called on startup: a processing job at that point belongs to a
        pipeline run that died with the previous process.

        Returns:
            Number of jobs marked as error
        """
        if self.db:
            result = await self.db.execute(
                """
                UPDATE export_jobs
                SET status = 'error', error = $1, updated_at = NOW()
                WHERE status = 'processing'
                """,
                INTERRUPTED_MESSAGE,
            )
            count = rows_affected(result)
            if count > 0:
                logger.warning(f"Marked {count} interrupted export jobs as error")
            return count

        count = 0
        async with self._lock:
            for job in self._memory_store.values():
                if job.status == ExportJobStatus.PROCESSING:
                    job.status = ExportJobStatus.ERROR
                    job.error = INTERRUPTED_MESSAGE
                    job.updated_at = utcnow()
                    count += 1
        return count
