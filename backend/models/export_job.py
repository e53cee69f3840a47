"""
Export job request/response models.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, model_validator

from jobs.job_store import ExportJob, ExportJobStatus


class ExportFilters(BaseModel):
    """Optional filters applied to the employee query."""
    client_name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_range(self) -> "ExportFilters":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        if self.client_name is not None:
            self.client_name = self.client_name.strip() or None
        return self

    def to_record(self) -> dict:
        """Filters as stored on the job record (ISO dates, unset keys omitted)."""
        record = {}
        if self.client_name:
            record["client_name"] = self.client_name
        if self.start_date:
            record["start_date"] = self.start_date.isoformat()
        if self.end_date:
            record["end_date"] = self.end_date.isoformat()
        return record


class ExportJobRequest(BaseModel):
    filters: ExportFilters = ExportFilters()


class ExportJobResponse(BaseModel):
    id: str
    user_id: str
    status: ExportJobStatus
    filters: dict = {}
    download_url: Optional[str] = None
    employee_count: Optional[int] = None
    error: Optional[str] = None
    exported_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_job(cls, job: ExportJob) -> "ExportJobResponse":
        return cls(
            id=job.id,
            user_id=job.user_id,
            status=job.status,
            filters=job.filters,
            download_url=job.download_url,
            employee_count=job.employee_count,
            error=job.error,
            exported_at=job.exported_at,
            created_at=job.created_at,
            updated_at=job.updated_at,
        )
