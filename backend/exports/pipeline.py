"""
Export Job Pipeline.

Runs once per created export job:

1. Claim the job (pending -> processing). Duplicate deliveries stop here.
2. Query employees matching the job's filters.
3. Flatten records into rows and write an .xlsx workbook to a temp file.
4. Upload it to the blob store and issue a signed download URL.
5. Write the terminal status (processing -> complete | error).

The pipeline never raises: every failure ends up in the job record, which is
the only place the requesting client can see it.
"""

import asyncio
import logging
import os
from datetime import timedelta
from typing import Optional

from exceptions import NoEmployeesMatchedError
from jobs.job_store import ExportJob, ExportJobStore
from models.export_job import ExportFilters
from records.employee_store import EmployeeStore, start_of_day
from storage.blob_store import BlobStore

from .rows import flatten_employee
from .spreadsheet import XLSX_CONTENT_TYPE, temporary_export_file, write_employee_workbook

logger = logging.getLogger(__name__)

UNKNOWN_EXPORT_ERROR = "An unknown error occurred during the export."


class ExportJobPipeline:
    """
    Turns a pending export job into an uploaded spreadsheet and a signed URL.

    All collaborators are passed in, so tests can substitute in-memory stores
    and a fake blob store.
    """

    def __init__(
        self,
        employee_store: EmployeeStore,
        job_store: ExportJobStore,
        blob_store: BlobStore,
        export_prefix: str = "exports",
        url_expiry_seconds: int = 10 * 365 * 24 * 60 * 60,
        temp_dir: Optional[str] = None,
    ):
        self.employee_store = employee_store
        self.job_store = job_store
        self.blob_store = blob_store
        self.export_prefix = export_prefix.strip("/")
        self.url_expiry_seconds = url_expiry_seconds
        self.temp_dir = temp_dir

    async def handle_job_created(self, job_id: str) -> Optional[ExportJob]:
        """
        Run the export for one job.

        Returns:
            The job in its terminal state, or None if the job was missing or
            already claimed by an earlier delivery.
        """
        job = await self.job_store.mark_processing(job_id)
        if job is None:
            logger.info(f"[Export {job_id}] Not pending (missing or already claimed), skipping")
            return None

        logger.info(f"[Export {job_id}] Processing for user {job.user_id} with filters {job.filters}")

        try:
            with temporary_export_file(self.temp_dir) as local_path:
                download_url, employee_count = await self._export(job, local_path)

            completed = await self.job_store.complete_job(job_id, download_url, employee_count)
            if completed is None:
                logger.warning(f"[Export {job_id}] Job left processing before completion, result discarded")
                return await self.job_store.get_job(job_id)

            logger.info(f"[Export {job_id}] Complete: {employee_count} employees")
            return completed

        except Exception as e:
            message = str(e) or UNKNOWN_EXPORT_ERROR
            logger.error(f"[Export {job_id}] Failed ({type(e).__name__}): {message}")
            return await self._fail(job_id, message)

    async def _export(self, job: ExportJob, local_path: str) -> tuple[str, int]:
        filters = ExportFilters.model_validate(job.filters or {})

        joined_from = start_of_day(filters.start_date) if filters.start_date else None
        # End date is inclusive: anything before the start of the following day
        joined_before = (
            start_of_day(filters.end_date + timedelta(days=1)) if filters.end_date else None
        )

        employees = await self.employee_store.query_for_export(
            client_name=filters.client_name,
            joined_from=joined_from,
            joined_before=joined_before,
        )
        if not employees:
            raise NoEmployeesMatchedError(filters.to_record())

        rows = [flatten_employee(record) for record in employees]
        employee_count = await asyncio.to_thread(write_employee_workbook, rows, local_path)
        logger.info(f"[Export {job.id}] Wrote {employee_count} rows to workbook")

        blob_path = f"{self.export_prefix}/{os.path.basename(local_path)}"
        await self.blob_store.upload_file(
            blob_path,
            local_path,
            content_type=XLSX_CONTENT_TYPE,
            metadata={"userId": job.user_id, "jobId": job.id},
        )
        download_url = await self.blob_store.create_signed_url(blob_path, self.url_expiry_seconds)
        return download_url, employee_count

    async def _fail(self, job_id: str, message: str) -> Optional[ExportJob]:
        try:
            failed = await self.job_store.fail_job(job_id, message)
        except Exception as e:
            # Nothing else can record the failure; the startup sweep will
            # move the job out of processing.
            logger.exception(f"[Export {job_id}] Could not record failure: {e}")
            return None
        if failed is None:
            logger.warning(f"[Export {job_id}] Job left processing before the failure was recorded")
        return failed
