"""
Employee export jobs API.

Creating a job records it as pending and schedules the export pipeline as a
background task; clients poll the job until it is complete or error.
"""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from auth.dependencies import require_admin
from auth.models import User
from dependencies import get_export_pipeline, get_job_store
from exceptions import NotFoundError
from exports.pipeline import ExportJobPipeline
from jobs.job_store import ExportJobStore
from models.common import parse_record_id
from models.export_job import ExportJobRequest, ExportJobResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ExportJobResponse, status_code=status.HTTP_202_ACCEPTED)
async def create_export_job(
    request: ExportJobRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_admin),
    job_store: ExportJobStore = Depends(get_job_store),
    pipeline: ExportJobPipeline = Depends(get_export_pipeline),
):
    """
    Start an employee export.

    Filters (all optional): client_name (exact), start_date and end_date
    (inclusive, on joining date).
    """
    job = await job_store.create_job(user_id=current_user.id, filters=request.filters.to_record())
    logger.info(f"[Export {job.id}] Created by {current_user.id}")

    background_tasks.add_task(pipeline.handle_job_created, job.id)

    return ExportJobResponse.from_job(job)


@router.get("", response_model=List[ExportJobResponse])
async def list_export_jobs(
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_admin),
    job_store: ExportJobStore = Depends(get_job_store),
):
    """Recent export jobs. Super admins see everyone's, other admins their own."""
    owner = None if current_user.is_super_admin else current_user.id
    jobs = await job_store.list_jobs(user_id=owner, limit=limit)
    return [ExportJobResponse.from_job(job) for job in jobs]


@router.get("/{job_id}", response_model=ExportJobResponse)
async def get_export_job(
    job_id: str,
    current_user: User = Depends(require_admin),
    job_store: ExportJobStore = Depends(get_job_store),
):
    """Poll one export job."""
    job = await job_store.get_job(parse_record_id(job_id, "export_job"))
    # Other admins' jobs are reported as missing
    if not job or (job.user_id != current_user.id and not current_user.is_super_admin):
        raise NotFoundError("Export job not found", resource="export_job")
    return ExportJobResponse.from_job(job)
