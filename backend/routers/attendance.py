"""
Attendance API.

Field officers scan an employee's QR badge and record an In or Out mark with
the device location and a watermarked photo.
"""

import logging
import mimetypes
import re
import time
from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from auth.dependencies import get_current_user, require_admin
from auth.models import User
from config import settings
from dependencies import get_attendance_store, get_blob_store, get_employee_store
from documents.verification import parse_data_uri
from exceptions import InvalidArgumentError, NotFoundError
from models.attendance import AttendanceCreate, AttendanceLog
from models.employee import EmployeeStatus
from records.attendance_store import AttendanceStore
from records.employee_store import EmployeeStore, start_of_day
from storage.blob_store import BlobStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _photo_path(employee_code: str, mime_type: str) -> str:
    safe_code = re.sub(r"[^A-Za-z0-9-]", "_", employee_code)
    extension = mimetypes.guess_extension(mime_type) or ".jpg"
    return f"{settings.attendance_photo_prefix}/{safe_code}/{time.time_ns()}{extension}"


@router.post("", response_model=AttendanceLog, status_code=status.HTTP_201_CREATED)
async def record_attendance(
    mark: AttendanceCreate,
    current_user: User = Depends(get_current_user),
    employee_store: EmployeeStore = Depends(get_employee_store),
    attendance_store: AttendanceStore = Depends(get_attendance_store),
    blob_store: BlobStore = Depends(get_blob_store),
):
    """Record an In/Out mark for an active employee."""
    employee = await employee_store.find_by_employee_code(mark.employee_id.strip())
    if not employee:
        raise NotFoundError(f"No employee with ID {mark.employee_id}", resource="employee")
    if employee["status"] != EmployeeStatus.ACTIVE.value:
        raise InvalidArgumentError(
            f"Employee {employee['employee_id']} is {employee['status']}, not Active.",
            field="employee_id",
        )

    photo_path = None
    if mark.photo_data_uri:
        photo = parse_data_uri(mark.photo_data_uri)
        photo_path = await blob_store.upload_bytes(
            _photo_path(employee["employee_id"], photo.mime_type),
            photo.data,
            content_type=photo.mime_type,
            metadata={"employeeId": employee["employee_id"], "recordedBy": current_user.id},
        )

    entry = await attendance_store.record(
        employee_id=employee["employee_id"],
        employee_name=employee["full_name"],
        status=mark.status.value,
        latitude=mark.latitude,
        longitude=mark.longitude,
        location=mark.location,
        photo_path=photo_path,
        recorded_by=current_user.id,
    )
    return AttendanceLog.model_validate(entry)


@router.get("", response_model=List[AttendanceLog])
async def list_attendance(
    employee_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(require_admin),
    attendance_store: AttendanceStore = Depends(get_attendance_store),
):
    """Attendance logs, newest first. Date bounds are inclusive."""
    if start_date and end_date and start_date > end_date:
        raise InvalidArgumentError("start_date must not be after end_date", field="start_date")

    logs = await attendance_store.list_logs(
        employee_id=employee_id,
        since=start_of_day(start_date) if start_date else None,
        until=start_of_day(end_date + timedelta(days=1)) if end_date else None,
        limit=limit,
    )
    return [AttendanceLog.model_validate(log) for log in logs]
