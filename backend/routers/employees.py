"""
Employee records API.

Enrollment is open to anonymous callers (the public self-enrollment form);
everything else is for admins, apart from /me which returns the signed-in
employee's own record.
"""

import io
import logging
from typing import List, Optional

import qrcode
from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from auth.dependencies import get_current_user, get_optional_user, require_admin
from auth.models import User
from config import settings
from dependencies import get_employee_importer, get_employee_store
from exceptions import NotFoundError
from models.common import local_phone, parse_record_id
from models.employee import (
    Employee,
    EmployeeCreate,
    EmployeeImportResult,
    EmployeeStats,
    EmployeeStatus,
    EmployeeSummary,
    EmployeeUpdate,
)
from records.employee_import import EmployeeCsvImporter
from records.employee_store import EmployeeStore

logger = logging.getLogger(__name__)

router = APIRouter()

# Largest CSV accepted by bulk import
MAX_IMPORT_SIZE = 20 * 1024 * 1024  # 20MB


async def _get_or_404(store: EmployeeStore, record_id: str) -> dict:
    record = await store.get(parse_record_id(record_id, "employee"))
    if not record:
        raise NotFoundError("Employee not found", resource="employee")
    return record


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def enroll_employee(
    employee: EmployeeCreate,
    current_user: Optional[User] = Depends(get_optional_user),
    store: EmployeeStore = Depends(get_employee_store),
):
    """
    Enroll a new employee.

    Assigns the employee code (CLIENT/FY/NNN), QR badge data and search
    tokens. Anonymous self-enrollment is allowed.
    """
    record = await store.create(employee)
    logger.info(
        f"Employee {record['employee_id']} enrolled by "
        f"{current_user.id if current_user else 'self-enrollment'}"
    )
    return Employee.model_validate(record)


@router.post("/import", response_model=EmployeeImportResult)
async def import_employees(
    file: UploadFile = File(...),
    current_user: User = Depends(require_admin),
    importer: EmployeeCsvImporter = Depends(get_employee_importer),
):
    """
    Bulk-enroll employees from a CSV file.

    Rows missing a name or a valid phone number are skipped and listed in the
    response; the rest are written in batches.
    """
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .csv files are accepted",
        )

    content = await file.read()
    if len(content) > MAX_IMPORT_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {MAX_IMPORT_SIZE // (1024*1024)}MB",
        )

    result = await importer.import_csv(content)
    logger.info(
        f"CSV import {file.filename} by {current_user.id}: "
        f"{result['records_processed']} enrolled, {len(result['skipped'])} skipped"
    )
    return EmployeeImportResult(**result)


@router.get("", response_model=List[Employee])
async def list_employees(
    client_name: Optional[str] = None,
    status_filter: Optional[EmployeeStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require_admin),
    store: EmployeeStore = Depends(get_employee_store),
):
    """List employees, newest first."""
    records = await store.list_employees(
        client_name=client_name,
        status=status_filter,
        search=search,
        limit=limit,
        offset=offset,
    )
    return [Employee.model_validate(r) for r in records]


@router.get("/stats", response_model=EmployeeStats)
async def employee_stats(
    current_user: User = Depends(require_admin),
    store: EmployeeStore = Depends(get_employee_store),
):
    """Dashboard counters and the five most recent enrollments."""
    stats = await store.stats()
    return EmployeeStats(
        active=stats["active"],
        on_leave=stats["on_leave"],
        inactive_or_exited=stats["inactive_or_exited"],
        hires_last_six_months=stats["hires_last_six_months"],
        recent=[EmployeeSummary.model_validate(r) for r in stats["recent"]],
    )


@router.get("/me", response_model=Employee)
async def get_my_record(
    current_user: User = Depends(get_current_user),
    store: EmployeeStore = Depends(get_employee_store),
):
    """The signed-in employee's own record, matched by phone number."""
    if not current_user.phone:
        raise NotFoundError("No phone number on this account", resource="employee")

    record = await store.find_by_phone(local_phone(current_user.phone, settings.default_country_code))
    if not record:
        raise NotFoundError("No employee record for this phone number", resource="employee")
    return Employee.model_validate(record)


@router.get("/{employee_id}", response_model=Employee)
async def get_employee(
    employee_id: str,
    current_user: User = Depends(require_admin),
    store: EmployeeStore = Depends(get_employee_store),
):
    return Employee.model_validate(await _get_or_404(store, employee_id))


@router.get("/{employee_id}/qr")
async def get_employee_qr(
    employee_id: str,
    current_user: User = Depends(require_admin),
    store: EmployeeStore = Depends(get_employee_store),
):
    """QR badge as a PNG image."""
    record = await _get_or_404(store, employee_id)

    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=1,
    )
    qr.add_data(record["qr_code_data"] or record["employee_id"])
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return Response(content=buf.getvalue(), media_type="image/png")


@router.patch("/{employee_id}", response_model=Employee)
async def update_employee(
    employee_id: str,
    changes: EmployeeUpdate,
    current_user: User = Depends(require_admin),
    store: EmployeeStore = Depends(get_employee_store),
):
    """
    Edit an employee's profile or change their status.

    Only fields present in the body are written.
    """
    updated = await store.update(parse_record_id(employee_id, "employee"), changes)
    if not updated:
        raise NotFoundError("Employee not found", resource="employee")
    logger.info(f"Employee {updated['employee_id']} updated by {current_user.id}")
    return Employee.model_validate(updated)


@router.post("/{employee_id}/regenerate-id", response_model=Employee)
async def regenerate_employee_id(
    employee_id: str,
    current_user: User = Depends(require_admin),
    store: EmployeeStore = Depends(get_employee_store),
):
    """Issue a new employee code; QR data and search tokens follow."""
    updated = await store.regenerate_employee_id(parse_record_id(employee_id, "employee"))
    if not updated:
        raise NotFoundError("Employee not found", resource="employee")
    return Employee.model_validate(updated)
