"""Request/response models for the CISS Workforce API."""

from .employee import (
    EmployeeStatus,
    Gender,
    MaritalStatus,
    EmployeeCreate,
    EmployeeUpdate,
    Employee,
    EmployeeSummary,
    EmployeeStats,
    EmployeeImportResult,
)
from .export_job import ExportFilters, ExportJobRequest, ExportJobResponse
from .attendance import AttendanceStatus, AttendanceCreate, AttendanceLog
from .documents import VerifyDocumentRequest, VerifyDocumentOutput
from .admin import CreateStateAdminRequest, SetSuperAdminRequest, ClaimResult
from .client import ClientCreate, Client
from .field_officer import (
    FieldOfficerCreate,
    FieldOfficerUpdate,
    FieldOfficer,
    FieldOfficerResult,
)

__all__ = [
    "EmployeeStatus",
    "Gender",
    "MaritalStatus",
    "EmployeeCreate",
    "EmployeeUpdate",
    "Employee",
    "EmployeeSummary",
    "EmployeeStats",
    "EmployeeImportResult",
    "ExportFilters",
    "ExportJobRequest",
    "ExportJobResponse",
    "AttendanceStatus",
    "AttendanceCreate",
    "AttendanceLog",
    "VerifyDocumentRequest",
    "VerifyDocumentOutput",
    "CreateStateAdminRequest",
    "SetSuperAdminRequest",
    "ClaimResult",
    "ClientCreate",
    "Client",
    "FieldOfficerCreate",
    "FieldOfficerUpdate",
    "FieldOfficer",
    "FieldOfficerResult",
]
