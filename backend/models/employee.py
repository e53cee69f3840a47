"""
Employee record models for CISS Workforce.
"""

from datetime import date, datetime
from typing import Optional, List
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator

from models.common import phone_digits


class EmployeeStatus(str, Enum):
    """Employment status."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "OnLeave"
    EXITED = "Exited"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class MaritalStatus(str, Enum):
    MARRIED = "Married"
    UNMARRIED = "Unmarried"


class EmployeeBase(BaseModel):
    """Fields captured on the enrollment form."""
    client_name: str = Field(..., min_length=1, max_length=255)
    resource_id_number: Optional[str] = None
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Gender = Gender.OTHER
    father_name: str = ""
    mother_name: str = ""
    marital_status: MaritalStatus = MaritalStatus.UNMARRIED
    spouse_name: Optional[str] = None
    district: str = ""
    pan_number: Optional[str] = None

    identity_proof_type: Optional[str] = None
    identity_proof_number: Optional[str] = None
    identity_proof_url_front: Optional[str] = None
    identity_proof_url_back: Optional[str] = None

    address_proof_type: Optional[str] = None
    address_proof_number: Optional[str] = None
    address_proof_url_front: Optional[str] = None
    address_proof_url_back: Optional[str] = None

    signature_url: Optional[str] = None

    epf_uan_number: Optional[str] = None
    esic_number: Optional[str] = None
    bank_account_number: str = ""
    ifsc_code: str = ""
    bank_name: str = ""
    full_address: str = ""
    email_address: Optional[str] = None
    phone_number: str = Field(..., min_length=10)
    profile_picture_url: Optional[str] = None
    bank_passbook_statement_url: Optional[str] = None
    police_clearance_certificate_url: Optional[str] = None

    joining_date: datetime

    @field_validator("phone_number")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        """Phone numbers are stored as digits only."""
        digits = phone_digits(v)
        if len(digits) < 10:
            raise ValueError("Phone number must have at least 10 digits")
        return digits


class EmployeeCreate(EmployeeBase):
    """Enrollment request model."""
    pass


# Columns every stored record must carry. A partial edit may omit them but not null them.
NON_NULLABLE_FIELDS = (
    "client_name",
    "first_name",
    "last_name",
    "gender",
    "father_name",
    "mother_name",
    "marital_status",
    "district",
    "bank_account_number",
    "ifsc_code",
    "bank_name",
    "full_address",
    "phone_number",
    "joining_date",
    "status",
)


def null_required_fields(data: dict) -> list[str]:
    """Names of non-nullable fields that are present in `data` with a None value."""
    return [name for name in NON_NULLABLE_FIELDS if name in data and data[name] is None]


class EmployeeUpdate(BaseModel):
    """Partial profile edit. Only fields that are sent are written."""
    client_name: Optional[str] = Field(None, min_length=1, max_length=255)
    resource_id_number: Optional[str] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    marital_status: Optional[MaritalStatus] = None
    spouse_name: Optional[str] = None
    district: Optional[str] = None
    pan_number: Optional[str] = None
    identity_proof_type: Optional[str] = None
    identity_proof_number: Optional[str] = None
    identity_proof_url_front: Optional[str] = None
    identity_proof_url_back: Optional[str] = None
    address_proof_type: Optional[str] = None
    address_proof_number: Optional[str] = None
    address_proof_url_front: Optional[str] = None
    address_proof_url_back: Optional[str] = None
    signature_url: Optional[str] = None
    epf_uan_number: Optional[str] = None
    esic_number: Optional[str] = None
    bank_account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    bank_name: Optional[str] = None
    full_address: Optional[str] = None
    email_address: Optional[str] = None
    phone_number: Optional[str] = None
    profile_picture_url: Optional[str] = None
    bank_passbook_statement_url: Optional[str] = None
    police_clearance_certificate_url: Optional[str] = None
    joining_date: Optional[datetime] = None
    status: Optional[EmployeeStatus] = None
    exit_date: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data):
        if isinstance(data, dict):
            nulled = null_required_fields(data)
            if nulled:
                raise ValueError(f"{', '.join(nulled)} cannot be null")
        return data

    @field_validator("phone_number")
    @classmethod
    def normalize_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        digits = phone_digits(v)
        if len(digits) < 10:
            raise ValueError("Phone number must have at least 10 digits")
        return digits


class Employee(EmployeeBase):
    """Full employee record as stored."""
    id: str
    employee_id: str
    full_name: str
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    exit_date: Optional[datetime] = None
    qr_code_data: Optional[str] = None
    searchable_fields: List[str] = []
    created_at: datetime
    updated_at: datetime

    # Records written before validation existed may carry short numbers
    @field_validator("phone_number")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        return phone_digits(v)

    class Config:
        from_attributes = True


class EmployeeSummary(BaseModel):
    """Row in the recent-activity list."""
    id: str
    employee_id: str
    full_name: str
    client_name: str
    status: EmployeeStatus
    created_at: datetime


class EmployeeStats(BaseModel):
    """Dashboard counters."""
    active: int = 0
    on_leave: int = 0
    inactive_or_exited: int = 0
    hires_last_six_months: int = 0
    recent: List[EmployeeSummary] = []


class SkippedImportRow(BaseModel):
    line: int
    reason: str


class EmployeeImportResult(BaseModel):
    """Outcome of a bulk CSV import."""
    success: bool
    message: str
    records_processed: int
    skipped: List[SkippedImportRow] = []
