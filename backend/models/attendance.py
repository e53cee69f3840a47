"""
Attendance log models.
"""

from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field


class AttendanceStatus(str, Enum):
    IN = "In"
    OUT = "Out"


class AttendanceCreate(BaseModel):
    """A mark recorded after scanning an employee's QR badge."""
    employee_id: str = Field(..., min_length=1, description="Human employee code from the badge")
    status: AttendanceStatus
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    location: Optional[str] = None
    # data:<mime>;base64,<payload> of the watermarked photo
    photo_data_uri: Optional[str] = None


class AttendanceLog(BaseModel):
    id: str
    employee_id: str
    employee_name: str
    status: AttendanceStatus
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location: Optional[str] = None
    photo_path: Optional[str] = None
    recorded_at: datetime
    recorded_by: Optional[str] = None

    class Config:
        from_attributes = True
