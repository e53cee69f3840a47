"""
Field officer models.

Request fields are Optional so that missing inputs reach the service and come
back as invalid-argument errors, as with the admin claim requests.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class FieldOfficerCreate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    assigned_districts: Optional[List[str]] = None


class FieldOfficerUpdate(BaseModel):
    name: Optional[str] = None
    assigned_districts: Optional[List[str]] = None


class FieldOfficer(BaseModel):
    id: str
    uid: str
    name: str
    email: str
    assigned_districts: List[str] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FieldOfficerResult(BaseModel):
    """Result of a field officer mutation."""
    message: str
    officer: Optional[FieldOfficer] = None
