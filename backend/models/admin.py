"""
Admin claim management models.

Fields are Optional so that missing inputs reach the service and come back
as invalid-argument errors rather than generic validation failures.
"""

from typing import Optional
from pydantic import BaseModel


class CreateStateAdminRequest(BaseModel):
    email: Optional[str] = None
    state: Optional[str] = None


class SetSuperAdminRequest(BaseModel):
    email: Optional[str] = None


class ClaimResult(BaseModel):
    """Result of a claim mutation."""
    message: str
    user_id: str
    claims: dict
