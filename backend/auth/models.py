"""
Authentication models for CISS Workforce.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

ADMIN_ROLES = frozenset({"superAdmin", "stateAdmin", "admin"})


class User(BaseModel):
    """
    User model returned from auth.

    `claims` mirrors the account's app_metadata, which only the service role
    can write: role, state and the superAdmin flag.
    """
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    email_confirmed: bool = False
    created_at: Optional[datetime] = None
    full_name: Optional[str] = None
    claims: dict = {}

    class Config:
        from_attributes = True

    @property
    def role(self) -> Optional[str]:
        return self.claims.get("role")

    @property
    def is_super_admin(self) -> bool:
        return self.claims.get("superAdmin") is True

    @property
    def is_admin(self) -> bool:
        return self.is_super_admin or self.role in ADMIN_ROLES

    @classmethod
    def from_auth_data(cls, data: dict) -> "User":
        return cls(
            id=data["id"],
            email=data.get("email") or None,
            phone=data.get("phone") or None,
            email_confirmed=data.get("email_confirmed", False),
            created_at=data.get("created_at"),
            full_name=(data.get("user_metadata") or {}).get("full_name"),
            claims=data.get("app_metadata") or {},
        )


class UserLogin(BaseModel):
    """Admin email/password login model."""
    email: EmailStr
    password: str


class OtpRequest(BaseModel):
    """Send a one-time code to a phone number."""
    phone_number: str = Field(..., min_length=10)


class OtpVerifyRequest(BaseModel):
    """Exchange a one-time code for a session."""
    phone_number: str = Field(..., min_length=10)
    token: str = Field(..., min_length=4, max_length=10)


class TokenResponse(BaseModel):
    """Token response model."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: User
