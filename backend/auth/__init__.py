"""
Authentication module for CISS Workforce.

Uses Supabase Auth for phone OTP sign-in, JWT verification and the
authorization claims stored in each account's app_metadata.

This module provides:
- Supabase clients (anon and service role)
- FastAPI dependencies for route-level authentication and role checks
- Admin claim management
"""

from .supabase_client import supabase_client, get_supabase, get_supabase_admin
from .dependencies import (
    get_current_user,
    get_optional_user,
    require_admin,
    require_super_admin,
)
from .models import User, TokenResponse
from .admin_client import UserDirectory
from .claims import AdminClaimsService

__all__ = [
    # Supabase client
    "supabase_client",
    "get_supabase",
    "get_supabase_admin",
    # Dependencies
    "get_current_user",
    "get_optional_user",
    "require_admin",
    "require_super_admin",
    # Models
    "User",
    "TokenResponse",
    # Claims
    "UserDirectory",
    "AdminClaimsService",
]
