"""
Authentication dependencies for FastAPI.

Provides dependency injection for user authentication and role checks in
route handlers.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .supabase_client import supabase_client, verify_jwt
from .models import User

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> User:
    """
    Get the current authenticated user.

    Raises HTTPException 401 if not authenticated.
    """
    if not supabase_client.is_configured():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service not configured"
        )

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_data = await verify_jwt(credentials.credentials)

    if not user_data:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return User.from_auth_data(user_data)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[User]:
    """
    Get the current user if authenticated, None otherwise.

    Does not raise exceptions for missing/invalid tokens.
    """
    if not supabase_client.is_configured():
        return None

    if not credentials:
        return None

    user_data = await verify_jwt(credentials.credentials)

    if not user_data:
        return None

    return User.from_auth_data(user_data)


def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Dependency that requires an admin role claim.

    Super admins, state admins and plain admins all pass.
    """
    if not user.is_admin:
        logger.warning(f"User {user.id} denied admin route (role={user.role})")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user


def require_super_admin(user: User = Depends(get_current_user)) -> User:
    """Dependency that requires the superAdmin claim."""
    if not user.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required"
        )
    return user
