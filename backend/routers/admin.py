"""
Admin claim management API.

Permission checks happen in AdminClaimsService so that the error taxonomy
(permission-denied, invalid-argument, not-found, already-exists) is the same
whichever way the operations are invoked.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from auth.claims import AdminClaimsService
from auth.dependencies import get_current_user, get_optional_user
from auth.models import User
from dependencies import get_claims_service
from models.admin import ClaimResult, CreateStateAdminRequest, SetSuperAdminRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/state-admins", response_model=ClaimResult)
async def create_state_admin(
    request: CreateStateAdminRequest,
    current_user: User = Depends(get_current_user),
    service: AdminClaimsService = Depends(get_claims_service),
):
    """Grant the stateAdmin role for a state. Super admins only."""
    result = await service.create_state_admin(current_user, request.email, request.state)
    return ClaimResult(**result)


@router.post("/super-admins", response_model=ClaimResult)
async def set_super_admin(
    request: SetSuperAdminRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    service: AdminClaimsService = Depends(get_claims_service),
):
    """
    Grant super admin.

    Open to anyone until the first super admin exists, then super admins only.
    """
    result = await service.set_super_admin(current_user, request.email)
    return ClaimResult(**result)
