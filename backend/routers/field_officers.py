"""
Field officer management API.

Permission checks happen in FieldOfficerService, as for the admin claim
routes.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_current_user
from auth.field_officers import FieldOfficerService
from auth.models import User
from dependencies import get_field_officer_service
from models.common import parse_record_id
from models.field_officer import (
    FieldOfficer,
    FieldOfficerCreate,
    FieldOfficerResult,
    FieldOfficerUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[FieldOfficer])
async def list_field_officers(
    current_user: User = Depends(get_current_user),
    service: FieldOfficerService = Depends(get_field_officer_service),
):
    return [FieldOfficer.model_validate(o) for o in await service.list_officers(current_user)]


@router.post("", response_model=FieldOfficerResult, status_code=status.HTTP_201_CREATED)
async def create_field_officer(
    request: FieldOfficerCreate,
    current_user: User = Depends(get_current_user),
    service: FieldOfficerService = Depends(get_field_officer_service),
):
    """Create a field officer account for a set of districts."""
    result = await service.create_field_officer(
        current_user,
        request.email,
        request.password,
        request.name,
        request.assigned_districts,
    )
    return FieldOfficerResult(**result)


@router.patch("/{uid}", response_model=FieldOfficerResult)
async def update_field_officer(
    uid: str,
    request: FieldOfficerUpdate,
    current_user: User = Depends(get_current_user),
    service: FieldOfficerService = Depends(get_field_officer_service),
):
    result = await service.update_field_officer(
        current_user,
        parse_record_id(uid, "field_officer"),
        request.name,
        request.assigned_districts,
    )
    return FieldOfficerResult(**result)


@router.delete("/{uid}", response_model=FieldOfficerResult)
async def delete_field_officer(
    uid: str,
    current_user: User = Depends(get_current_user),
    service: FieldOfficerService = Depends(get_field_officer_service),
):
    """Delete the account and its directory record."""
    result = await service.delete_field_officer(current_user, parse_record_id(uid, "field_officer"))
    return FieldOfficerResult(**result)
