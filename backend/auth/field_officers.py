"""
Field officer account management.

A field officer is an email/password account with the claims
{role: "fieldOfficer", districts: [...]} plus a row in the field officer
directory. Only super admins manage them. Errors follow the same taxonomy
as AdminClaimsService.
"""

import logging
from typing import Optional

from gotrue.errors import AuthApiError

from exceptions import (
    AlreadyExistsError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    WorkforceException,
)
from records.field_officer_store import FieldOfficerStore

from .admin_client import UserDirectory
from .claims import required_field
from .models import User

logger = logging.getLogger(__name__)

FIELD_OFFICER_ROLE = "fieldOfficer"
MIN_PASSWORD_LENGTH = 6


def field_officer_claims(districts: list[str]) -> dict:
    return {"role": FIELD_OFFICER_ROLE, "districts": list(districts)}


def _districts(value) -> list[str]:
    if not isinstance(value, list):
        raise InvalidArgumentError("'assigned_districts' must be a list.", field="assigned_districts")
    return [d.strip() for d in value if isinstance(d, str) and d.strip()]


def _is_duplicate_email(error: AuthApiError) -> bool:
    return getattr(error, "code", None) in ("email_exists", "user_already_exists")


def _is_missing_user(error: AuthApiError) -> bool:
    return getattr(error, "status", None) == 404 or getattr(error, "code", None) == "user_not_found"


class FieldOfficerService:
    def __init__(self, directory: UserDirectory, store: FieldOfficerStore):
        self.directory = directory
        self.store = store

    @staticmethod
    def _check_caller(caller: Optional[User], action: str) -> None:
        if caller is None or not caller.is_super_admin:
            raise PermissionDeniedError(
                f"Only super admins can {action} field officers.",
                required_claim="superAdmin",
            )

    async def list_officers(self, caller: Optional[User]) -> list[dict]:
        self._check_caller(caller, "list")
        return await self.store.list_officers()

    async def create_field_officer(
        self,
        caller: Optional[User],
        email: Optional[str],
        password: Optional[str],
        name: Optional[str],
        assigned_districts,
    ) -> dict:
        """Create the account, set its claims and record it in the directory."""
        self._check_caller(caller, "create")

        email = required_field(email, "email")
        name = required_field(name, "name")
        if not password:
            raise InvalidArgumentError("The 'password' field is required.", field="password")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidArgumentError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.",
                field="password",
            )
        districts = _districts(assigned_districts)

        try:
            if await self.directory.find_by_email(email) is not None:
                raise AlreadyExistsError("An account with this email address already exists.")
            user = await self.directory.create_user(email, password, name, field_officer_claims(districts))
            officer = await self.store.create(user.id, name, email, districts)
        except WorkforceException:
            raise
        except AuthApiError as e:
            if _is_duplicate_email(e):
                raise AlreadyExistsError("An account with this email address already exists.") from e
            logger.error(f"create_field_officer failed: {e}")
            raise InternalError("An error occurred while creating the field officer.") from e
        except Exception as e:
            logger.error(f"create_field_officer failed: {type(e).__name__}: {e}")
            raise InternalError("An error occurred while creating the field officer.") from e

        logger.info(f"User {caller.id} created field officer {officer['uid']} for {districts}")
        return {
            "message": f"Successfully created field officer {name} with email {email}.",
            "officer": officer,
        }

    async def update_field_officer(
        self,
        caller: Optional[User],
        uid: str,
        name: Optional[str],
        assigned_districts,
    ) -> dict:
        """
        Change an officer's name and districts.

        The directory row is checked first, so an unknown uid changes no claims.
        """
        self._check_caller(caller, "update")

        name = required_field(name, "name")
        districts = _districts(assigned_districts)

        try:
            if await self.store.get_by_uid(uid) is None:
                raise NotFoundError("Field officer not found.", resource="field_officer")
            await self.directory.set_claims(uid, field_officer_claims(districts))
            officer = await self.store.update(uid, name, districts)
        except WorkforceException:
            raise
        except Exception as e:
            logger.error(f"update_field_officer failed: {type(e).__name__}: {e}")
            raise InternalError("An error occurred while updating the field officer.") from e

        logger.info(f"User {caller.id} updated field officer {uid}")
        return {"message": f"Successfully updated field officer {name}.", "officer": officer}

    async def delete_field_officer(self, caller: Optional[User], uid: str) -> dict:
        """
        Remove the directory row, if any, then the account.

        An account that is already gone is not an error.
        """
        self._check_caller(caller, "delete")

        try:
            await self.store.delete_by_uid(uid)
            await self.directory.delete_user(uid)
        except WorkforceException:
            raise
        except AuthApiError as e:
            if _is_missing_user(e):
                logger.warning(f"Field officer account {uid} not found; directory row removed")
                return {
                    "message": "Field officer account not found, but the directory record was removed if it existed."
                }
            logger.error(f"delete_field_officer failed: {e}")
            raise InternalError("An error occurred while deleting the field officer.") from e
        except Exception as e:
            logger.error(f"delete_field_officer failed: {type(e).__name__}: {e}")
            raise InternalError("An error occurred while deleting the field officer.") from e

        logger.info(f"User {caller.id} deleted field officer {uid}")
        return {"message": "Successfully deleted field officer."}
