"""
Admin claim management.

Two operations mutate authorization claims:

- create_state_admin: a super admin grants {role: "stateAdmin", state}.
- set_super_admin: grants {superAdmin: true, role: "superAdmin"}. The first
  super admin can be created by anyone; after that only super admins may add
  more.

Errors are raised as typed WorkforceExceptions and reach the HTTP caller
directly.
"""

import logging
from typing import Optional

from exceptions import (
    AlreadyExistsError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    WorkforceException,
)

from .admin_client import UserDirectory
from .models import User

logger = logging.getLogger(__name__)

SUPER_ADMIN_CLAIMS = {"superAdmin": True, "role": "superAdmin"}


def required_field(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidArgumentError(f"The '{field}' field is required.", field=field)
    return value


class AdminClaimsService:
    def __init__(self, directory: UserDirectory):
        self.directory = directory

    async def create_state_admin(
        self,
        caller: Optional[User],
        email: Optional[str],
        state: Optional[str],
    ) -> dict:
        """Grant the stateAdmin role for `state` to the account with `email`."""
        if caller is None or not caller.is_super_admin:
            raise PermissionDeniedError(
                "Only super admins can create state admins.",
                required_claim="superAdmin",
            )

        email = required_field(email, "email")
        state = required_field(state, "state")

        try:
            target = await self.directory.find_by_email(email)
            if target is None:
                raise NotFoundError(f"No user found with email {email}.", resource="user")

            claims = {"role": "stateAdmin", "state": state}
            await self.directory.set_claims(target.id, claims)
        except WorkforceException:
            raise
        except Exception as e:
            logger.error(f"create_state_admin failed: {type(e).__name__}: {e}")
            raise InternalError("Failed to create state admin.") from e

        logger.info(f"User {caller.id} made {target.id} state admin for {state}")
        return {
            "message": f"Successfully made {email} a state admin for {state}.",
            "user_id": target.id,
            "claims": claims,
        }

    async def set_super_admin(self, caller: Optional[User], email: Optional[str]) -> dict:
        """Grant super admin to the account with `email`."""
        email = required_field(email, "email")

        try:
            caller_is_super = caller is not None and caller.is_super_admin
            if not caller_is_super and await self.directory.any_user_with_claim("superAdmin"):
                raise AlreadyExistsError(
                    "A super admin already exists. Only a super admin can add more."
                )

            target = await self.directory.find_by_email(email)
            if target is None:
                raise NotFoundError(f"No user found with email {email}.", resource="user")

            await self.directory.set_claims(target.id, dict(SUPER_ADMIN_CLAIMS))
        except WorkforceException:
            raise
        except Exception as e:
            logger.error(f"set_super_admin failed: {type(e).__name__}: {e}")
            raise InternalError("Failed to set super admin.") from e

        logger.info(f"{target.id} is now a super admin (granted by {caller.id if caller else 'bootstrap'})")
        return {
            "message": f"Successfully made {email} a super admin.",
            "user_id": target.id,
            "claims": dict(SUPER_ADMIN_CLAIMS),
        }
