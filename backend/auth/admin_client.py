"""
User directory over the Supabase Auth admin API.

Requires the service-role client. Listing is paginated; every lookup walks
pages until a short page signals the end, so results do not depend on how
many accounts exist.
"""

import asyncio
import logging
from typing import AsyncIterator, Callable, Optional

from exceptions import InternalError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


class UserDirectory:
    """Account lookup and claim writes for admin operations."""

    def __init__(self, admin_client, page_size: int = DEFAULT_PAGE_SIZE):
        self.client = admin_client
        self.page_size = page_size

    def _admin(self):
        if self.client is None:
            raise InternalError("User administration is not configured.")
        return self.client.auth.admin

    async def iter_users(self) -> AsyncIterator:
        """Yield every account, one page at a time."""
        admin = self._admin()
        page = 1
        while True:
            users = await asyncio.to_thread(admin.list_users, page=page, per_page=self.page_size)
            users = list(users or [])
            for user in users:
                yield user
            if len(users) < self.page_size:
                return
            page += 1

    async def find_user(self, predicate: Callable) -> Optional[object]:
        async for user in self.iter_users():
            if predicate(user):
                return user
        return None

    async def find_by_email(self, email: str) -> Optional[object]:
        wanted = email.strip().lower()
        return await self.find_user(lambda u: (u.email or "").lower() == wanted)

    async def any_user_with_claim(self, claim: str, value=True) -> bool:
        """True if at least one account carries app_metadata[claim] == value."""
        holder = await self.find_user(lambda u: (u.app_metadata or {}).get(claim) == value)
        return holder is not None

    async def set_claims(self, user_id: str, claims: dict) -> dict:
        """
        Write claims into the account's app_metadata.

        Supabase merges app_metadata keys, so claims not named here are kept.
        """
        admin = self._admin()
        response = await asyncio.to_thread(
            admin.update_user_by_id, user_id, {"app_metadata": claims}
        )
        user = getattr(response, "user", None)
        updated = (user.app_metadata if user else None) or claims
        logger.info(f"Updated claims for user {user_id}: {sorted(claims)}")
        return dict(updated)

    async def create_user(self, email: str, password: str, name: str, claims: dict):
        """Create a confirmed email/password account carrying `claims`. Returns the new user."""
        admin = self._admin()
        response = await asyncio.to_thread(admin.create_user, {
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": {"full_name": name},
            "app_metadata": claims,
        })
        user = response.user
        logger.info(f"Created account {user.id} with claims {sorted(claims)}")
        return user

    async def delete_user(self, user_id: str) -> None:
        admin = self._admin()
        await asyncio.to_thread(admin.delete_user, user_id)
        logger.info(f"Deleted account {user_id}")
