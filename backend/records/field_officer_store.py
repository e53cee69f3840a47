"""
Field officer directory.

One row per field officer account, keyed by the auth user id (`uid`). The
account's claims carry the same district list; this table is what the admin
screens list and edit.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from database import rows_affected

logger = logging.getLogger(__name__)


def _row_to_officer(row) -> dict:
    officer = dict(row)
    officer["id"] = str(officer["id"])
    officer["uid"] = str(officer["uid"])
    officer["assigned_districts"] = list(officer.get("assigned_districts") or [])
    return officer


class FieldOfficerStore:
    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS field_officers (
        id UUID PRIMARY KEY,
        uid UUID NOT NULL UNIQUE,
        name TEXT NOT NULL,
        email TEXT NOT NULL,
        assigned_districts TEXT[] NOT NULL DEFAULT '{}',
        created_at TIMESTAMPTZ DEFAULT NOW(),
        updated_at TIMESTAMPTZ
    );
    """

    def __init__(self, db_connection=None):
        self.db = db_connection
        self._memory_store: dict[str, dict] = {}
        self._lock = asyncio.Lock()

    async def init_table(self) -> None:
        if self.db:
            try:
                await self.db.execute(self.CREATE_TABLE_SQL)
                logger.info("Field officers table initialized")
            except Exception as e:
                logger.warning(f"Failed to create field_officers table: {type(e).__name__}")

    async def create(self, uid: str, name: str, email: str, assigned_districts: list[str]) -> dict:
        officer = {
            "id": str(uuid4()),
            "uid": uid,
            "name": name,
            "email": email,
            "assigned_districts": list(assigned_districts),
            "created_at": datetime.now(timezone.utc),
            "updated_at": None,
        }

        if self.db:
            row = await self.db.fetchrow(
                """
                INSERT INTO field_officers (id, uid, name, email, assigned_districts, created_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING *
                """,
                officer["id"],
                officer["uid"],
                officer["name"],
                officer["email"],
                officer["assigned_districts"],
                officer["created_at"],
            )
            return _row_to_officer(row)

        async with self._lock:
            self._memory_store[uid] = officer
        return dict(officer)

    async def get_by_uid(self, uid: str) -> Optional[dict]:
        if self.db:
            row = await self.db.fetchrow("SELECT * FROM field_officers WHERE uid = $1", uid)
            return _row_to_officer(row) if row else None
        officer = self._memory_store.get(uid)
        return dict(officer) if officer else None

    async def list_officers(self) -> list[dict]:
        if self.db:
            rows = await self.db.fetch("SELECT * FROM field_officers ORDER BY name")
            return [_row_to_officer(row) for row in rows]
        return sorted((dict(o) for o in self._memory_store.values()), key=lambda o: o["name"])

    async def update(self, uid: str, name: str, assigned_districts: list[str]) -> Optional[dict]:
        now = datetime.now(timezone.utc)
        if self.db:
            row = await self.db.fetchrow(
                """
                UPDATE field_officers SET name = $1, assigned_districts = $2, updated_at = $3
                WHERE uid = $4
                RETURNING *
                """,
                name,
                list(assigned_districts),
                now,
                uid,
            )
            return _row_to_officer(row) if row else None

        async with self._lock:
            officer = self._memory_store.get(uid)
            if officer is None:
                return None
            officer.update(name=name, assigned_districts=list(assigned_districts), updated_at=now)
            return dict(officer)

    async def delete_by_uid(self, uid: str) -> bool:
        if self.db:
            result = await self.db.execute("DELETE FROM field_officers WHERE uid = $1", uid)
            return rows_affected(result) > 0
        async with self._lock:
            return self._memory_store.pop(uid, None) is not None
