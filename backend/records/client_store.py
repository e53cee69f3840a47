"""
Client list store.

Client names are referenced by employee records and export filters by value,
without a foreign key.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from database import rows_affected
from exceptions import AlreadyExistsError

logger = logging.getLogger(__name__)


class ClientStore:
    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS clients (
        id UUID PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        created_at TIMESTAMPTZ DEFAULT NOW()
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
                logger.info("Clients table initialized")
            except Exception as e:
                logger.warning(f"Failed to create clients table: {type(e).__name__}")

    async def list_clients(self) -> list[dict]:
        if self.db:
            rows = await self.db.fetch("SELECT * FROM clients ORDER BY name")
            return [{**dict(row), "id": str(row["id"])} for row in rows]
        return sorted((dict(c) for c in self._memory_store.values()), key=lambda c: c["name"])

    async def create(self, name: str) -> dict:
        """Add a client. Raises AlreadyExistsError on a duplicate name."""
        name = name.strip()
        client = {"id": str(uuid4()), "name": name, "created_at": datetime.now(timezone.utc)}

        if self.db:
            row = await self.db.fetchrow(
                """
                INSERT INTO clients (id, name, created_at) VALUES ($1, $2, $3)
                ON CONFLICT (name) DO NOTHING
                RETURNING *
                """,
                client["id"],
                client["name"],
                client["created_at"],
            )
            if row is None:
                raise AlreadyExistsError(f"Client '{name}' already exists.")
            return {**dict(row), "id": str(row["id"])}

        async with self._lock:
            if any(c["name"].lower() == name.lower() for c in self._memory_store.values()):
                raise AlreadyExistsError(f"Client '{name}' already exists.")
            self._memory_store[client["id"]] = client
        return dict(client)

    async def delete(self, client_id: str) -> bool:
        if self.db:
            result = await self.db.execute("DELETE FROM clients WHERE id = $1", client_id)
            return rows_affected(result) > 0
        async with self._lock:
            return self._memory_store.pop(client_id, None) is not None

    async def get(self, client_id: str) -> Optional[dict]:
        if self.db:
            row = await self.db.fetchrow("SELECT * FROM clients WHERE id = $1", client_id)
            return {**dict(row), "id": str(row["id"])} if row else None
        client = self._memory_store.get(client_id)
        return dict(client) if client else None
