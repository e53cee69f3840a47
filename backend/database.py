"""
Database connection management using asyncpg.

Provides connection pooling and helper methods for PostgreSQL operations.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

import asyncpg

from config import settings

logger = logging.getLogger(__name__)


class Database:
    """
    Async PostgreSQL database connection manager using asyncpg.

    Usage:
        db = Database()
        await db.connect()

        async with db.acquire() as conn:
            result = await conn.fetch("SELECT * FROM employees")

        await db.disconnect()
    """

    def __init__(self, dsn: Optional[str] = None):
        self.dsn = dsn or settings.database_url
        self._pool: Optional[asyncpg.Pool] = None

    @property
    def is_connected(self) -> bool:
        """Check if database is connected."""
        return self._pool is not None

    @property
    def pool(self) -> asyncpg.Pool:
        """Get the connection pool, raise if not connected."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._pool

    async def connect(
        self,
        min_size: int = 2,
        max_size: int = 5,
        command_timeout: float = 30.0,
    ) -> None:
        """
        Create connection pool.

        Note:
            Supabase fronts Postgres with pgbouncer in transaction mode, which
            doesn't support prepared statements.
        """
        if self._pool is not None:
            logger.warning("Database already connected")
            return

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.dsn,
                min_size=min_size,
                max_size=max_size,
                command_timeout=command_timeout,
                max_inactive_connection_lifetime=300.0,
                statement_cache_size=0,
            )
            logger.info(f"Database connected (pool: {min_size}-{max_size})")
        except Exception as e:
            # DSN is not logged
            logger.error(f"Failed to connect to database: {type(e).__name__}: {e}")
            raise RuntimeError("Database connection failed") from e

    async def disconnect(self) -> None:
        """Close connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("Database disconnected")

    @asynccontextmanager
    async def acquire(self):
        """Acquire a connection from the pool."""
        async with self.pool.acquire() as connection:
            yield connection

    async def execute(self, query: str, *args) -> str:
        """Execute a query and return status."""
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args) -> list[asyncpg.Record]:
        """Fetch all rows from a query."""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args) -> Optional[asyncpg.Record]:
        """Fetch a single row from a query."""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args) -> Any:
        """Fetch a single value from a query."""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def health_check(self) -> bool:
        """Check if database is accessible."""
        if self._pool is None:
            return False
        try:
            return await self.fetchval("SELECT 1") == 1
        except Exception:
            logger.error("Database health check failed")
            return False


# Global database instance
db = Database()


async def init_db() -> None:
    """Initialize database connection (call on startup)."""
    await db.connect()
    logger.info("Database initialized")


async def close_db() -> None:
    """Close database connection (call on shutdown)."""
    await db.disconnect()
    logger.info("Database closed")


def rows_affected(status: Optional[str]) -> int:
    """Parse an asyncpg status string like "UPDATE 1" into its row count."""
    if not status:
        return 0
    try:
        return int(status.split()[-1])
    except (ValueError, IndexError):
        return 0
