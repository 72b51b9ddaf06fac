"""
PostgreSQL grant store.
"""

from typing import Optional

import asyncpg

from shared.errors import StorageError
from shared.logging import get_logger

from ..models import Grant
from .base import GrantStore

DB_ERRORS = (OSError, asyncpg.PostgresError, asyncpg.InterfaceError)


class PostgresGrantStore(GrantStore):
    """Grant store backed by a ``granted_purchases`` table."""

    def __init__(self, dsn: str, command_timeout: float = 30):
        self.dsn = dsn
        self.command_timeout = command_timeout
        self.logger = get_logger("grants.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=2,
                max_size=10,
                command_timeout=self.command_timeout
            )
            await self._create_tables()
            self.logger.info("PostgreSQL grant store started")

        except DB_ERRORS as e:
            self.logger.error("Failed to start PostgreSQL grant store", error=str(e))
            raise StorageError(f"Failed to start grant store: {e}")

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL grant store stopped")

    async def _create_tables(self):
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS granted_purchases (
                    purchase_id VARCHAR(64) PRIMARY KEY,
                    identity_handle VARCHAR(64) NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)

    def _require_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise StorageError("Grant store is not started")
        return self.pool

    async def get(self, purchase_id: str) -> Optional[Grant]:
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT purchase_id, identity_handle
                    FROM granted_purchases WHERE purchase_id = $1
                """, purchase_id)
        except DB_ERRORS as e:
            self.logger.error("Error loading grant", purchase_id=purchase_id, error=str(e))
            raise StorageError(details={"purchase_id": purchase_id})

        if row is None:
            return None
        return Grant(purchase_id=row["purchase_id"], identity_handle=row["identity_handle"])

    async def put(self, purchase_id: str, identity_handle: str) -> Optional[str]:
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                async with conn.transaction():
                    previous = await conn.fetchval("""
                        SELECT identity_handle FROM granted_purchases
                        WHERE purchase_id = $1 FOR UPDATE
                    """, purchase_id)
                    await conn.execute("""
                        INSERT INTO granted_purchases (purchase_id, identity_handle)
                        VALUES ($1, $2)
                        ON CONFLICT (purchase_id) DO UPDATE SET
                            identity_handle = EXCLUDED.identity_handle,
                            updated_at = NOW()
                    """, purchase_id, identity_handle)
        except DB_ERRORS as e:
            self.logger.error("Error saving grant", purchase_id=purchase_id, error=str(e))
            raise StorageError(details={"purchase_id": purchase_id})

        self.logger.info("Grant saved", purchase_id=purchase_id,
                         identity_handle=identity_handle, previous_handle=previous)
        return previous

    async def remove(self, purchase_id: str) -> Optional[str]:
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                removed = await conn.fetchval("""
                    DELETE FROM granted_purchases WHERE purchase_id = $1
                    RETURNING identity_handle
                """, purchase_id)
        except DB_ERRORS as e:
            self.logger.error("Error deleting grant", purchase_id=purchase_id, error=str(e))
            raise StorageError(details={"purchase_id": purchase_id})

        if removed is None:
            self.logger.warning("Grant not found for deletion", purchase_id=purchase_id)
        else:
            self.logger.info("Grant deleted", purchase_id=purchase_id, identity_handle=removed)
        return removed

    async def health_check(self) -> bool:
        """Check database health."""
        if self.pool is None:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
                return True
        except DB_ERRORS:
            return False
