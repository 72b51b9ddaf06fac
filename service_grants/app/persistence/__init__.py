"""
Grant persistence.

- base: the GrantStore contract
- postgres: asyncpg-backed store used in deployments
- memory: process-local store for local runs and tests
"""

from .base import GrantStore
from .memory import MemoryGrantStore
from .postgres import PostgresGrantStore

__all__ = ["GrantStore", "MemoryGrantStore", "PostgresGrantStore", "create_grant_store"]


def create_grant_store(backend: str, dsn: str) -> GrantStore:
    """Build the store selected by configuration."""
    if backend == "memory":
        return MemoryGrantStore()
    return PostgresGrantStore(dsn)
