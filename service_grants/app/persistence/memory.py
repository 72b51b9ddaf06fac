"""
In-process grant store for local runs and tests.

Data is lost on restart.
"""

import asyncio
from typing import Dict, Optional

from shared.logging import get_logger

from ..models import Grant
from .base import GrantStore


class MemoryGrantStore(GrantStore):

    def __init__(self, grants: Optional[Dict[str, str]] = None):
        self.grants: Dict[str, str] = dict(grants or {})
        self._lock = asyncio.Lock()
        self.logger = get_logger("grants.persistence.memory")

    async def get(self, purchase_id: str) -> Optional[Grant]:
        handle = self.grants.get(purchase_id)
        if handle is None:
            return None
        return Grant(purchase_id=purchase_id, identity_handle=handle)

    async def put(self, purchase_id: str, identity_handle: str) -> Optional[str]:
        async with self._lock:
            previous = self.grants.get(purchase_id)
            self.grants[purchase_id] = identity_handle
        self.logger.info("Grant saved", purchase_id=purchase_id,
                         identity_handle=identity_handle, previous_handle=previous)
        return previous

    async def remove(self, purchase_id: str) -> Optional[str]:
        async with self._lock:
            removed = self.grants.pop(purchase_id, None)
        self.logger.info("Grant deleted", purchase_id=purchase_id, identity_handle=removed)
        return removed
