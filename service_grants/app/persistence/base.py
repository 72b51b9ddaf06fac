"""
Grant store interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import Grant


class GrantStore(ABC):
    """Persisted purchase to identity handle mapping.

    At most one grant exists per purchase. A revoked grant is deleted, never
    stored with an empty handle. Writes return the handle they replaced, read
    in the same transaction, so callers act on confirmed state rather than on
    an earlier read. Failures raise ``StorageError``.
    """

    async def start(self):
        """Open connections and prepare the schema."""

    async def stop(self):
        """Release connections."""

    @abstractmethod
    async def get(self, purchase_id: str) -> Optional[Grant]:
        """Return the grant for ``purchase_id``, or None."""

    @abstractmethod
    async def put(self, purchase_id: str, identity_handle: str) -> Optional[str]:
        """Create or replace the grant. Returns the previous handle, if any."""

    @abstractmethod
    async def remove(self, purchase_id: str) -> Optional[str]:
        """Delete the grant. Returns the removed handle, if any."""

    async def health_check(self) -> bool:
        return True
