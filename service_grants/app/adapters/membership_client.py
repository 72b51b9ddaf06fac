"""
Resource-membership client for the repository host.

Membership calls are idempotent from the caller's point of view: removing an
absent member and adding an existing one both succeed.
"""

from typing import Optional
from urllib.parse import quote

import httpx

from shared.metrics import MetricsCollector

from .base import UpstreamClient


class MembershipClient(UpstreamClient):
    """Reads and mutates project membership."""

    upstream = "membership"
    display_name = "Members API"

    def __init__(self, base_url: str, token: str, timeout: float,
                 metrics: Optional[MetricsCollector] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(base_url, timeout, metrics=metrics, transport=transport)
        self.token = token

    @property
    def _headers(self):
        return {"PRIVATE-TOKEN": self.token}

    def _members_url(self, resource_id: str) -> str:
        # Resource ids may be namespaced paths ("group/project")
        return f"{self.base_url}/projects/{quote(resource_id, safe='')}/members"

    async def is_member(self, resource_id: str, handle: str) -> bool:
        response = await self._send(
            "GET", f"{self._members_url(resource_id)}/{handle}", headers=self._headers
        )
        if response.status_code == 404:
            return False
        self._expect_success(response)
        return True

    async def remove_member(self, resource_id: str, handle: str) -> None:
        response = await self._send(
            "DELETE", f"{self._members_url(resource_id)}/{handle}", headers=self._headers
        )
        if response.status_code == 404:
            self.logger.info("Member already absent", resource_id=resource_id, handle=handle)
            return
        self._expect_success(response)
        self.logger.info("Member removed", resource_id=resource_id, handle=handle)

    async def add_member(self, resource_id: str, handle: str, access_level: int) -> None:
        response = await self._send(
            "POST",
            self._members_url(resource_id),
            headers=self._headers,
            json={"user_id": handle, "access_level": access_level}
        )
        if response.status_code == 409:
            self.logger.info("Member already exists", resource_id=resource_id, handle=handle)
            return
        self._expect_success(response)
        self.logger.info("Member added", resource_id=resource_id, handle=handle,
                         access_level=access_level)

    async def revoke(self, resource_id: str, handle: str) -> bool:
        """Remove ``handle`` if it currently is a member. Returns whether a removal was made."""
        if not await self.is_member(resource_id, handle):
            return False
        await self.remove_member(resource_id, handle)
        return True

    async def grant_if_missing(self, resource_id: str, handle: str, access_level: int) -> bool:
        """Add ``handle`` unless it already is a member. Returns whether an add was made."""
        if await self.is_member(resource_id, handle):
            return False
        await self.add_member(resource_id, handle, access_level)
        return True
