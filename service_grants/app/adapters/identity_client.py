"""
Identity-lookup client for the repository host.
"""

from typing import List, Optional

import httpx

from shared.errors import UpstreamError
from shared.metrics import MetricsCollector

from .base import UpstreamClient


class IdentityLookupClient(UpstreamClient):
    """Finds accounts by username on the repository host."""

    upstream = "identity_lookup"
    display_name = "Users API"

    def __init__(self, base_url: str, token: str, timeout: float,
                 metrics: Optional[MetricsCollector] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(base_url, timeout, metrics=metrics, transport=transport)
        self.token = token

    async def find_handles(self, username: str) -> List[str]:
        """Return the handles of accounts matching ``username``, in API order."""
        endpoint = f"{self.base_url}/users"
        response = await self._send(
            "GET",
            endpoint,
            params={"username": username},
            headers={"PRIVATE-TOKEN": self.token}
        )
        self._expect_success(response)
        payload = self._json(response)

        if not isinstance(payload, list):
            raise self._fail(response, "Users payload is not a list")

        try:
            return [str(account["id"]) for account in payload]
        except (KeyError, TypeError) as e:
            self.logger.error(
                "Users payload could not be parsed",
                endpoint=endpoint,
                status_code=response.status_code,
                error=repr(e)
            )
            raise UpstreamError(
                self.upstream,
                f"Server has failed from reaching or parsing {self.display_name}",
                details={"endpoint": endpoint}
            )
