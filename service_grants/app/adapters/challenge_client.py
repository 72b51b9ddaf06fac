"""
Anti-automation challenge verifier client.
"""

from typing import Optional

import httpx

from shared.errors import Forbidden
from shared.metrics import MetricsCollector

from .base import UpstreamClient


class ChallengeClient(UpstreamClient):
    """Verifies challenge response tokens against the provider."""

    upstream = "challenge"
    display_name = "Challenge verification API"

    def __init__(self, base_url: str, secret: str, timeout: float,
                 metrics: Optional[MetricsCollector] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(base_url, timeout, metrics=metrics, transport=transport)
        self.secret = secret

    async def verify(self, token: str) -> None:
        """Raise ``Forbidden`` unless the provider accepts ``token``."""
        response = await self._send(
            "POST",
            self.base_url,
            data={"secret": self.secret, "response": token}
        )
        self._expect_success(response)
        payload = self._json(response)

        if not isinstance(payload, dict):
            raise self._fail(response, "Challenge verification payload could not be parsed")

        if not payload.get("success"):
            self.logger.warning(
                "Challenge verification rejected",
                error_codes=payload.get("error-codes", [])
            )
            raise Forbidden("Challenge verification failed")
