"""
Common plumbing for outbound HTTP clients.
"""

import time
from typing import Any, Optional

import httpx

from shared.errors import UpstreamError
from shared.logging import get_logger
from shared.metrics import MetricsCollector


class UpstreamClient:
    """Base class for clients of external services.

    A fresh ``httpx.AsyncClient`` is opened per call, bounded by the
    configured timeout. Transport failures, timeouts included, are logged and
    re-raised as ``UpstreamError``; nothing is retried.
    """

    upstream = "upstream"
    display_name = "upstream service"

    def __init__(self, base_url: str, timeout: float,
                 metrics: Optional[MetricsCollector] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.metrics = metrics
        self.transport = transport
        self.logger = get_logger(f"grants.adapters.{self.upstream}")

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            self._record("error", start_time)
            self.logger.error(
                f"{self.display_name} request failed",
                method=method,
                endpoint=url,
                error=str(e) or e.__class__.__name__
            )
            raise UpstreamError(
                self.upstream,
                f"Server has failed from reaching {self.display_name}",
                details={"endpoint": url, "http_error": e.__class__.__name__}
            )

        self._record(str(response.status_code), start_time)
        return response

    def _record(self, outcome: str, start_time: float):
        if self.metrics is not None:
            self.metrics.record_upstream_call(self.upstream, outcome, time.time() - start_time)

    def _fail(self, response: httpx.Response, message: str) -> UpstreamError:
        """Log an unusable response and build the error to raise for it."""
        endpoint = str(response.request.url).split("?", 1)[0]
        self.logger.error(
            message,
            endpoint=endpoint,
            status_code=response.status_code,
            body=response.text[:500]
        )
        return UpstreamError(
            self.upstream,
            f"Server has failed from reaching or parsing {self.display_name}",
            details={"endpoint": endpoint, "status_code": response.status_code}
        )

    def _expect_success(self, response: httpx.Response):
        if not response.is_success:
            raise self._fail(response, f"{self.display_name} returned an error status")

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            raise self._fail(response, f"{self.display_name} returned malformed JSON")
