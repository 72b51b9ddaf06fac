"""
Purchase-verification service client.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

import httpx

from shared.errors import UpstreamError
from shared.metrics import MetricsCollector

from ..models import PurchaseRecord
from .base import UpstreamClient

REFUNDED_MARKERS = ("yes", "true", "1")


class PurchaseVerificationClient(UpstreamClient):
    """Looks up purchases by identifier using the publisher's shared secret."""

    upstream = "purchase_verification"
    display_name = "Purchase verification API"

    def __init__(self, base_url: str, token: str, timeout: float,
                 metrics: Optional[MetricsCollector] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(base_url, timeout, metrics=metrics, transport=transport)
        self.token = token

    async def lookup(self, purchase_id: str) -> List[PurchaseRecord]:
        """Return every purchase matching ``purchase_id``; the list may be empty."""
        response = await self._send(
            "GET",
            self.base_url,
            params={"key": self.token, "invoice": purchase_id}
        )
        self._expect_success(response)
        payload = self._json(response)

        try:
            return [self._to_record(purchase_id, item) for item in payload["invoices"]]
        except (KeyError, TypeError, InvalidOperation) as e:
            self.logger.error(
                "Purchase verification payload could not be parsed",
                endpoint=self.base_url,
                status_code=response.status_code,
                error=repr(e)
            )
            raise UpstreamError(
                self.upstream,
                f"Server has failed from reaching or parsing {self.display_name}",
                details={"endpoint": self.base_url}
            )

    @staticmethod
    def _to_record(purchase_id: str, item: Dict[str, Any]) -> PurchaseRecord:
        refunded = item["refunded"]
        if not isinstance(refunded, bool):
            refunded = str(refunded).strip().lower() in REFUNDED_MARKERS

        return PurchaseRecord(
            purchase_id=str(item.get("invoice", purchase_id)),
            refunded=refunded,
            price=Decimal(str(item["price_exvat"])),
            product_id=str(item["package"]),
        )
