"""
Purchase to resource entitlement resolution.
"""

from shared.errors import Forbidden
from shared.logging import get_logger

from ..adapters.purchase_client import PurchaseVerificationClient
from ..config import GrantServiceConfig
from ..models import Entitlement


class EntitlementResolver:
    """Decides whether a purchase entitles its holder to a mapped resource."""

    def __init__(self, client: PurchaseVerificationClient, config: GrantServiceConfig):
        self.client = client
        self.config = config
        self.mapping = config.asset_mapping
        self.logger = get_logger("grants.resolvers.entitlements")

    async def resolve(self, purchase_id: str) -> Entitlement:
        """Resolve ``purchase_id`` to the resource it grants.

        Raises:
            Forbidden: the purchase is unknown, refunded, free, or unmapped
                (the last three subject to policy flags).
            UpstreamError: the purchase service failed.
        """
        purchases = await self.client.lookup(purchase_id)
        if not purchases:
            raise Forbidden("purchase not available")

        purchase = purchases[0]
        if purchase.refunded and not self.config.allow_refunded_purchases:
            raise Forbidden("refunded")
        if purchase.is_free and not self.config.allow_free_purchases:
            raise Forbidden("voucher redemption not eligible")

        resource_id = self.mapping.resource_for(purchase.product_id)
        if resource_id is None:
            self.logger.warning("Purchase for unmapped product", product_id=purchase.product_id)
            raise Forbidden(
                "product not mapped to a resource",
                details={"product_id": purchase.product_id}
            )

        return Entitlement(resource_id=resource_id, product_id=purchase.product_id)
