"""
Principal name to identity handle resolution.
"""

from typing import Optional

from shared.errors import Forbidden
from shared.logging import get_logger

from ..adapters.identity_client import IdentityLookupClient
from ..models import Identity


class IdentityResolver:
    """Resolves principal names through the identity-lookup service."""

    def __init__(self, client: IdentityLookupClient):
        self.client = client
        self.logger = get_logger("grants.resolvers.identity")

    async def resolve(self, principal: Optional[str]) -> Optional[Identity]:
        """Return the identity for ``principal``, or None when no principal was given.

        When several accounts match, the first one returned by the lookup
        service is used. Ties are not an error.
        """
        if not principal:
            return None

        handles = await self.client.find_handles(principal)
        if not handles:
            raise Forbidden("principal unknown", details={"principal": principal})

        if len(handles) > 1:
            self.logger.info("Several accounts match principal, using the first",
                             principal=principal, matches=len(handles))

        return Identity(principal=principal, handle=handles[0])
