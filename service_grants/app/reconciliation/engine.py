"""
Grant reconciliation.

Compares the desired holder of a purchase with the persisted grant, decides
what to do, and applies it: store first, then revoke the replaced holder,
then grant the new one. A membership failure after the store write is
reported as ``UpstreamError`` and the write stays; retrying the same request
converges because the persisted grant is authoritative.
"""

from typing import Optional

from shared.errors import UpstreamError
from shared.logging import get_logger

from ..adapters.membership_client import MembershipClient
from ..config import GrantServiceConfig
from ..models import Entitlement, GrantAction, GrantOutcome, GrantRequest, Identity
from ..persistence.base import GrantStore


def decide(existing_handle: Optional[str], requested_handle: Optional[str],
           intent_to_modify: bool, editing_allowed: bool) -> GrantAction:
    """Pick the reconciliation action for one request.

    ``requested_handle`` of None means the caller asked for a revoke.
    """
    if existing_handle is None:
        if requested_handle is None:
            return GrantAction.NOTHING_TO_REVOKE
        return GrantAction.CREATE if intent_to_modify else GrantAction.PREVIEW_GRANT

    if existing_handle == requested_handle:
        return GrantAction.ALREADY_GRANTED

    # Previews never refuse; only a POST against a pinned grant is rejected
    if not intent_to_modify:
        return GrantAction.PREVIEW_OVERRIDE
    if not editing_allowed:
        return GrantAction.IMMUTABLE
    if requested_handle is None:
        return GrantAction.REVOKE
    return GrantAction.UPDATE


class ReconciliationEngine:
    """Applies reconciliation decisions to the grant store and membership."""

    def __init__(self, store: GrantStore, membership: MembershipClient, config: GrantServiceConfig):
        self.store = store
        self.membership = membership
        self.config = config
        self.logger = get_logger("grants.reconciliation.engine")

    async def reconcile(self, request: GrantRequest, entitlement: Entitlement,
                        identity: Optional[Identity]) -> GrantOutcome:
        # A failed read raises StorageError before anything is written
        existing = await self.store.get(request.purchase_id)
        existing_handle = existing.identity_handle if existing else None
        requested_handle = identity.handle if identity else None

        action = decide(existing_handle, requested_handle,
                        request.intent_to_modify, self.config.allow_edit_and_delete)

        self.logger.info(
            "Reconciliation decided",
            action=action.value,
            existing_handle=existing_handle,
            requested_handle=requested_handle,
            resource_id=entitlement.resource_id
        )

        principal = identity.principal if identity else None
        product = entitlement.product_id
        resource_id = entitlement.resource_id

        if action is GrantAction.PREVIEW_GRANT:
            return GrantOutcome(
                202, f"User '{principal}' will be granted access to '{product}' if request sent with POST",
                action, resource_id)

        if action is GrantAction.NOTHING_TO_REVOKE:
            return GrantOutcome(202, "No grant exists for this purchase, nothing to revoke",
                                action, resource_id)

        if action is GrantAction.ALREADY_GRANTED:
            if request.intent_to_modify:
                await self._repair_membership(resource_id, existing_handle)
            return GrantOutcome(
                202, f"User '{principal}' already has access to '{product}'", action, resource_id)

        if action is GrantAction.PREVIEW_OVERRIDE:
            verb = "revoked" if requested_handle is None else "overridden"
            message = f"Purchase grant will be successfully {verb} if request sent with POST"
            if not self.config.allow_edit_and_delete:
                message += ", but editing is disabled on this service"
            return GrantOutcome(202, message, action, resource_id)

        if action is GrantAction.IMMUTABLE:
            return GrantOutcome(
                403, f"Purchase already granted to user ID '{existing_handle}', hence can't be altered",
                action, resource_id)

        if action is GrantAction.REVOKE:
            previous = await self.store.remove(request.purchase_id)
        else:
            previous = await self.store.put(request.purchase_id, requested_handle)

        await self._apply_membership(resource_id, previous, requested_handle)

        if requested_handle is None:
            message = "Success! Access granted by this purchase has been revoked"
        else:
            message = f"Success! Login to {self.config.membership_web_url} and check the invitation!"
        return GrantOutcome(200, message, action, resource_id)

    async def _apply_membership(self, resource_id: str, previous: Optional[str],
                                requested: Optional[str]):
        """Revoke the holder the store write replaced, then grant the new one."""
        try:
            if previous is not None and previous != requested:
                await self.membership.revoke(resource_id, previous)
            if requested is not None:
                await self.membership.add_member(
                    resource_id, requested, self.config.member_access_level)
        except UpstreamError:
            self.logger.error(
                "Grant persisted but membership update failed; retry converges",
                resource_id=resource_id,
                previous_handle=previous,
                requested_handle=requested
            )
            raise

    async def _repair_membership(self, resource_id: str, handle: str):
        """Re-add a persisted holder that lost membership, e.g. after a failed grant.

        Costs one membership read when the holder is still a member.
        """
        added = await self.membership.grant_if_missing(
            resource_id, handle, self.config.member_access_level)
        if added:
            self.logger.warning("Restored missing membership for persisted grant",
                                resource_id=resource_id, identity_handle=handle)
