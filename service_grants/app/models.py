"""
Data models for the grants service.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class PurchaseRecord:
    """A purchase as reported by the purchase-verification service."""
    purchase_id: str
    refunded: bool
    price: Decimal
    product_id: str

    @property
    def is_free(self) -> bool:
        return self.price == 0


@dataclass(frozen=True)
class Entitlement:
    """Resource a purchase entitles its holder to."""
    resource_id: str
    product_id: str


@dataclass(frozen=True)
class Identity:
    """A principal resolved to its handle in the membership system."""
    principal: str
    handle: str


@dataclass(frozen=True)
class Grant:
    """Persisted fact that a purchase currently entitles an identity handle."""
    purchase_id: str
    identity_handle: str


@dataclass(frozen=True)
class GrantRequest:
    """Normalized, validated inbound request."""
    purchase_id: str
    principal: Optional[str] = None
    challenge_token: Optional[str] = None
    intent_to_modify: bool = False


class GrantAction(str, Enum):
    """Reconciliation decisions."""
    PREVIEW_GRANT = "preview_grant"
    CREATE = "create"
    NOTHING_TO_REVOKE = "nothing_to_revoke"
    ALREADY_GRANTED = "already_granted"
    PREVIEW_OVERRIDE = "preview_override"
    UPDATE = "update"
    REVOKE = "revoke"
    IMMUTABLE = "immutable"
    REJECTED = "rejected"

    @property
    def mutates(self) -> bool:
        return self in (GrantAction.CREATE, GrantAction.UPDATE, GrantAction.REVOKE)


@dataclass(frozen=True)
class GrantOutcome:
    """Terminal result of one request: a status, a message, and what was decided."""
    status_code: int
    message: str
    action: GrantAction = GrantAction.REJECTED
    resource_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status_code == 200
