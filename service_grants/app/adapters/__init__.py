"""
Clients for the external systems the grants service depends on.

- purchase_client: purchase verification by identifier
- identity_client: username to account handle lookup
- membership_client: project membership read/add/remove
- challenge_client: optional anti-automation token verification
"""

from .challenge_client import ChallengeClient
from .identity_client import IdentityLookupClient
from .membership_client import MembershipClient
from .purchase_client import PurchaseVerificationClient

__all__ = [
    "ChallengeClient",
    "IdentityLookupClient",
    "MembershipClient",
    "PurchaseVerificationClient",
]
