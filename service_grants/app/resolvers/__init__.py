"""
Resolvers turning request data into facts about external state:
the resource a purchase entitles, and the handle of the requested principal.
"""

from .entitlements import EntitlementResolver
from .identity import IdentityResolver

__all__ = ["EntitlementResolver", "IdentityResolver"]
