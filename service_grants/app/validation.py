"""
Inbound request validation.

Rules run in a fixed order and the first failure wins. Nothing here touches
the network; challenge verification is done by the pipeline right after.
"""

import re
from typing import Mapping, Optional

from shared.errors import BadRequest

from .config import GrantServiceConfig
from .models import GrantRequest

GRANT_ROUTE = "/"

PURCHASE_ID_PATTERN = re.compile(r"\d+", re.ASCII)
PRINCIPAL_PATTERN = re.compile(r"[\w-]+", re.ASCII)

# Field names, each followed by the legacy form field it replaces
PURCHASE_ID_FIELDS = ("purchaseId", "invoice")
PRINCIPAL_FIELDS = ("principal", "username")
CHALLENGE_FIELDS = ("challengeToken", "g-recaptcha-response")


def _field(fields: Mapping[str, str], names) -> Optional[str]:
    for name in names:
        value = fields.get(name)
        if value:
            return value
    return None


def validate_grant_request(method: str, path: str, fields: Mapping[str, str],
                           config: GrantServiceConfig) -> GrantRequest:
    """Validate and normalize a raw request.

    Raises:
        BadRequest: when any rule fails.
    """
    if path != GRANT_ROUTE:
        raise BadRequest("")

    purchase_id = _field(fields, PURCHASE_ID_FIELDS)
    if not purchase_id:
        raise BadRequest("purchase identifier required")

    principal = _field(fields, PRINCIPAL_FIELDS)
    if not principal and not config.allow_edit_and_delete:
        raise BadRequest("principal required")

    prefix = config.purchase_id_prefix
    if prefix and purchase_id.startswith(prefix):
        purchase_id = purchase_id[len(prefix):]

    if not PURCHASE_ID_PATTERN.fullmatch(purchase_id):
        raise BadRequest("invalid purchase id format", details={"purchase_id": purchase_id})

    if principal and not PRINCIPAL_PATTERN.fullmatch(principal):
        raise BadRequest("invalid characters in principal")

    challenge_token = _field(fields, CHALLENGE_FIELDS)
    if config.challenge_enabled and not challenge_token:
        raise BadRequest("challenge response required")

    return GrantRequest(
        purchase_id=purchase_id,
        principal=principal,
        challenge_token=challenge_token,
        intent_to_modify=method.upper() == "POST",
    )
