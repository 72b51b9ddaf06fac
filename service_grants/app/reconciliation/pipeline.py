"""
Grant request pipeline.

Runs validation, challenge verification, entitlement and identity
resolution, then reconciliation. Each stage raises a ``GrantServiceError``
on failure; the pipeline stops at the first one and turns it into the
request's terminal ``GrantOutcome``.
"""

from typing import Mapping, Optional

from shared.errors import GrantServiceError
from shared.logging import get_logger, set_purchase_context
from shared.metrics import MetricsCollector

from ..adapters.challenge_client import ChallengeClient
from ..config import GrantServiceConfig
from ..models import GrantOutcome
from ..resolvers.entitlements import EntitlementResolver
from ..resolvers.identity import IdentityResolver
from ..validation import validate_grant_request
from .engine import ReconciliationEngine


class GrantPipeline:
    """Orchestrates one grant request from raw fields to outcome."""

    def __init__(self, config: GrantServiceConfig,
                 entitlements: EntitlementResolver,
                 identities: IdentityResolver,
                 engine: ReconciliationEngine,
                 challenge: Optional[ChallengeClient] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.config = config
        self.entitlements = entitlements
        self.identities = identities
        self.engine = engine
        self.challenge = challenge
        self.metrics = metrics
        self.logger = get_logger("grants.reconciliation.pipeline")

    async def handle(self, method: str, path: str, fields: Mapping[str, str]) -> GrantOutcome:
        try:
            request = validate_grant_request(method, path, fields, self.config)
            set_purchase_context(request.purchase_id)

            if self.challenge is not None:
                await self.challenge.verify(request.challenge_token)

            entitlement = await self.entitlements.resolve(request.purchase_id)
            identity = await self.identities.resolve(request.principal)
            outcome = await self.engine.reconcile(request, entitlement, identity)

        except GrantServiceError as e:
            log = self.logger.warning if e.status_code < 500 else self.logger.error
            log("Grant request failed", code=e.code, message=e.message, details=e.details)
            outcome = GrantOutcome(e.status_code, e.message)

        if self.metrics is not None:
            self.metrics.record_grant_decision(outcome.action.value, outcome.status_code)
        return outcome
