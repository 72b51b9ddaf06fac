"""
Grants service: purchase-gated repository access.

``POST /`` applies a grant request; any other method on ``/`` previews it.
"""

from typing import Dict, Mapping, Optional, Sequence
from urllib.parse import urlencode

import httpx
from fastapi import Request
from fastapi.responses import PlainTextResponse

from shared.base_service import BaseService
from shared.errors import BadRequest

from .adapters import (
    ChallengeClient,
    IdentityLookupClient,
    MembershipClient,
    PurchaseVerificationClient,
)
from .config import GrantServiceConfig, get_config
from .models import GrantOutcome
from .persistence import GrantStore, create_grant_store
from .reconciliation import GrantPipeline, ReconciliationEngine
from .resolvers import EntitlementResolver, IdentityResolver

# Everything except POST only previews, with fields from the query string
PREVIEW_METHODS = ["GET", "PUT", "PATCH", "DELETE"]


class GrantService(BaseService):
    """Grants service implementation."""

    config: GrantServiceConfig

    def __init__(self, config: Optional[GrantServiceConfig] = None,
                 store: Optional[GrantStore] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__("grants", config or get_config())

        timeout = self.config.upstream_timeout_seconds
        self.store = store or create_grant_store(
            self.config.grant_store_backend, self.config.postgres_dsn)

        self.purchase_client = PurchaseVerificationClient(
            self.config.purchase_api_url, self.config.purchase_api_token, timeout,
            metrics=self.metrics, transport=transport)
        self.identity_client = IdentityLookupClient(
            self.config.membership_api_url, self.config.membership_api_token, timeout,
            metrics=self.metrics, transport=transport)
        self.membership_client = MembershipClient(
            self.config.membership_api_url, self.config.membership_api_token, timeout,
            metrics=self.metrics, transport=transport)
        self.challenge_client = None
        if self.config.challenge_enabled:
            self.challenge_client = ChallengeClient(
                self.config.challenge_verify_url, self.config.challenge_secret, timeout,
                metrics=self.metrics, transport=transport)

        self.pipeline = GrantPipeline(
            self.config,
            entitlements=EntitlementResolver(self.purchase_client, self.config),
            identities=IdentityResolver(self.identity_client),
            engine=ReconciliationEngine(self.store, self.membership_client, self.config),
            challenge=self.challenge_client,
            metrics=self.metrics,
        )

        self._setup_grant_routes()

    def _cors_origins(self) -> Sequence[str]:
        return self.config.allowed_origins

    def _setup_grant_routes(self):
        """Set up the grant route."""

        @self.app.api_route("/", methods=PREVIEW_METHODS, response_class=PlainTextResponse)
        async def preview_grant(request: Request):
            """Describe what a POST with the same fields would do."""
            return await self._handle(request, request.query_params)

        @self.app.post("/", response_class=PlainTextResponse)
        async def apply_grant(request: Request):
            """Grant, re-grant or revoke repository access for a purchase."""
            form = await request.form()
            fields = {key: value for key, value in form.items() if isinstance(value, str)}
            return await self._handle(request, fields)

        @self.app.api_route("/{path:path}", methods=PREVIEW_METHODS + ["POST"], include_in_schema=False)
        async def unknown_route(path: str):
            raise BadRequest("")

    async def _handle(self, request: Request, fields: Mapping[str, str]) -> PlainTextResponse:
        outcome = await self.pipeline.handle(request.method, request.url.path, fields)
        return self._to_response(outcome)

    def _to_response(self, outcome: GrantOutcome) -> PlainTextResponse:
        if outcome.succeeded and self.config.success_redirect_url:
            location = f"{self.config.success_redirect_url}?{urlencode({'repo': outcome.resource_id})}"
            return PlainTextResponse(outcome.message, status_code=301, headers={"Location": location})
        return PlainTextResponse(outcome.message, status_code=outcome.status_code)

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check grants service dependencies."""
        healthy = await self.store.health_check()
        return {"grant_store": "ok" if healthy else "error"}

    async def start(self):
        """Start grants service components."""
        await self.store.start()
        self.logger.info(
            "Grants service started",
            store=type(self.store).__name__,
            mapped_products=len(self.config.asset_mapping.product_ids),
            challenge_enabled=self.config.challenge_enabled,
            allow_edit_and_delete=self.config.allow_edit_and_delete
        )

    async def stop(self):
        """Stop grants service components."""
        await self.store.stop()
        self.logger.info("Grants service stopped")


def create_app(config: Optional[GrantServiceConfig] = None):
    """Create grants service application."""
    service = GrantService(config)
    return service.app


def main():
    service = GrantService()
    service.run()


if __name__ == "__main__":
    main()
