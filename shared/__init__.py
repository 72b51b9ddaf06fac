"""
Shared utilities for the purchase-gated repository access services.

This package aggregates common building blocks consumed by service packages:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request and purchase correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI service skeleton with health and metrics routes
- test_helpers: In-memory stand-ins for upstream systems

Do not import from service_* packages into shared/.
"""
