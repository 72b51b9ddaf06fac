"""
Grants Service package.

Grants or revokes access to private repositories based on proof of purchase,
keeping a persisted purchase to account mapping in step with actual project
membership. It provides:

- app.main: API surface (preview on GET, apply on POST) and health.
- app.validation: ordered checks on inbound fields.
- app.adapters: clients for purchase verification, user lookup, membership
  and the optional anti-automation challenge.
- app.resolvers: purchase entitlement and principal identity resolution.
- app.persistence: grant storage (PostgreSQL, in-memory).
- app.reconciliation: decision table and the apply sequence.

Guidelines:
- Requests share no in-memory state; the grant store is the source of truth.
- Preview requests never mutate storage or membership.
- Upstream failures are reported, never retried within a request.
"""
