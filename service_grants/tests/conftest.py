"""
Shared fixtures for grants service tests.
"""

import pytest

from service_grants.app.config import GrantServiceConfig
from shared.test_helpers import (
    CHALLENGE_URL,
    MEMBERSHIP_URL,
    PURCHASE_URL,
    FakeUpstream,
    make_purchase,
)


@pytest.fixture
def make_config():
    """Factory for configurations that never read the process environment."""
    def _make(**overrides) -> GrantServiceConfig:
        values = {
            "purchase_api_url": PURCHASE_URL,
            "purchase_api_token": "purchase-secret",
            "membership_api_url": MEMBERSHIP_URL,
            "membership_api_token": "membership-secret",
            "challenge_verify_url": CHALLENGE_URL,
            "product_ids": "Asset Pack,Other Pack",
            "resource_ids": "group/asset-pack,4242",
            "cors_allow_origins": "https://shop.example.com",
            "grant_store_backend": "memory",
            "upstream_timeout_seconds": 2.0,
        }
        values.update(overrides)
        return GrantServiceConfig(_env_file=None, **values)
    return _make


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def upstream():
    """Fake external systems with one paid purchase and two accounts."""
    fake = FakeUpstream()
    fake.purchases["12345"] = [make_purchase("12345")]
    fake.users = {"alice": ["42"], "bob": ["99"]}
    return fake
