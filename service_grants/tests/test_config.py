"""
Unit tests for grants service configuration.
"""

import pytest
from pydantic import ValidationError

from service_grants.app.config import AssetRepoMapping, GrantServiceConfig


class TestGrantServiceConfig:
    """Test cases for GrantServiceConfig."""

    def test_defaults(self, config):
        assert config.purchase_id_prefix == "IN"
        assert config.member_access_level == 10
        assert config.allow_edit_and_delete is False
        assert config.allow_free_purchases is False
        assert config.allow_refunded_purchases is False
        assert config.challenge_enabled is False
        assert config.success_redirect_url is None
        assert config.port == 3000

    def test_asset_mapping_is_positional(self, config):
        mapping = config.asset_mapping
        assert mapping.resource_for("Asset Pack") == "group/asset-pack"
        assert mapping.resource_for("Other Pack") == "4242"
        assert mapping.resource_for("Unknown Pack") is None

    def test_mapping_uses_first_occurrence(self):
        mapping = AssetRepoMapping(product_ids=("a", "b", "a"), resource_ids=("1", "2", "3"))
        assert mapping.resource_for("a") == "1"

    def test_mismatched_lists_fail(self, make_config):
        with pytest.raises(ValidationError) as exc_info:
            make_config(product_ids="A,B", resource_ids="1")
        assert "same number of entries" in str(exc_info.value)

    @pytest.mark.parametrize("products,resources", [
        ("A,,B", "1,2,3"),
        ("A,B", "1,"),
        ("", ""),
    ])
    def test_empty_entries_fail(self, make_config, products, resources):
        with pytest.raises(ValidationError):
            make_config(product_ids=products, resource_ids=resources)

    def test_missing_required_values_fail(self, monkeypatch):
        for name in ("PURCHASE_API_TOKEN", "MEMBERSHIP_API_TOKEN", "PRODUCT_IDS",
                     "RESOURCE_IDS", "CORS_ALLOW_ORIGINS"):
            monkeypatch.delenv(f"GRANTS_{name}", raising=False)

        with pytest.raises(ValidationError) as exc_info:
            GrantServiceConfig(_env_file=None)

        missing = {error["loc"][0] for error in exc_info.value.errors()}
        assert {"purchase_api_token", "membership_api_token", "product_ids",
                "resource_ids", "cors_allow_origins"} <= missing

    def test_loads_from_environment(self, monkeypatch):
        monkeypatch.setenv("GRANTS_PURCHASE_API_TOKEN", "env-purchase")
        monkeypatch.setenv("GRANTS_MEMBERSHIP_API_TOKEN", "env-membership")
        monkeypatch.setenv("GRANTS_PRODUCT_IDS", "Pack One, Pack Two")
        monkeypatch.setenv("GRANTS_RESOURCE_IDS", "11,22")
        monkeypatch.setenv("GRANTS_CORS_ALLOW_ORIGINS", "https://a.example,https://b.example")
        monkeypatch.setenv("GRANTS_ALLOW_EDIT_AND_DELETE", "true")
        monkeypatch.setenv("GRANTS_CHALLENGE_SECRET", "challenge")

        config = GrantServiceConfig(_env_file=None)

        assert config.purchase_api_token == "env-purchase"
        assert config.allow_edit_and_delete is True
        assert config.challenge_enabled is True
        assert config.asset_mapping.resource_for("Pack Two") == "22"
        assert config.allowed_origins == ("https://a.example", "https://b.example")

    def test_config_is_immutable(self, config):
        with pytest.raises(ValidationError):
            config.allow_edit_and_delete = True
