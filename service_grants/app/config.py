"""
Configuration for the grants service.

Loaded once at startup from ``GRANTS_*`` environment variables (or ``.env``)
and passed by reference to every component. Construction raises a pydantic
``ValidationError`` when a required value is missing or the product/resource
lists do not line up, so a misconfigured process never starts serving.
"""

from dataclasses import dataclass
from typing import Literal, Optional, Tuple

from pydantic import Field, model_validator

from shared.config import BaseConfig, split_csv


@dataclass(frozen=True)
class AssetRepoMapping:
    """Ordered pairing of product identifiers with resource identifiers."""

    product_ids: Tuple[str, ...]
    resource_ids: Tuple[str, ...]

    def resource_for(self, product_id: str) -> Optional[str]:
        """Return the resource paired with the first occurrence of ``product_id``."""
        try:
            index = self.product_ids.index(product_id)
        except ValueError:
            return None
        return self.resource_ids[index]


class GrantServiceConfig(BaseConfig):
    """Grants service configuration."""

    # Purchase verification
    purchase_api_url: str = Field(
        default="http://api.assetstore.unity3d.com/publisher/v1/invoice/verify.json"
    )
    purchase_api_token: str
    purchase_id_prefix: str = Field(default="IN")

    # Identity lookup and membership
    membership_api_url: str = Field(default="https://gitlab.com/api/v4")
    membership_api_token: str
    membership_web_url: str = Field(default="https://gitlab.com/")
    member_access_level: int = Field(default=10)

    # Product to resource correspondence, comma separated and positional
    product_ids: str
    resource_ids: str

    # Inbound surface
    cors_allow_origins: str
    success_redirect_url: Optional[str] = None

    # Anti-automation challenge
    challenge_verify_url: str = Field(default="https://www.google.com/recaptcha/api/siteverify")
    challenge_secret: Optional[str] = None

    # Policy flags
    allow_edit_and_delete: bool = False
    allow_free_purchases: bool = False
    allow_refunded_purchases: bool = False

    # Transport and storage
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)
    grant_store_backend: Literal["postgres", "memory"] = "postgres"

    @model_validator(mode="after")
    def _check_asset_mapping(self) -> "GrantServiceConfig":
        products = split_csv(self.product_ids)
        resources = split_csv(self.resource_ids)
        if not products or not resources:
            raise ValueError("product_ids and resource_ids must both be set")
        if len(products) != len(resources):
            raise ValueError(
                f"product_ids has {len(products)} entries while resource_ids has "
                f"{len(resources)}; both lists must have the same number of entries"
            )
        if not all(products) or not all(resources):
            raise ValueError("product_ids or resource_ids contains empty entries")
        if not all(split_csv(self.cors_allow_origins)):
            raise ValueError("cors_allow_origins contains empty entries")
        return self

    @property
    def asset_mapping(self) -> AssetRepoMapping:
        return AssetRepoMapping(
            product_ids=split_csv(self.product_ids),
            resource_ids=split_csv(self.resource_ids),
        )

    @property
    def allowed_origins(self) -> Tuple[str, ...]:
        return split_csv(self.cors_allow_origins)

    @property
    def challenge_enabled(self) -> bool:
        return bool(self.challenge_secret)


def get_config(**overrides) -> GrantServiceConfig:
    """Build the service configuration from the environment."""
    return GrantServiceConfig(**overrides)
