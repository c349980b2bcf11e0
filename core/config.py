"""Cart core configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_ENV_PREFIX = "CART_"


class CartConfig(BaseModel):
    """
    Cart core configuration.

    Money is in cents, durations in seconds.
    """

    # Coupon directory
    coupon_directory_url: str | None = Field(
        default=None,
        description="Base URL of the coupon directory; None uses the static directory",
    )
    coupon_api_key: str | None = Field(
        default=None,
        description="API key sent to the coupon directory",
    )
    coupon_timeout_seconds: float = Field(
        default=3.0,
        description="Upper bound on a coupon validation round-trip",
        gt=0,
        le=30,
    )

    # Storage boundary
    valkey_url: str | None = Field(
        default=None,
        description="Redis-compatible URL for cart snapshots; None keeps carts in memory",
    )
    storage_key_prefix: str = Field(
        default="cart",
        description="Key namespace for persisted cart snapshots",
        min_length=1,
        max_length=50,
    )
    snapshot_ttl_seconds: int | None = Field(
        default=30 * 24 * 3600,  # 30 days
        description="How long an untouched cart snapshot is kept",
        ge=60,
    )
    max_sessions: int = Field(
        default=10_000,
        description="Live sessions kept in memory; the least recently used are evicted and reload from storage",
        ge=1,
    )

    # Summary
    shipping_cents: int = Field(
        default=0,
        description="Flat shipping charge added to every non-empty order",
        ge=0,
    )
    free_shipping_threshold_cents: int | None = Field(
        default=None,
        description="Subtotal at which shipping is waived",
        ge=0,
    )


def load_config(env_file: Path | None = None) -> CartConfig:
    """
    Build CartConfig from CART_* environment variables.

    A .env file (default: current directory) is loaded first; variables
    already in the environment take precedence.

    Raises:
        pydantic.ValidationError: If a value is out of bounds
    """
    load_dotenv(env_file or Path.cwd() / ".env", override=False)

    values = {}
    for name in CartConfig.model_fields:
        raw = os.getenv(f"{_ENV_PREFIX}{name.upper()}")
        if raw is None:
            continue
        values[name] = None if raw.strip().lower() in ("", "none") else raw

    return CartConfig.model_validate(values)
