"""Static pricing catalog models.

All prices are stored in cents (integer) to avoid floating point issues.
Multipliers are Decimals so compounding stays exact.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from core.models.service import Recurrence, Tier


class RoomRate(BaseModel):
    """Rates for one room type."""

    base_cents: int = Field(..., ge=0)
    per_room_cents: int = Field(0, ge=0)
    per_room_minutes: int = Field(0, ge=0)

    model_config = {"frozen": True}


class CatalogEntry(BaseModel):
    """An add-on or reduction with its fixed price delta (always stored positive)."""

    name: str
    amount_cents: int = Field(..., ge=0)

    model_config = {"frozen": True}


def _default_tier_multipliers() -> dict[Tier, Decimal]:
    return {
        Tier.STANDARD: Decimal("1.0"),
        Tier.PREMIUM: Decimal("1.3"),
        Tier.ELITE: Decimal("1.6"),
    }


def _default_frequency_discounts() -> dict[Recurrence, Decimal]:
    return {
        Recurrence.ONE_TIME: Decimal("0"),
        Recurrence.WEEKLY: Decimal("0.15"),
        Recurrence.BIWEEKLY: Decimal("0.10"),
        Recurrence.MONTHLY: Decimal("0.05"),
        Recurrence.YEARLY: Decimal("0.01"),
    }


class PricingCatalog(BaseModel):
    """
    Read-only pricing table consumed by the pricing service.

    Usage:
        catalog = PricingCatalog.from_dict({
            "rooms": {"kitchen": {"base_cents": 7500, "per_room_cents": 2500}},
            "add_ons": {"oven": {"name": "Oven interior", "amount_cents": 3000}},
        })
    """

    rooms: dict[str, RoomRate]
    add_ons: dict[str, CatalogEntry] = Field(default_factory=dict)
    reductions: dict[str, CatalogEntry] = Field(default_factory=dict)
    tier_multipliers: dict[Tier, Decimal] = Field(default_factory=_default_tier_multipliers)
    frequency_discounts: dict[Recurrence, Decimal] = Field(default_factory=_default_frequency_discounts)

    model_config = {"frozen": True}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PricingCatalog":
        """Build a catalog from plain JSON-like data."""
        return cls.model_validate(data)


def default_catalog() -> PricingCatalog:
    """Standard storefront rates."""
    return PricingCatalog(
        rooms={
            "bedroom": RoomRate(base_cents=4000, per_room_cents=1500, per_room_minutes=30),
            "master_bedroom": RoomRate(base_cents=5400, per_room_cents=2000, per_room_minutes=40),
            "bathroom": RoomRate(base_cents=6000, per_room_cents=2000, per_room_minutes=35),
            "kitchen": RoomRate(base_cents=7500, per_room_cents=2500, per_room_minutes=45),
            "living_room": RoomRate(base_cents=8000, per_room_cents=2000, per_room_minutes=40),
            "dining_room": RoomRate(base_cents=2600, per_room_cents=1000, per_room_minutes=20),
            "office": RoomRate(base_cents=7000, per_room_cents=1500, per_room_minutes=30),
            "laundry_room": RoomRate(base_cents=1300, per_room_cents=800, per_room_minutes=15),
            "garage": RoomRate(base_cents=8400, per_room_cents=2500, per_room_minutes=60),
        },
        add_ons={
            "appliance_interiors": CatalogEntry(name="Appliance Interiors", amount_cents=5000),
            "window_cleaning": CatalogEntry(name="Window Cleaning", amount_cents=800),
            "grout_restoration": CatalogEntry(name="Grout Restoration", amount_cents=4500),
            "air_duct_sanitization": CatalogEntry(name="Air Duct Sanitization", amount_cents=30000),
        },
        reductions={
            "skip_baseboards": CatalogEntry(name="Skip Baseboards", amount_cents=1000),
            "skip_dusting": CatalogEntry(name="Skip Dusting", amount_cents=800),
            "skip_floors": CatalogEntry(name="Skip Floors", amount_cents=1500),
            "skip_trash": CatalogEntry(name="Skip Trash Removal", amount_cents=300),
        },
    )
