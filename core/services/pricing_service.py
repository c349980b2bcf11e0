"""
Pricing service for configured cleaning services.

Pure price computation against a static catalog. The same configuration
always yields the same quote: no hidden state, no clock, no randomness.
"""

import logging
from decimal import Decimal

from core.exceptions import UnknownCatalogEntryError
from core.models import (
    LineItem,
    LineItemConfiguration,
    PriceAdjustment,
    PriceQuote,
    PricingCatalog,
    ServiceConfiguration,
    Tier,
    CUSTOM_SERVICE_PRICE_ID,
)
from core.services.identity import derive_item_id
from utils.money import round_half_up

logger = logging.getLogger(__name__)

# (minimum level, multiplier), highest first
_CLEANLINESS_MULTIPLIERS = (
    (4, Decimal("1.4")),
    (2, Decimal("1.2")),
    (1, Decimal("1.0")),
)

# Biohazard-level jobs need the elite crew.
_MINIMUM_TIER_BY_CLEANLINESS = (
    (4, Tier.ELITE),
)


def cleanliness_multiplier(level: int) -> Decimal:
    """Multiplier for a cleanliness level: >=4 -> 1.4, >=2 -> 1.2, else 1.0."""
    for minimum, multiplier in _CLEANLINESS_MULTIPLIERS:
        if level >= minimum:
            return multiplier
    return Decimal("1.0")


def recommended_tier(config: ServiceConfiguration) -> Tier | None:
    """Tier the crew recommends for this job, when higher than the one selected."""
    for minimum_level, tier in _MINIMUM_TIER_BY_CLEANLINESS:
        if config.cleanliness_level >= minimum_level:
            return tier if config.tier < tier else None
    return None


def _humanize(identifier: str) -> str:
    return identifier.replace("_", " ").replace("-", " ").title()


class PricingService:
    """Service for price quotes."""

    def __init__(self, catalog: PricingCatalog):
        self.catalog = catalog

    def compute_price(self, config: ServiceConfiguration) -> PriceQuote:
        """
        Price one service configuration.

        Args:
            config: Room, tier, add-ons, reductions, cleanliness and recurrence

        Returns:
            PriceQuote with first-service and recurring prices in cents

        Raises:
            UnknownCatalogEntryError: If the room type, tier, an add-on or a
                reduction is not in the catalog
        """
        catalog = self.catalog

        rate = catalog.rooms.get(config.room_type)
        if rate is None:
            raise UnknownCatalogEntryError("room type", config.room_type)

        tier_multiplier = catalog.tier_multipliers.get(config.tier)
        if tier_multiplier is None:
            raise UnknownCatalogEntryError("tier", config.tier.value)

        frequency_discount = catalog.frequency_discounts.get(config.recurrence)
        if frequency_discount is None:
            raise UnknownCatalogEntryError("recurrence", config.recurrence.value)

        add_on_entries = []
        for add_on_id in config.add_ons:
            entry = catalog.add_ons.get(add_on_id)
            if entry is None:
                raise UnknownCatalogEntryError("add-on", add_on_id)
            add_on_entries.append(entry)

        reduction_entries = []
        for reduction_id in config.reductions:
            entry = catalog.reductions.get(reduction_id)
            if entry is None:
                raise UnknownCatalogEntryError("reduction", reduction_id)
            reduction_entries.append(entry)

        clean_multiplier = cleanliness_multiplier(config.cleanliness_level)

        base = Decimal(rate.base_cents) * tier_multiplier * clean_multiplier
        rooms = Decimal(config.room_count * rate.per_room_cents)
        add_ons = sum((Decimal(e.amount_cents) for e in add_on_entries), Decimal(0))
        reductions = sum((Decimal(e.amount_cents) for e in reduction_entries), Decimal(0))

        first_price = round_half_up(max(Decimal(0), base + rooms + add_ons - reductions))
        recurring_price = round_half_up(Decimal(first_price) * (Decimal(1) - frequency_discount))

        breakdown = [
            PriceAdjustment(
                category="Base",
                description=f"{_humanize(config.room_type)} ({config.tier.value}, {tier_multiplier}x)",
                amount_cents=round_half_up(Decimal(rate.base_cents) * tier_multiplier),
            ),
        ]
        if clean_multiplier != 1:
            breakdown.append(PriceAdjustment(
                category="Cleanliness",
                description=f"Level {config.cleanliness_level} ({clean_multiplier}x)",
                amount_cents=round_half_up(base - Decimal(rate.base_cents) * tier_multiplier),
            ))
        if rate.per_room_cents:
            breakdown.append(PriceAdjustment(
                category="Rooms",
                description=f"{config.room_count} x {_humanize(config.room_type)}",
                amount_cents=int(rooms),
            ))
        for entry in add_on_entries:
            breakdown.append(PriceAdjustment(
                category="Add-on", description=entry.name, amount_cents=entry.amount_cents,
            ))
        for entry in reduction_entries:
            breakdown.append(PriceAdjustment(
                category="Reduction", description=entry.name, amount_cents=-entry.amount_cents,
            ))
        if recurring_price != first_price:
            breakdown.append(PriceAdjustment(
                category="Frequency",
                description=f"{_humanize(config.recurrence.value)} discount",
                amount_cents=recurring_price - first_price,
            ))

        return PriceQuote(
            first_service_price_cents=first_price,
            recurring_service_price_cents=recurring_price,
            estimated_duration_minutes=config.room_count * rate.per_room_minutes,
            breakdown=tuple(breakdown),
            recommended_tier=recommended_tier(config),
        )

    def price_line_item(
        self,
        configuration: LineItemConfiguration,
        quantity: int = 1,
        name: str | None = None,
    ) -> LineItem:
        """
        Build a priced cart line item for a configured service.

        The unit price is the recurring price, so the recurrence discount is
        applied here once and never again downstream.

        Raises:
            ValueError: If the configuration has no room configuration
            UnknownCatalogEntryError: If the configuration cannot be priced
        """
        room = configuration.room
        if room is None:
            raise ValueError("Configured services require a room configuration")

        quote = self.compute_price(room)

        if name is None:
            name = _humanize(room.room_type)
            if room.tier != Tier.STANDARD:
                name += f" ({room.tier.value.title()})"

        logger.debug(
            "Priced %s: first=%d recurring=%d",
            room.room_type, quote.first_service_price_cents, quote.recurring_service_price_cents,
        )

        return LineItem(
            id=derive_item_id(configuration, room.recurrence.value),
            name=name,
            unit_price_cents=quote.recurring_service_price_cents,
            quantity=quantity,
            recurrence=room.recurrence,
            price_id=CUSTOM_SERVICE_PRICE_ID,
            configuration=configuration,
        )
