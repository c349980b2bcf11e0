"""Tests for cart domain models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from core.models import (
    AppliedCoupon, Cart, CouponKind, CouponResult, CUSTOM_SERVICE_PRICE_ID,
    LineItem, LineItemConfiguration, PricingCatalog, Recurrence, ServiceConfiguration,
    Tier, default_catalog,
)


# =============================================================================
# ENUMS
# =============================================================================


class TestTier:

    def test_ordering(self):
        assert Tier.STANDARD < Tier.PREMIUM < Tier.ELITE
        assert Tier.ELITE >= Tier.PREMIUM
        assert Tier.PREMIUM <= Tier.PREMIUM

    def test_sorted_uses_rank_not_alphabet(self):
        """Alphabetically elite < premium < standard; rank order is the reverse."""
        assert sorted([Tier.STANDARD, Tier.ELITE, Tier.PREMIUM]) == [
            Tier.STANDARD, Tier.PREMIUM, Tier.ELITE,
        ]


class TestRecurrence:

    def test_one_time_is_not_recurring(self):
        assert Recurrence.ONE_TIME.is_recurring is False

    @pytest.mark.parametrize("recurrence", [
        Recurrence.WEEKLY, Recurrence.BIWEEKLY, Recurrence.MONTHLY, Recurrence.YEARLY,
    ])
    def test_others_are_recurring(self, recurrence):
        assert recurrence.is_recurring is True


# =============================================================================
# SERVICE CONFIGURATION
# =============================================================================


class TestServiceConfiguration:

    def test_defaults(self):
        config = ServiceConfiguration(room_type="kitchen")
        assert config.tier == Tier.STANDARD
        assert config.room_count == 1
        assert config.cleanliness_level == 1
        assert config.recurrence == Recurrence.ONE_TIME
        assert config.add_ons == []

    def test_duplicate_add_on_rejected(self):
        with pytest.raises(ValidationError, match="unique"):
            ServiceConfiguration(room_type="kitchen", add_ons=["oven", "oven"])

    def test_add_on_and_reduction_overlap_rejected(self):
        with pytest.raises(ValidationError, match="both add-ons and reductions"):
            ServiceConfiguration(room_type="kitchen", add_ons=["oven"], reductions=["oven"])

    @pytest.mark.parametrize("field,value", [
        ("room_count", 0),
        ("room_count", 51),
        ("cleanliness_level", 0),
        ("cleanliness_level", 6),
    ])
    def test_bounds(self, field, value):
        with pytest.raises(ValidationError):
            ServiceConfiguration(room_type="kitchen", **{field: value})

    def test_frozen(self):
        config = ServiceConfiguration(room_type="kitchen")
        with pytest.raises(ValidationError):
            config.room_count = 3


# =============================================================================
# LINE ITEM
# =============================================================================


class TestLineItem:

    def test_total_price(self):
        item = LineItem(id="a", name="A", unit_price_cents=1250, quantity=3)
        assert item.total_price_cents == 3750
        assert item.total_price_dollars == 37.5

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            LineItem(id="a", name="A", unit_price_cents=100, quantity=0)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            LineItem(id="a", name="A", unit_price_cents=-1)

    def test_custom_service_detection(self):
        assert LineItem(id="a", name="A", unit_price_cents=1).is_custom_service is True
        assert LineItem(
            id="a", name="A", unit_price_cents=1, price_id=CUSTOM_SERVICE_PRICE_ID,
        ).is_custom_service is True
        assert LineItem(
            id="a", name="A", unit_price_cents=1, price_id="price_kit",
        ).is_custom_service is False

    def test_recurrence_must_match_room(self):
        configuration = LineItemConfiguration(
            room=ServiceConfiguration(room_type="kitchen", recurrence=Recurrence.WEEKLY),
        )

        with pytest.raises(ValidationError, match="does not match"):
            LineItem(
                id="a", name="A", unit_price_cents=1,
                recurrence=Recurrence.ONE_TIME, configuration=configuration,
            )

    def test_matching_recurrence_accepted(self):
        configuration = LineItemConfiguration(
            room=ServiceConfiguration(room_type="kitchen", recurrence=Recurrence.WEEKLY),
        )

        item = LineItem(
            id="a", name="A", unit_price_cents=1,
            recurrence=Recurrence.WEEKLY, configuration=configuration,
        )

        assert item.recurrence == Recurrence.WEEKLY

    def test_recurrence_free_without_room(self):
        item = LineItem(id="a", name="A", unit_price_cents=1, recurrence=Recurrence.MONTHLY)
        assert item.recurrence == Recurrence.MONTHLY


# =============================================================================
# COUPONS
# =============================================================================


class TestAppliedCoupon:

    def test_percentage_requires_percentage(self):
        with pytest.raises(ValidationError, match="discount_percentage"):
            AppliedCoupon(code="X10", kind=CouponKind.PERCENTAGE)

    def test_fixed_requires_amount(self):
        with pytest.raises(ValidationError, match="discount_amount_cents"):
            AppliedCoupon(code="X10", kind=CouponKind.FIXED_AMOUNT)

    def test_percentage_above_100_rejected(self):
        with pytest.raises(ValidationError):
            AppliedCoupon(code="X", kind=CouponKind.PERCENTAGE, discount_percentage=Decimal("101"))


class TestCouponResult:

    def test_percentage_result_converts(self):
        result = CouponResult(accepted=True, code="WELCOME10", discount_percentage=Decimal("10"))
        coupon = result.to_applied_coupon()
        assert coupon.kind == CouponKind.PERCENTAGE
        assert coupon.discount_percentage == Decimal("10")

    def test_fixed_result_converts(self):
        result = CouponResult(accepted=True, code="FIVEOFF", discount_amount_cents=500)
        coupon = result.to_applied_coupon()
        assert coupon.kind == CouponKind.FIXED_AMOUNT
        assert coupon.discount_amount_cents == 500

    def test_rejected_result_cannot_convert(self):
        with pytest.raises(ValueError):
            CouponResult(accepted=False, code="NOPE").to_applied_coupon()


# =============================================================================
# CART
# =============================================================================


class TestCart:

    def test_empty(self):
        cart = Cart()
        assert cart.is_empty
        assert cart.total_items == 0
        assert cart.applied_coupon is None

    def test_total_items_sums_quantities(self):
        cart = Cart(items=(
            LineItem(id="a", name="A", unit_price_cents=1, quantity=2),
            LineItem(id="b", name="B", unit_price_cents=1, quantity=3),
        ))
        assert cart.total_items == 5

    def test_get_item(self):
        item = LineItem(id="a", name="A", unit_price_cents=1)
        cart = Cart(items=(item,))
        assert cart.get_item("a") is item
        assert cart.get_item("missing") is None


# =============================================================================
# CATALOG
# =============================================================================


class TestPricingCatalog:

    def test_from_dict(self):
        catalog = PricingCatalog.from_dict({
            "rooms": {"kitchen": {"base_cents": 7500, "per_room_cents": 2500}},
            "add_ons": {"oven": {"name": "Oven", "amount_cents": 3000}},
            "tier_multipliers": {"standard": "1.0", "premium": "1.25", "elite": "1.5"},
        })
        assert catalog.rooms["kitchen"].base_cents == 7500
        assert catalog.tier_multipliers[Tier.PREMIUM] == Decimal("1.25")
        assert catalog.frequency_discounts[Recurrence.MONTHLY] == Decimal("0.05")

    def test_default_catalog_has_every_tier_and_recurrence(self):
        catalog = default_catalog()
        assert set(catalog.tier_multipliers) == set(Tier)
        assert set(catalog.frequency_discounts) == set(Recurrence)
        assert "kitchen" in catalog.rooms
