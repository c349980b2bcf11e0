"""
Summary builder for cart totals.

Pure function of items, coupon and tax rate. Recurrence discounts are
already part of each unit price and are not applied again here.
"""

from typing import Iterable

from core.exceptions import ValidationError
from core.models import AppliedCoupon, CartSummary, LineItem
from core.services.discount_service import coupon_discount_cents
from utils.money import apply_bps


def shipping_for(subtotal_cents: int, shipping_cents: int, free_threshold_cents: int | None) -> int:
    """Flat shipping, waived once the subtotal reaches the free-shipping threshold."""
    if free_threshold_cents is not None and subtotal_cents >= free_threshold_cents:
        return 0
    return shipping_cents


def build_summary(
    items: Iterable[LineItem],
    applied_coupon: AppliedCoupon | None,
    tax_rate_bps: int,
    shipping_cents: int = 0,
) -> CartSummary:
    """
    Derive the monetary breakdown for a set of items.

    Args:
        items: Cart line items
        applied_coupon: Active coupon rule, if any
        tax_rate_bps: Tax rate in basis points (800 = 8%)
        shipping_cents: Shipping charge added after tax

    Returns:
        CartSummary with discounts clamped to [0, subtotal] and total >= 0

    Raises:
        ValidationError: If tax rate or shipping is negative
    """
    if isinstance(tax_rate_bps, bool) or not isinstance(tax_rate_bps, int) or tax_rate_bps < 0:
        raise ValidationError(f"Tax rate must be a non-negative integer in basis points, got {tax_rate_bps!r}")
    if shipping_cents < 0:
        raise ValidationError(f"Shipping must be non-negative, got {shipping_cents}")

    subtotal = sum(item.unit_price_cents * item.quantity for item in items)
    discounts = min(subtotal, coupon_discount_cents(subtotal, applied_coupon))
    taxes = apply_bps(subtotal - discounts, tax_rate_bps)
    total = max(0, subtotal - discounts + taxes + shipping_cents)

    return CartSummary(
        subtotal_cents=subtotal,
        discounts_cents=discounts,
        taxes_cents=taxes,
        shipping_cents=shipping_cents,
        total_cents=total,
        tax_rate_bps=tax_rate_bps,
        coupon_code=applied_coupon.code if applied_coupon else None,
    )
