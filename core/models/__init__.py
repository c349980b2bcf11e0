"""Core domain models."""

from core.models.service import (
    Recurrence, PaymentFrequency, Tier,
    ServiceConfiguration, PriceAdjustment, PriceQuote,
)
from core.models.catalog import PricingCatalog, RoomRate, CatalogEntry, default_catalog
from core.models.line_item import (
    LineItem, LineItemConfiguration, CustomerDetails, CUSTOM_SERVICE_PRICE_ID,
)
from core.models.coupon import AppliedCoupon, CouponKind, CouponValidation, CouponResult
from core.models.cart import Cart, CartSummary

__all__ = [
    # Service
    "Recurrence", "PaymentFrequency", "Tier",
    "ServiceConfiguration", "PriceAdjustment", "PriceQuote",
    # Catalog
    "PricingCatalog", "RoomRate", "CatalogEntry", "default_catalog",
    # LineItem
    "LineItem", "LineItemConfiguration", "CustomerDetails", "CUSTOM_SERVICE_PRICE_ID",
    # Coupon
    "AppliedCoupon", "CouponKind", "CouponValidation", "CouponResult",
    # Cart
    "Cart", "CartSummary",
]
