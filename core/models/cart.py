"""Cart aggregate and derived summary models.

All amounts are stored in cents (integer) to avoid floating point issues.
Tax rate is basis points (10000 = 100%).
"""

from pydantic import BaseModel, Field

from core.models.coupon import AppliedCoupon
from core.models.line_item import LineItem


class Cart(BaseModel):
    """
    Immutable cart snapshot.

    Only items and the applied coupon are stored; everything else is
    derived. Operations return a new Cart rather than mutating this one.
    """

    items: tuple[LineItem, ...] = ()
    applied_coupon: AppliedCoupon | None = None

    model_config = {"frozen": True}

    @property
    def total_items(self) -> int:
        """Sum of quantities across all items."""
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def get_item(self, item_id: str) -> LineItem | None:
        """Item with the given id, or None."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class CartSummary(BaseModel):
    """Monetary breakdown derived from a cart. Never mutated directly."""

    subtotal_cents: int = Field(..., ge=0)
    discounts_cents: int = Field(..., ge=0)
    taxes_cents: int = Field(..., ge=0)
    shipping_cents: int = Field(0, ge=0)
    total_cents: int = Field(..., ge=0)
    tax_rate_bps: int = Field(0, ge=0)
    coupon_code: str | None = None

    model_config = {"frozen": True}

    @property
    def total_dollars(self) -> float:
        """Total in dollars for display."""
        return self.total_cents / 100
