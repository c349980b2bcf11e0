"""Coupon models.

A coupon is stored as a rule (percentage or fixed amount), never as a
dollar value frozen at the time it was applied.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class CouponKind(str, Enum):
    """How a coupon's discount is expressed."""

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class AppliedCoupon(BaseModel):
    """The single active coupon on a cart."""

    code: str = Field(..., min_length=1, max_length=32)
    kind: CouponKind
    discount_percentage: Decimal | None = Field(None, gt=0, le=100)
    discount_amount_cents: int | None = Field(None, gt=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_rule(self) -> "AppliedCoupon":
        """Ensure the discount field matches the coupon kind."""
        if self.kind == CouponKind.PERCENTAGE and self.discount_percentage is None:
            raise ValueError("Percentage coupons require discount_percentage")
        if self.kind == CouponKind.FIXED_AMOUNT and self.discount_amount_cents is None:
            raise ValueError("Fixed amount coupons require discount_amount_cents")
        return self


class CouponValidation(BaseModel):
    """Answer from the external coupon directory."""

    valid: bool
    discount_percentage: Decimal | None = Field(None, gt=0, le=100)
    discount_amount_cents: int | None = Field(None, gt=0)


class CouponResult(BaseModel):
    """Outcome of an apply-coupon request as seen by the caller."""

    accepted: bool
    code: str | None = None
    discount_percentage: Decimal | None = None
    discount_amount_cents: int | None = None
    reason: str | None = None

    def to_applied_coupon(self) -> AppliedCoupon:
        """Convert an accepted result into the rule stored on the cart."""
        if not self.accepted or self.code is None:
            raise ValueError("Only accepted coupons can be applied")
        if self.discount_percentage is not None:
            return AppliedCoupon(
                code=self.code,
                kind=CouponKind.PERCENTAGE,
                discount_percentage=self.discount_percentage,
            )
        return AppliedCoupon(
            code=self.code,
            kind=CouponKind.FIXED_AMOUNT,
            discount_amount_cents=self.discount_amount_cents,
        )
