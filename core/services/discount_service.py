"""
Discount service for coupon codes.

Coupons are validated against an external directory that may be slow or
unavailable. Every failure mode degrades to a rejected coupon; none of
them reaches the cart as an exception.
"""

import asyncio
import logging
import re
from typing import Protocol

from core.exceptions import CouponUnavailableError, ValidationError
from core.models import AppliedCoupon, CouponKind, CouponResult, CouponValidation
from utils.money import apply_percentage

logger = logging.getLogger(__name__)

_COUPON_CODE_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9_-]{2,31}$")

REASON_INVALID = "Coupon code is invalid or has expired"
REASON_UNAVAILABLE = "Coupon service unavailable, please try again"


class CouponDirectory(Protocol):
    """External collaborator that knows which coupon codes are live."""

    def validate(self, code: str) -> CouponValidation: ...


def normalize_coupon_code(code: str) -> str:
    """
    Canonical form of a user-typed coupon code.

    Raises:
        ValidationError: If the code is empty or malformed
    """
    if not isinstance(code, str):
        raise ValidationError("Coupon code must be a string")
    normalized = code.strip().upper()
    if not normalized:
        raise ValidationError("Enter a coupon code")
    if not _COUPON_CODE_PATTERN.match(normalized):
        raise ValidationError(f"Malformed coupon code '{code.strip()}'")
    return normalized


def coupon_discount_cents(subtotal_cents: int, coupon: AppliedCoupon | None) -> int:
    """Coupon discount for a subtotal. Never negative, never more than the subtotal."""
    if coupon is None or subtotal_cents <= 0:
        return 0

    if coupon.kind == CouponKind.PERCENTAGE:
        discount = apply_percentage(subtotal_cents, coupon.discount_percentage)
    else:
        discount = coupon.discount_amount_cents or 0

    return max(0, min(subtotal_cents, discount))


class DiscountService:
    """Service for coupon validation."""

    def __init__(self, directory: CouponDirectory, timeout_seconds: float = 3.0):
        self.directory = directory
        self.timeout_seconds = timeout_seconds

    async def _lookup(self, code: str) -> CouponValidation:
        """
        Ask the directory about a code, bounded by the timeout.

        Raises:
            CouponUnavailableError: On timeout or any directory failure
        """
        try:
            validation = await asyncio.wait_for(
                asyncio.to_thread(self.directory.validate, code),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise CouponUnavailableError(
                f"Coupon directory timed out after {self.timeout_seconds}s"
            ) from e
        except Exception as e:
            raise CouponUnavailableError(f"Coupon directory failed: {e}") from e

        if not isinstance(validation, CouponValidation):
            raise CouponUnavailableError(
                f"Coupon directory returned {type(validation).__name__}, expected CouponValidation"
            )
        return validation

    async def validate(self, code: str) -> CouponResult:
        """
        Validate a coupon code.

        Args:
            code: Coupon code as typed by the user

        Returns:
            CouponResult; accepted=False with a reason for invalid, expired
            or unverifiable codes

        Raises:
            ValidationError: If the code is malformed
        """
        normalized = normalize_coupon_code(code)

        try:
            validation = await self._lookup(normalized)
        except CouponUnavailableError as e:
            logger.warning(f"Coupon directory unavailable for {normalized}: {e}")
            return CouponResult(accepted=False, code=normalized, reason=REASON_UNAVAILABLE)

        has_rule = (
            validation.discount_percentage is not None
            or validation.discount_amount_cents is not None
        )
        if not validation.valid or not has_rule:
            logger.info(f"Coupon {normalized} rejected by directory")
            return CouponResult(accepted=False, code=normalized, reason=REASON_INVALID)

        logger.info(f"Coupon {normalized} accepted")
        return CouponResult(
            accepted=True,
            code=normalized,
            discount_percentage=validation.discount_percentage,
            discount_amount_cents=(
                None if validation.discount_percentage is not None
                else validation.discount_amount_cents
            ),
        )
