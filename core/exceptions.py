"""Typed exceptions for cart, pricing and coupon failures."""


class CartError(Exception):
    """Base class for cart core errors."""


class ValidationError(CartError, ValueError):
    """
    Malformed input to a public cart operation.

    Non-integer quantity, malformed coupon code, overlapping add-ons and
    reductions. The cart is left unchanged.
    """


class UnknownCatalogEntryError(CartError, LookupError):
    """A configuration references a room, tier, add-on or reduction the catalog lacks."""

    def __init__(self, kind: str, entry_id: str):
        self.kind = kind
        self.entry_id = entry_id
        super().__init__(f"Unknown {kind} '{entry_id}' in pricing catalog")


class ItemNotPriceableError(CartError):
    """
    An item could not be priced and was not added.

    Raised at the cart boundary in place of UnknownCatalogEntryError so
    the raw catalog failure never reaches the end user.
    """

    def __init__(self, message: str = "Could not price this item"):
        super().__init__(message)


class CouponUnavailableError(CartError):
    """Coupon directory timed out or failed. Treated as a rejected coupon."""


class StorageError(CartError):
    """Cart snapshot could not be read or written. Never blocks a cart operation."""
