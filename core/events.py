"""
Domain events for the cart.

Immutable event objects describing what happened to a session's cart.
Listeners (analytics, abandonment follow-up, audit) subscribe on the
event bus; the cart never knows who is listening.

Event Categories:
- ItemEvent: line item lifecycle (added, merged, removed, quantity changed, pricing failed)
- CouponEvent: coupon lifecycle (applied, rejected, removed, discarded)
- CartCleared

Events carry the resulting Cart snapshot so handlers don't need to
re-read session state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class CartEvent:
    """Base class for all cart domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)
    session_id: str = ""
    sequence: int = 0
    cart: Any = None  # Cart snapshot after the change


# =============================================================================
# ITEM EVENTS
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class ItemEvent(CartEvent):
    """Events related to line items."""
    item_id: str = ""


@dataclass(frozen=True, kw_only=True)
class ItemAdded(ItemEvent):
    """A new line item was appended."""
    quantity: int = 0


@dataclass(frozen=True, kw_only=True)
class ItemMerged(ItemEvent):
    """An added item matched an existing one; quantities were combined."""
    added_quantity: int = 0
    new_quantity: int = 0


@dataclass(frozen=True, kw_only=True)
class ItemRemoved(ItemEvent):
    """A line item was removed (explicitly or via quantity <= 0)."""
    pass


@dataclass(frozen=True, kw_only=True)
class QuantityUpdated(ItemEvent):
    """A line item's quantity was set."""
    old_quantity: int = 0
    new_quantity: int = 0


@dataclass(frozen=True, kw_only=True)
class ItemPricingFailed(ItemEvent):
    """A configured item could not be priced and was not added."""
    reason: str = ""


# =============================================================================
# COUPON EVENTS
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class CouponEvent(CartEvent):
    """Events related to coupons."""
    code: str | None = None


@dataclass(frozen=True, kw_only=True)
class CouponApplied(CouponEvent):
    """A coupon became the cart's active coupon."""
    pass


@dataclass(frozen=True, kw_only=True)
class CouponRejected(CouponEvent):
    """A coupon was invalid, expired or could not be verified."""
    reason: str = ""
    unavailable: bool = False  # directory could not answer


@dataclass(frozen=True, kw_only=True)
class CouponRemoved(CouponEvent):
    """The active coupon was removed by the user."""
    pass


@dataclass(frozen=True, kw_only=True)
class CouponDiscarded(CouponEvent):
    """A coupon response arrived after the cart moved on and was dropped."""
    requested_sequence: int = 0


# =============================================================================
# CART EVENTS
# =============================================================================


@dataclass(frozen=True, kw_only=True)
class CartCleared(CartEvent):
    """All items and the coupon were removed."""
    pass


@dataclass(frozen=True, kw_only=True)
class CartLoaded(CartEvent):
    """The session reconciled with its persisted snapshot."""
    restored_items: int = 0
