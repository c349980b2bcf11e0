"""
Cart aggregator.

Pure snapshot transitions (add, remove, update quantity, clear) plus
CartSession, the single logical owner of one shopper's cart. Every
mutation produces a new immutable Cart, bumps the session's sequence
number, persists the snapshot and publishes a domain event.

Money totals are not computed here; see summary_service.
"""

import logging
import math
from collections import OrderedDict
from numbers import Integral
from typing import Iterable

from pydantic import ValidationError as PydanticValidationError

from core.config import CartConfig
from core.event_bus import EventBus
from core.events import (
    CartCleared, CartLoaded, CouponApplied, CouponDiscarded, CouponRejected,
    CouponRemoved, ItemAdded, ItemMerged, ItemPricingFailed, ItemRemoved,
    QuantityUpdated,
)
from core.exceptions import (
    ItemNotPriceableError, StorageError, UnknownCatalogEntryError, ValidationError,
)
from core.models import Cart, CartSummary, CouponResult, LineItem, LineItemConfiguration
from core.services.cart_storage import CartStorage, InMemoryCartStorage, cart_from_snapshot, cart_to_snapshot
from core.services.discount_service import REASON_UNAVAILABLE, DiscountService, normalize_coupon_code
from core.services.identity import deep_equal, find_match, unique_item_id
from core.services.pricing_service import PricingService
from core.services.summary_service import build_summary, shipping_for

logger = logging.getLogger(__name__)

REASON_SUPERSEDED = "Cart changed while the coupon was being checked"


# =============================================================================
# PURE TRANSITIONS
# =============================================================================


def _merge_or_append(cart: Cart, item: LineItem) -> tuple[Cart, int | None]:
    """New cart plus the index the item merged into (None if appended)."""
    index = find_match(cart.items, item)
    if index is not None:
        existing = cart.items[index]
        merged = existing.model_copy(update={"quantity": existing.quantity + item.quantity})
        items = cart.items[:index] + (merged,) + cart.items[index + 1:]
        return cart.model_copy(update={"items": items}), index

    item_id = unique_item_id(item.id, (i.id for i in cart.items))
    if item_id != item.id:
        item = item.model_copy(update={"id": item_id})
    return cart.model_copy(update={"items": cart.items + (item,)}), None


def add_item(cart: Cart, item: LineItem) -> Cart:
    """Merge item into the matching entry, or append it."""
    return _merge_or_append(cart, item)[0]


def remove_item(cart: Cart, item_id: str) -> Cart:
    """Cart without item_id. Removing an absent id returns the cart unchanged."""
    if cart.get_item(item_id) is None:
        return cart
    return cart.model_copy(update={"items": tuple(i for i in cart.items if i.id != item_id)})


def validate_quantity(quantity) -> int:
    """
    Coerce a requested quantity to int.

    Raises:
        ValidationError: If quantity is not a finite whole number
    """
    if isinstance(quantity, bool):
        raise ValidationError("Quantity must be a whole number")
    if isinstance(quantity, Integral):
        return int(quantity)
    if isinstance(quantity, float):
        if not math.isfinite(quantity):
            raise ValidationError("Quantity must be a finite number")
        if quantity.is_integer():
            return int(quantity)
    raise ValidationError(f"Quantity must be a whole number, got {quantity!r}")


def update_quantity(cart: Cart, item_id: str, quantity) -> Cart:
    """
    Set an item's quantity. Zero or less removes the item.

    Raises:
        ValidationError: If quantity is not a finite whole number
    """
    quantity = validate_quantity(quantity)
    if quantity <= 0:
        return remove_item(cart, item_id)

    items = []
    changed = False
    for item in cart.items:
        if item.id == item_id and item.quantity != quantity:
            item = item.model_copy(update={"quantity": quantity})
            changed = True
        items.append(item)

    if not changed:
        return cart
    return cart.model_copy(update={"items": tuple(items)})


def clear_cart(cart: Cart) -> Cart:
    """Empty cart with no coupon."""
    return Cart()


# =============================================================================
# SESSION
# =============================================================================


class CartSession:
    """
    Owner of one session's cart.

    Synchronous mutations apply immediately. Coupon validation is the only
    operation that waits on I/O; its result is applied to whatever the
    cart looks like when it arrives, and dropped if the cart was cleared,
    the coupon removed, or a newer coupon requested in the meantime.

    Usage:
        session = CartSession("sess-1", pricing, discounts, storage, event_bus)
        session.load()
        session.add_service(configuration)
        result = await session.apply_coupon("WELCOME10")
        summary = session.summary(tax_rate_bps=800)
    """

    def __init__(
        self,
        session_id: str,
        pricing: PricingService,
        discounts: DiscountService,
        storage: CartStorage | None = None,
        event_bus: EventBus | None = None,
        config: CartConfig | None = None,
    ):
        if not session_id:
            raise ValueError("session_id is required")

        self.session_id = session_id
        self.pricing = pricing
        self.discounts = discounts
        self.storage = storage if storage is not None else InMemoryCartStorage()
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self.config = config if config is not None else CartConfig()

        self._cart = Cart()
        self._sequence = 0
        self._last_clear_sequence = 0
        self._last_coupon_sequence = 0
        self._loaded = False
        self._persist_pending = False

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def cart(self) -> Cart:
        return self._cart

    @property
    def total_items(self) -> int:
        return self._cart.total_items

    @property
    def sequence(self) -> int:
        """Number of operations issued on this session so far."""
        return self._sequence

    @property
    def persist_pending(self) -> bool:
        """True when the last snapshot write failed and will be retried."""
        return self._persist_pending

    def flush(self) -> bool:
        """Retry a failed snapshot write. True when nothing is left unsaved."""
        if self._persist_pending:
            self._persist()
        return not self._persist_pending

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def _persist(self) -> None:
        if not self._loaded:
            # The persisted snapshot has not been read yet; load() writes the merged cart.
            return
        try:
            self.storage.save(self.session_id, cart_to_snapshot(self._cart))
        except StorageError as e:
            if not self._persist_pending:
                logger.warning(f"Cart {self.session_id} not persisted, will retry on next change: {e}")
            self._persist_pending = True
            return
        if self._persist_pending:
            logger.info(f"Cart {self.session_id} persisted after earlier failure")
        self._persist_pending = False

    def _publish(self, event_cls, **fields) -> None:
        self.event_bus.publish(event_cls(
            session_id=self.session_id,
            sequence=self._sequence,
            cart=self._cart,
            **fields,
        ))

    def _commit(self, cart: Cart) -> Cart:
        self._cart = cart
        self._persist()
        return cart

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------

    def load(self) -> Cart:
        """
        Reconcile with the persisted snapshot. Only the first call reads storage.

        Persisted items come first; anything already added in memory is
        merged on top. An unreadable or corrupt snapshot is logged and
        ignored.
        """
        if self._loaded:
            return self._cart
        self._loaded = True

        try:
            data = self.storage.load(self.session_id)
            persisted = cart_from_snapshot(data) if data is not None else None
        except StorageError as e:
            logger.warning(f"Ignoring persisted cart {self.session_id}: {e}")
            return self._cart

        if persisted is None:
            if not self._cart.is_empty:
                self._persist()
            return self._cart
        if deep_equal(persisted, self._cart):
            return self._cart

        self._next_sequence()
        reconciled = persisted
        for item in self._cart.items:
            reconciled = add_item(reconciled, item)
        if self._cart.applied_coupon is not None:
            reconciled = reconciled.model_copy(update={"applied_coupon": self._cart.applied_coupon})

        self._commit(reconciled)
        logger.info(f"Cart {self.session_id} restored with {len(persisted.items)} items")
        self._publish(CartLoaded, restored_items=len(persisted.items))
        return self._cart

    # -------------------------------------------------------------------------
    # Item operations
    # -------------------------------------------------------------------------

    def add(self, item: LineItem) -> Cart:
        """
        Add an item, merging with the same purchase if present.

        Returns:
            The new cart snapshot
        """
        self._next_sequence()
        cart, index = _merge_or_append(self._cart, item)
        self._commit(cart)

        if index is None:
            added = cart.items[-1]
            self._publish(ItemAdded, item_id=added.id, quantity=added.quantity)
        else:
            merged = cart.items[index]
            self._publish(
                ItemMerged, item_id=merged.id,
                added_quantity=item.quantity, new_quantity=merged.quantity,
            )
        return cart

    def add_many(self, items: Iterable[LineItem]) -> Cart:
        """Add several items in order with a single snapshot write."""
        self._next_sequence()
        cart = self._cart
        events = []
        for item in items:
            cart, index = _merge_or_append(cart, item)
            if index is None:
                events.append((ItemAdded, {"item_id": cart.items[-1].id, "quantity": item.quantity}))
            else:
                events.append((ItemMerged, {
                    "item_id": cart.items[index].id,
                    "added_quantity": item.quantity,
                    "new_quantity": cart.items[index].quantity,
                }))

        if not events:
            return self._cart

        self._commit(cart)
        for event_cls, fields in events:
            self._publish(event_cls, **fields)
        return cart

    def add_service(
        self,
        configuration: LineItemConfiguration,
        quantity: int = 1,
        name: str | None = None,
    ) -> Cart:
        """
        Price a configured service and add it.

        Raises:
            ValidationError: If the configuration or quantity is malformed
            ItemNotPriceableError: If the catalog cannot price the configuration;
                the rest of the cart is untouched
        """
        quantity = validate_quantity(quantity)
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        try:
            item = self.pricing.price_line_item(configuration, quantity=quantity, name=name)
        except UnknownCatalogEntryError as e:
            logger.warning(f"Could not price item for cart {self.session_id}: {e}")
            self._publish(ItemPricingFailed, reason=str(e))
            raise ItemNotPriceableError() from e
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid service configuration: {e.error_count()} errors") from e
        except ValueError as e:
            raise ValidationError(str(e)) from e

        return self.add(item)

    def remove(self, item_id: str) -> Cart:
        """Remove an item. Absent ids are a no-op."""
        self._next_sequence()
        cart = remove_item(self._cart, item_id)
        if cart is self._cart:
            return cart

        self._commit(cart)
        self._publish(ItemRemoved, item_id=item_id)
        return cart

    def update_quantity(self, item_id: str, quantity) -> Cart:
        """
        Set an item's quantity; zero or less removes it.

        Raises:
            ValidationError: If quantity is not a finite whole number
        """
        quantity = validate_quantity(quantity)
        self._next_sequence()

        current = self._cart.get_item(item_id)
        cart = update_quantity(self._cart, item_id, quantity)
        if cart is self._cart:
            return cart

        self._commit(cart)
        if quantity <= 0:
            self._publish(ItemRemoved, item_id=item_id)
        else:
            self._publish(
                QuantityUpdated, item_id=item_id,
                old_quantity=current.quantity, new_quantity=quantity,
            )
        return cart

    def clear(self) -> Cart:
        """Remove every item and the coupon. Pending coupon checks are discarded."""
        self._last_clear_sequence = self._next_sequence()
        self._commit(clear_cart(self._cart))
        self._publish(CartCleared)
        return self._cart

    # -------------------------------------------------------------------------
    # Coupons
    # -------------------------------------------------------------------------

    def _coupon_is_stale(self, requested_sequence: int) -> bool:
        return (
            self._last_clear_sequence > requested_sequence
            or self._last_coupon_sequence != requested_sequence
        )

    async def apply_coupon(self, code: str) -> CouponResult:
        """
        Validate a coupon and make it the active one.

        A rejected coupon leaves the current coupon in place.

        Raises:
            ValidationError: If the code is malformed
        """
        normalized = normalize_coupon_code(code)
        requested = self._next_sequence()
        self._last_coupon_sequence = requested

        result = await self.discounts.validate(normalized)

        if self._coupon_is_stale(requested):
            logger.info(f"Discarding stale coupon response for {normalized} on cart {self.session_id}")
            self._publish(CouponDiscarded, code=normalized, requested_sequence=requested)
            return CouponResult(accepted=False, code=normalized, reason=REASON_SUPERSEDED)

        if not result.accepted:
            self._publish(
                CouponRejected, code=normalized, reason=result.reason or "",
                unavailable=result.reason == REASON_UNAVAILABLE,
            )
            return result

        self._next_sequence()
        self._commit(self._cart.model_copy(update={"applied_coupon": result.to_applied_coupon()}))
        self._publish(CouponApplied, code=normalized)
        return result

    def remove_coupon(self) -> Cart:
        """Drop the active coupon. Also cancels any pending coupon check."""
        self._last_coupon_sequence = self._next_sequence()
        previous = self._cart.applied_coupon
        if previous is None:
            return self._cart

        self._commit(self._cart.model_copy(update={"applied_coupon": None}))
        self._publish(CouponRemoved, code=previous.code)
        return self._cart

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def summary(self, tax_rate_bps: int = 0) -> CartSummary:
        """Reconciled totals for the cart as it is now."""
        cart = self._cart
        subtotal = sum(item.total_price_cents for item in cart.items)
        shipping = 0 if cart.is_empty else shipping_for(
            subtotal, self.config.shipping_cents, self.config.free_shipping_threshold_cents,
        )
        return build_summary(cart.items, cart.applied_coupon, tax_rate_bps, shipping_cents=shipping)


# =============================================================================
# REGISTRY
# =============================================================================


class CartSessionRegistry:
    """
    One CartSession per session id, sharing pricing, discounts, storage,
    event bus and configuration.

    Sessions are created and loaded on first access. At most
    config.max_sessions stay in memory; the least recently used one is
    evicted and reloads from its persisted snapshot when next requested.
    """

    def __init__(
        self,
        pricing: PricingService,
        discounts: DiscountService,
        storage: CartStorage | None = None,
        event_bus: EventBus | None = None,
        config: CartConfig | None = None,
    ):
        self.pricing = pricing
        self.discounts = discounts
        self.storage = storage if storage is not None else InMemoryCartStorage()
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self.config = config if config is not None else CartConfig()
        self._sessions: OrderedDict[str, CartSession] = OrderedDict()

    def get(self, session_id: str) -> CartSession:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
            return session

        session = CartSession(
            session_id,
            self.pricing,
            self.discounts,
            storage=self.storage,
            event_bus=self.event_bus,
            config=self.config,
        )
        session.load()
        self._sessions[session_id] = session
        while len(self._sessions) > self.config.max_sessions:
            self._evict_oldest()
        return session

    def _evict_oldest(self) -> None:
        session_id, session = self._sessions.popitem(last=False)
        if not session.flush():
            logger.warning(f"Evicted cart {session_id} with changes storage did not accept")
        logger.debug(f"Evicted idle cart session {session_id}")

    def discard(self, session_id: str) -> None:
        """Forget a session and delete its persisted snapshot."""
        self._sessions.pop(session_id, None)
        try:
            self.storage.delete(session_id)
        except StorageError as e:
            logger.warning(f"Could not delete persisted cart {session_id}: {e}")

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
