"""Tests for cart domain events."""

from dataclasses import FrozenInstanceError
from datetime import timezone

import pytest

from core.events import (
    CartCleared, CartEvent, CouponDiscarded, CouponEvent, CouponRejected,
    ItemAdded, ItemEvent, ItemMerged,
)
from core.models import Cart


class TestCartEventBase:

    def test_event_id_and_timestamp_generated(self):
        event = CartCleared(session_id="s1", sequence=3, cart=Cart())

        assert event.event_id
        assert event.occurred_at.tzinfo == timezone.utc
        assert event.sequence == 3

    def test_event_ids_unique(self):
        assert CartCleared().event_id != CartCleared().event_id

    def test_frozen(self):
        event = ItemAdded(session_id="s1", item_id="a", quantity=1)
        with pytest.raises(FrozenInstanceError):
            event.quantity = 2

    def test_keyword_only(self):
        with pytest.raises(TypeError):
            ItemAdded("s1")


class TestHierarchy:

    def test_item_events(self):
        event = ItemMerged(item_id="a", added_quantity=1, new_quantity=3)
        assert isinstance(event, ItemEvent)
        assert isinstance(event, CartEvent)

    def test_coupon_events(self):
        rejected = CouponRejected(code="NOPE", reason="Coupon code is invalid or has expired")
        discarded = CouponDiscarded(code="SLOW10", requested_sequence=4)

        assert isinstance(rejected, CouponEvent)
        assert rejected.unavailable is False
        assert discarded.requested_sequence == 4

    def test_subscription_name_is_class_name(self):
        assert type(ItemAdded()).__name__ == "ItemAdded"
