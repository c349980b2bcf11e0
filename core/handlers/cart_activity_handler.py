"""
Activity log for cart sessions.

Subscribes to every cart event and writes one line per change, so a
session's history can be followed in the logs by session id and
sequence number.
"""

import logging

from core.event_bus import EventBus
from core.events import CartEvent, CouponEvent, ItemEvent

logger = logging.getLogger(__name__)


class CartActivityLog:
    """Logs every cart event at INFO."""

    def register(self, event_bus: EventBus) -> None:
        event_bus.subscribe("*", self.on_event)

    def on_event(self, event: CartEvent):
        detail = ""
        if isinstance(event, ItemEvent):
            detail = f" item={event.item_id}"
        elif isinstance(event, CouponEvent) and event.code:
            detail = f" code={event.code}"

        total_items = event.cart.total_items if event.cart is not None else 0
        logger.info(
            "Cart %s seq=%d %s%s items=%d",
            event.session_id,
            event.sequence,
            type(event).__name__,
            detail,
            total_items,
        )
