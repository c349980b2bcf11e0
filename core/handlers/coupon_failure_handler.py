"""
Handler for coupon directory outages.

A single unavailable answer is routine (the shopper sees "try again").
A run of them across sessions means the directory is down; this handler
raises that to an error log once per outage.
"""

import logging

from core.event_bus import EventBus
from core.events import CouponApplied, CouponRejected

logger = logging.getLogger(__name__)


class CouponOutageMonitor:
    """Counts consecutive unavailable coupon answers across all sessions."""

    def __init__(self, threshold: int = 5):
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.threshold = threshold
        self.consecutive_failures = 0
        self.outage_reported = False

    def register(self, event_bus: EventBus) -> None:
        event_bus.subscribe("CouponRejected", self.on_rejected)
        event_bus.subscribe("CouponApplied", self.on_applied)

    def on_rejected(self, event: CouponRejected):
        if not event.unavailable:
            # The directory answered; it is up.
            self._reset()
            return

        self.consecutive_failures += 1
        if self.consecutive_failures >= self.threshold and not self.outage_reported:
            self.outage_reported = True
            logger.error(
                "Coupon directory unavailable for %d consecutive requests (last session=%s)",
                self.consecutive_failures,
                event.session_id,
            )

    def on_applied(self, event: CouponApplied):
        self._reset()

    def _reset(self):
        if self.outage_reported:
            logger.info("Coupon directory recovered after %d failures", self.consecutive_failures)
        self.consecutive_failures = 0
        self.outage_reported = False
