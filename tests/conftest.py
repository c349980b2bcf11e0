"""Shared test fixtures for the cart test suite.

Everything runs in-process: in-memory storage, static coupon directory,
a small pricing catalog with round numbers.
"""

import pytest

from core.models import (
    CatalogEntry, CustomerDetails, LineItem, LineItemConfiguration,
    PaymentFrequency, PricingCatalog, Recurrence, RoomRate,
)


# =============================================================================
# TEST DATA BUILDERS
# =============================================================================


def _service_item(
    item_id: str = "svc-1",
    *,
    service_type: str = "standard",
    recurrence: Recurrence = Recurrence.ONE_TIME,
    payment_frequency: PaymentFrequency = PaymentFrequency.PER_SERVICE,
    address: str | None = None,
    postal_code: str | None = "10001",
    quantity: int = 1,
    unit_price_cents: int = 12000,
    notes: str | None = None,
) -> LineItem:
    """A configured service line item (shared custom price id)."""
    return LineItem(
        id=item_id,
        name="Standard Cleaning",
        unit_price_cents=unit_price_cents,
        quantity=quantity,
        recurrence=recurrence,
        price_id=None,
        configuration=LineItemConfiguration(
            service_type=service_type,
            payment_frequency=payment_frequency,
            customer=CustomerDetails(address=address, postal_code=postal_code, notes=notes),
        ),
    )


def _catalog_item(
    price_id: str = "price_microfiber_kit",
    *,
    item_id: str | None = None,
    quantity: int = 1,
    unit_price_cents: int = 2500,
) -> LineItem:
    """A catalog product line item with its own price id."""
    return LineItem(
        id=item_id or price_id,
        name="Microfiber Kit",
        unit_price_cents=unit_price_cents,
        quantity=quantity,
        price_id=price_id,
    )


# =============================================================================
# BUILDER FIXTURES
# =============================================================================


@pytest.fixture
def make_service_item():
    return _service_item


@pytest.fixture
def make_catalog_item():
    return _catalog_item


# =============================================================================
# CATALOG & SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def catalog() -> PricingCatalog:
    """Kitchen at 75 base / 25 per room, plus a few extras."""
    return PricingCatalog(
        rooms={
            "kitchen": RoomRate(base_cents=75, per_room_cents=25, per_room_minutes=45),
            "bathroom": RoomRate(base_cents=6000, per_room_cents=2000, per_room_minutes=35),
            "closet": RoomRate(base_cents=1000, per_room_cents=0, per_room_minutes=10),
        },
        add_ons={
            "oven": CatalogEntry(name="Oven Interior", amount_cents=3000),
            "windows": CatalogEntry(name="Window Cleaning", amount_cents=800),
        },
        reductions={
            "skip_dusting": CatalogEntry(name="Skip Dusting", amount_cents=800),
            "skip_everything": CatalogEntry(name="Skip Everything", amount_cents=50000),
        },
    )


@pytest.fixture
def pricing(catalog):
    from core.services.pricing_service import PricingService
    return PricingService(catalog)


@pytest.fixture
def coupon_directory():
    from clients.coupon_client import StaticCouponDirectory
    return StaticCouponDirectory({"WELCOME10": 10, "HALF50": 50}, fixed={"FIVEOFF": 500})


@pytest.fixture
def discounts(coupon_directory):
    from core.services.discount_service import DiscountService
    return DiscountService(coupon_directory, timeout_seconds=1.0)


@pytest.fixture
def storage():
    from core.services.cart_storage import InMemoryCartStorage
    return InMemoryCartStorage()


@pytest.fixture
def event_bus():
    from core.event_bus import EventBus
    return EventBus()


@pytest.fixture
def published(event_bus):
    """Every event published on the bus, in order."""
    events = []
    event_bus.subscribe("*", events.append)
    return events


@pytest.fixture
def session(pricing, discounts, storage, event_bus):
    """A loaded, empty cart session."""
    from core.services.cart_service import CartSession
    s = CartSession("sess-1", pricing, discounts, storage=storage, event_bus=event_bus)
    s.load()
    return s
