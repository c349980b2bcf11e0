"""Fixtures for API tests: the assembled cart app on in-memory collaborators."""

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from core.config import CartConfig


@pytest.fixture
def app(catalog, coupon_directory, storage, event_bus):
    """Cart app with the test catalog, static coupons and in-memory storage."""
    return create_app(
        config=CartConfig(shipping_cents=0),
        catalog=catalog,
        coupon_directory=coupon_directory,
        storage=storage,
        event_bus=event_bus,
    )


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def kitchen_request():
    """Body for POST /services: premium kitchen in 10001."""
    return {
        "configuration": {
            "room": {"room_type": "kitchen", "tier": "premium"},
            "customer": {"postal_code": "10001"},
        },
    }
