"""Application assembly: services, storage, coupon directory and routes."""

import logging

from fastapi import FastAPI

from api.cart import create_cart_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from clients.coupon_client import CouponDirectoryClient, StaticCouponDirectory
from clients.valkey_client import ValkeyClient
from core.config import CartConfig, load_config
from core.event_bus import EventBus
from core.handlers.cart_activity_handler import CartActivityLog
from core.handlers.coupon_failure_handler import CouponOutageMonitor
from core.models import PricingCatalog, default_catalog
from core.services.cart_service import CartSessionRegistry
from core.services.cart_storage import CartStorage, InMemoryCartStorage, ValkeyCartStorage
from core.services.discount_service import CouponDirectory, DiscountService
from core.services.pricing_service import PricingService

logger = logging.getLogger(__name__)


def build_storage(config: CartConfig) -> CartStorage:
    """Valkey-backed storage when a URL is configured, otherwise in-process."""
    if not config.valkey_url:
        logger.info("No Valkey URL configured; carts are kept in memory")
        return InMemoryCartStorage()
    return ValkeyCartStorage(
        ValkeyClient(config.valkey_url),
        key_prefix=config.storage_key_prefix,
        ttl_seconds=config.snapshot_ttl_seconds,
    )


def build_coupon_directory(config: CartConfig) -> CouponDirectory:
    """Remote directory when a URL is configured, otherwise an empty static table."""
    if not config.coupon_directory_url:
        logger.info("No coupon directory URL configured; every coupon will be rejected")
        return StaticCouponDirectory()
    return CouponDirectoryClient(
        config.coupon_directory_url,
        api_key=config.coupon_api_key,
        timeout_seconds=config.coupon_timeout_seconds,
    )


def create_app(
    config: CartConfig | None = None,
    catalog: PricingCatalog | None = None,
    coupon_directory: CouponDirectory | None = None,
    storage: CartStorage | None = None,
    event_bus: EventBus | None = None,
) -> FastAPI:
    """
    Build the cart API.

    Args:
        config: Settings; read from CART_* environment variables when omitted
        catalog: Pricing catalog; the built-in catalog when omitted
        coupon_directory: Overrides the configured directory
        storage: Overrides the configured snapshot storage
        event_bus: Shared bus; a new one when omitted

    Returns:
        FastAPI app with the session registry at app.state.carts
    """
    config = config if config is not None else load_config()
    event_bus = event_bus if event_bus is not None else EventBus()
    CouponOutageMonitor().register(event_bus)
    CartActivityLog().register(event_bus)

    registry = CartSessionRegistry(
        PricingService(catalog if catalog is not None else default_catalog()),
        DiscountService(
            coupon_directory if coupon_directory is not None else build_coupon_directory(config),
            timeout_seconds=config.coupon_timeout_seconds,
        ),
        storage=storage if storage is not None else build_storage(config),
        event_bus=event_bus,
        config=config,
    )

    app = FastAPI(title="Cart")
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)
    app.include_router(create_cart_router(registry), prefix="/api")
    app.state.carts = registry
    return app
