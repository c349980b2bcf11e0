"""External service clients."""

from clients.valkey_client import ValkeyClient
from clients.coupon_client import CouponDirectoryClient, CouponDirectoryError, StaticCouponDirectory
