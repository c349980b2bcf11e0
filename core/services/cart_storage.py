"""
Cart snapshot persistence.

The persisted snapshot is a cache of the session's cart, not the source
of truth. It holds exactly the Cart fields (items and applied coupon) as
plain JSON; derived values such as totals are never written.
"""

import copy
import logging
from typing import Any, Protocol

import redis
from pydantic import ValidationError as PydanticValidationError

from clients.valkey_client import ValkeyClient
from core.exceptions import StorageError
from core.models import Cart

logger = logging.getLogger(__name__)


def cart_to_snapshot(cart: Cart) -> dict[str, Any]:
    """Plain nested structure mirroring the Cart model."""
    return cart.model_dump(mode="json")


def cart_from_snapshot(data: Any) -> Cart:
    """
    Rebuild a Cart from a stored snapshot.

    Unknown fields are ignored so older readers survive newer writers.

    Raises:
        StorageError: If the snapshot is not a valid cart
    """
    if not isinstance(data, dict):
        raise StorageError(f"Cart snapshot must be an object, got {type(data).__name__}")
    try:
        return Cart.model_validate({
            "items": data.get("items") or [],
            "applied_coupon": data.get("applied_coupon"),
        })
    except PydanticValidationError as e:
        raise StorageError(f"Corrupt cart snapshot: {e.error_count()} invalid fields") from e


class CartStorage(Protocol):
    """Key-value slot holding one snapshot per session."""

    def load(self, session_id: str) -> dict[str, Any] | None: ...

    def save(self, session_id: str, snapshot: dict[str, Any]) -> None: ...

    def delete(self, session_id: str) -> None: ...


class InMemoryCartStorage:
    """Process-local storage for development and single-process deployments."""

    def __init__(self):
        self._snapshots: dict[str, dict[str, Any]] = {}

    def load(self, session_id: str) -> dict[str, Any] | None:
        snapshot = self._snapshots.get(session_id)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def save(self, session_id: str, snapshot: dict[str, Any]) -> None:
        self._snapshots[session_id] = copy.deepcopy(snapshot)

    def delete(self, session_id: str) -> None:
        self._snapshots.pop(session_id, None)


class ValkeyCartStorage:
    """
    Cart snapshots stored in Valkey with a sliding TTL.

    Every redis failure surfaces as StorageError so the cart session can
    degrade to memory-only operation.
    """

    def __init__(self, valkey: ValkeyClient, key_prefix: str = "cart", ttl_seconds: int | None = None):
        self._valkey = valkey
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds

    def _key(self, session_id: str) -> str:
        """Generate Valkey key for a session's cart."""
        return f"{self._key_prefix}:{session_id}"

    def load(self, session_id: str) -> dict[str, Any] | None:
        try:
            data = self._valkey.get_json(self._key(session_id))
        except (redis.RedisError, ValueError) as e:
            raise StorageError(f"Could not read cart {session_id}: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise StorageError(f"Cart snapshot for {session_id} is not an object")
        return data

    def save(self, session_id: str, snapshot: dict[str, Any]) -> None:
        try:
            self._valkey.set_json(self._key(session_id), snapshot, expire_seconds=self._ttl_seconds)
        except redis.RedisError as e:
            raise StorageError(f"Could not write cart {session_id}: {e}") from e

    def delete(self, session_id: str) -> None:
        try:
            self._valkey.delete(self._key(session_id))
        except redis.RedisError as e:
            raise StorageError(f"Could not delete cart {session_id}: {e}") from e
