"""
Valkey (Redis-compatible) client for cart snapshots.

Holds one JSON document per key. Connection problems surface as
redis.RedisError; the cart storage layer turns those into StorageError.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    JSON document store on top of redis-py.

    Usage:
        valkey = ValkeyClient("redis://localhost:6379/0")
        valkey.set_json("cart:sess-1", {"items": []}, expire_seconds=86400)
        snapshot = valkey.get_json("cart:sess-1")  # None when absent
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        """
        Connect and verify the server answers.

        Args:
            url: Connection URL, e.g. redis://localhost:6379/0
            client: Existing redis client; used instead of url when given

        Raises:
            ValueError: If neither url nor client is given
            redis.ConnectionError: If the server cannot be reached
        """
        if client is None:
            if not url:
                raise ValueError("url or client is required")
            client = redis.from_url(url, decode_responses=True)

        self._client = client
        self._client.ping()
        logger.info("Connected to Valkey")

    def ping(self) -> bool:
        """True when the server answers; raises redis.ConnectionError otherwise."""
        self._client.ping()
        return True

    def delete(self, key: str) -> bool:
        """Remove a document. False when there was nothing to remove."""
        return self._client.delete(key) > 0

    def set_json(self, key: str, value: dict | list, expire_seconds: int | None = None) -> None:
        """
        Store a document as compact JSON.

        Args:
            key: Document key
            value: JSON-serializable dict or list
            expire_seconds: Sliding TTL, reset on every write; None keeps it forever
        """
        payload = json.dumps(value, separators=(",", ":"))
        if expire_seconds is None:
            self._client.set(key, payload)
        else:
            self._client.setex(key, expire_seconds, payload)

    def get_json(self, key: str) -> dict | list | None:
        """
        Read a document.

        Raises:
            ValueError: If the stored value is not JSON
        """
        raw = self._client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}") from e

    def close(self) -> None:
        self._client.close()
        logger.info("Valkey connection closed")
