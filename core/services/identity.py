"""
Identity resolver for cart line items.

Decides whether two line items are the same purchase so the cart can
merge instead of appending a duplicate. Catalog products match on their
price identifier; configured services match on service type, recurrence,
payment frequency and location.
"""

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from pydantic import BaseModel

from core.models import LineItem, LineItemConfiguration

# Fields compared as sets wherever they appear in nested configuration.
SET_FIELDS = frozenset({"add_ons", "reductions"})


@dataclass(frozen=True)
class CatalogPurchase:
    price_id: str


@dataclass(frozen=True)
class ServicePurchase:
    service_type: str
    recurrence: str
    payment_frequency: str
    address: str
    postal_code: str

    @property
    def identity(self) -> dict[str, str]:
        return {
            "service_type": self.service_type,
            "recurrence": self.recurrence,
            "payment_frequency": self.payment_frequency,
        }

    @property
    def has_location(self) -> bool:
        return bool(self.address or self.postal_code)


PurchaseKind = CatalogPurchase | ServicePurchase


def _normalize_address(address: str | None) -> str:
    return " ".join((address or "").lower().split())


def _normalize_postal_code(postal_code: str | None) -> str:
    return (postal_code or "").strip()


def purchase_kind(item: LineItem) -> PurchaseKind:
    """Classify an item as a catalog product or a configured service."""
    if not item.is_custom_service:
        return CatalogPurchase(price_id=item.price_id)

    config = item.configuration
    return ServicePurchase(
        service_type=config.service_type,
        recurrence=item.recurrence.value,
        payment_frequency=config.payment_frequency.value,
        address=_normalize_address(config.customer.address),
        postal_code=_normalize_postal_code(config.customer.postal_code),
    )


def signature(item: LineItem) -> str:
    """
    Compact identity string used as a fast path before full comparison.

    Built from price id, service type, recurrence, postal code and payment
    frequency. A service item without a postal code gets an empty
    signature: it cannot be fast-matched, and equal non-empty signatures
    always mean the same purchase.
    """
    kind = purchase_kind(item)
    if isinstance(kind, CatalogPurchase):
        return f"catalog:{kind.price_id}"

    if not kind.postal_code:
        return ""

    # Free-text fields may contain any separator; JSON keeps them apart.
    return _canonical_json([
        item.price_id or "custom",
        kind.service_type,
        kind.recurrence,
        kind.postal_code,
        kind.payment_frequency,
    ])


def _to_plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


def deep_equal(a: Any, b: Any, set_fields: frozenset[str] = SET_FIELDS, _key: str | None = None) -> bool:
    """
    Structural equality over nested plain data.

    Dicts compare key-by-key, lists and tuples compare in order, except
    under keys named in set_fields where the values are compared sorted.
    Pydantic models are compared through their JSON dump. A bool never
    equals an int.
    """
    a = _to_plain(a)
    b = _to_plain(b)

    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b

    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[k], b[k], set_fields, _key=k) for k in a)

    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if len(a) != len(b):
            return False
        if _key in set_fields:
            try:
                a, b = sorted(a), sorted(b)
            except TypeError:
                a = sorted(a, key=_canonical_json)
                b = sorted(b, key=_canonical_json)
        return all(deep_equal(x, y, set_fields) for x, y in zip(a, b))

    if isinstance(a, (dict, list, tuple)) or isinstance(b, (dict, list, tuple)):
        return False

    return a == b


def is_same_purchase(a: LineItem, b: LineItem) -> bool:
    """True when adding b to a cart holding a should merge rather than append."""
    sig_a = signature(a)
    if sig_a and sig_a == signature(b):
        return True

    kind_a = purchase_kind(a)
    kind_b = purchase_kind(b)

    match (kind_a, kind_b):
        case (CatalogPurchase(), CatalogPurchase()):
            return kind_a.price_id == kind_b.price_id
        case (ServicePurchase(), ServicePurchase()):
            if not deep_equal(kind_a.identity, kind_b.identity):
                return False
            # Unlocated bookings are never merged.
            address_match = bool(kind_a.address) and kind_a.address == kind_b.address
            postal_match = bool(kind_a.postal_code) and kind_a.postal_code == kind_b.postal_code
            return address_match or postal_match
        case _:
            return False


def find_match(items: Sequence[LineItem], candidate: LineItem) -> int | None:
    """Index of the first item that is the same purchase as candidate."""
    for index, item in enumerate(items):
        if is_same_purchase(item, candidate):
            return index
    return None


def _canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def _identity_payload(configuration: LineItemConfiguration, recurrence: str) -> dict[str, Any]:
    room = configuration.room
    return {
        "service_type": configuration.service_type,
        "payment_frequency": configuration.payment_frequency.value,
        "recurrence": recurrence,
        "room": None if room is None else {
            "room_type": room.room_type,
            "tier": room.tier.value,
            "room_count": room.room_count,
            "cleanliness_level": room.cleanliness_level,
            "add_ons": sorted(room.add_ons),
            "reductions": sorted(room.reductions),
        },
        "address": _normalize_address(configuration.customer.address),
        "postal_code": _normalize_postal_code(configuration.customer.postal_code),
    }


def derive_item_id(configuration: LineItemConfiguration, recurrence: str | None = None) -> str:
    """
    Deterministic id for a configured service item.

    Readable prefix plus a short hash of everything that distinguishes
    the booking. Add-on and reduction order does not matter; notes are
    ignored.
    """
    if recurrence is None:
        recurrence = configuration.room.recurrence.value if configuration.room else "one_time"

    room = configuration.room
    prefix = f"{room.room_type}-{room.tier.value}" if room else configuration.service_type
    digest = hashlib.sha1(
        _canonical_json(_identity_payload(configuration, recurrence)).encode("utf-8")
    ).hexdigest()[:10]
    return f"{prefix}-{digest}"


def unique_item_id(item_id: str, taken: Iterable[str]) -> str:
    """item_id, or item_id with the lowest free numeric suffix."""
    taken = set(taken)
    if item_id not in taken:
        return item_id
    suffix = 2
    while f"{item_id}-{suffix}" in taken:
        suffix += 1
    return f"{item_id}-{suffix}"
