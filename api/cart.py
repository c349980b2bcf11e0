"""/api/cart/{session_id}: cart reads and mutations."""

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, Field

from api.base import success_response
from core.exceptions import ValidationError
from core.models import LineItem, LineItemConfiguration
from core.services.cart_service import CartSession, CartSessionRegistry


class AddServiceRequest(BaseModel):
    configuration: LineItemConfiguration
    quantity: int = Field(1, ge=1)
    name: str | None = Field(None, max_length=200)


class QuantityRequest(BaseModel):
    quantity: int | float


class CouponRequest(BaseModel):
    code: str = Field(..., max_length=64)


def _cart_view(session: CartSession, tax_rate_bps: int = 0) -> dict:
    cart = session.cart
    return {
        "session_id": session.session_id,
        "items": [item.model_dump(mode="json") for item in cart.items],
        "applied_coupon": (
            cart.applied_coupon.model_dump(mode="json") if cart.applied_coupon else None
        ),
        "total_items": cart.total_items,
        "summary": session.summary(tax_rate_bps).model_dump(mode="json"),
    }


def create_cart_router(registry: CartSessionRegistry) -> APIRouter:
    router = APIRouter()

    @router.get("/cart/{session_id}")
    async def get_cart(
        request: Request,
        session_id: str,
        tax_rate_bps: int = Query(0, ge=0, le=10000),
    ):
        session = registry.get(session_id)
        return success_response(_cart_view(session, tax_rate_bps)).model_dump(mode="json")

    @router.post("/cart/{session_id}/items")
    async def add_item(request: Request, session_id: str, body: LineItem):
        # Only catalog products; configured services are priced server-side.
        if body.is_custom_service:
            raise ValidationError("Configured services must be added through /services")
        session = registry.get(session_id)
        session.add(body)
        return success_response(_cart_view(session)).model_dump(mode="json")

    @router.post("/cart/{session_id}/services")
    async def add_service(request: Request, session_id: str, body: AddServiceRequest):
        session = registry.get(session_id)
        session.add_service(body.configuration, quantity=body.quantity, name=body.name)
        return success_response(_cart_view(session)).model_dump(mode="json")

    @router.patch("/cart/{session_id}/items/{item_id}")
    async def update_quantity(request: Request, session_id: str, item_id: str, body: QuantityRequest):
        session = registry.get(session_id)
        session.update_quantity(item_id, body.quantity)
        return success_response(_cart_view(session)).model_dump(mode="json")

    @router.delete("/cart/{session_id}/items/{item_id}")
    async def remove_item(request: Request, session_id: str, item_id: str):
        session = registry.get(session_id)
        session.remove(item_id)
        return success_response(_cart_view(session)).model_dump(mode="json")

    @router.delete("/cart/{session_id}")
    async def clear_cart(request: Request, session_id: str):
        session = registry.get(session_id)
        session.clear()
        return success_response(_cart_view(session)).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Coupon
    # -------------------------------------------------------------------------

    @router.post("/cart/{session_id}/coupon")
    async def apply_coupon(request: Request, session_id: str, body: CouponRequest):
        session = registry.get(session_id)
        result = await session.apply_coupon(body.code)
        return success_response({
            "coupon": result.model_dump(mode="json"),
            "cart": _cart_view(session),
        }).model_dump(mode="json")

    @router.delete("/cart/{session_id}/coupon")
    async def remove_coupon(request: Request, session_id: str):
        session = registry.get(session_id)
        session.remove_coupon()
        return success_response(_cart_view(session)).model_dump(mode="json")

    return router
