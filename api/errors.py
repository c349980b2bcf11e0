"""Exception-to-envelope mapping for the cart API."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from core.exceptions import CartError, ItemNotPriceableError, ValidationError

logger = logging.getLogger(__name__)


def _envelope(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, request_id).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers on the app.

    Domain errors carry user-safe messages and pass through. Anything
    unexpected becomes a generic 500 so internals never leak.
    """

    @app.exception_handler(ValidationError)
    async def cart_validation_error_handler(request: Request, exc: ValidationError):
        return _envelope(request, 400, ErrorCodes.VALIDATION_ERROR, str(exc))

    @app.exception_handler(ItemNotPriceableError)
    async def not_priceable_handler(request: Request, exc: ItemNotPriceableError):
        return _envelope(request, 422, ErrorCodes.ITEM_NOT_PRICEABLE, str(exc))

    @app.exception_handler(CartError)
    async def cart_error_handler(request: Request, exc: CartError):
        logger.warning(f"Cart operation failed: {exc}")
        return _envelope(request, 400, ErrorCodes.CART_ERROR, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return _envelope(request, 400, ErrorCodes.INVALID_REQUEST, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) for error in exc.errors()
        )
        return _envelope(request, 422, ErrorCodes.VALIDATION_ERROR, f"Invalid request fields: {fields}")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _envelope(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
