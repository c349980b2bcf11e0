"""
Coupon directory clients.

The directory answers one question: is this code live, and what does it
take off? CouponDirectoryClient asks the remote HTTP directory;
StaticCouponDirectory answers from an in-process table.
"""

import json
import logging
from decimal import Decimal
from urllib.parse import quote

import requests
from pydantic import ValidationError as PydanticValidationError

from core.models import CouponValidation

logger = logging.getLogger(__name__)


class CouponDirectoryError(Exception):
    """Raised when the coupon directory cannot give a usable answer."""


class CouponDirectoryClient:
    """Validate coupon codes against the remote directory over HTTP."""

    def __init__(self, base_url: str, api_key: str | None = None, timeout_seconds: float = 3.0):
        """
        Initialize with directory location.

        Args:
            base_url: Directory base URL, e.g. https://coupons.example.com
            api_key: Optional API key sent as X-API-Key
            timeout_seconds: Per-request connect/read timeout

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def validate(self, code: str) -> CouponValidation:
        """
        Look up a coupon code.

        A 404 means the code does not exist and is reported as invalid,
        not as an error.

        Raises:
            CouponDirectoryError: On connection failure, server error or malformed response
        """
        url = f"{self.base_url}/coupons/{quote(code, safe='')}"
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key

        try:
            response = requests.get(url, headers=headers, timeout=self.timeout_seconds)
        except requests.exceptions.RequestException as e:
            logger.error(f"Coupon directory connection failed: {e}")
            raise CouponDirectoryError(f"Connection failed: {e}")

        if response.status_code == 404:
            return CouponValidation(valid=False)

        if response.status_code != 200:
            logger.error(f"Coupon directory returned HTTP {response.status_code}")
            raise CouponDirectoryError(f"Directory error: HTTP {response.status_code}")

        try:
            return CouponValidation.model_validate(response.json())
        except (json.JSONDecodeError, ValueError, PydanticValidationError) as e:
            logger.error(f"Coupon directory returned invalid payload: {response.text[:200]}")
            raise CouponDirectoryError("Invalid response from directory") from e


class StaticCouponDirectory:
    """
    In-process coupon table.

    Usage:
        directory = StaticCouponDirectory({"WELCOME10": 10}, fixed={"FIVEOFF": 500})
    """

    def __init__(
        self,
        percentages: dict[str, int | float | str] | None = None,
        fixed: dict[str, int] | None = None,
    ):
        self._percentages = {
            code.upper(): Decimal(str(value)) for code, value in (percentages or {}).items()
        }
        self._fixed = {code.upper(): cents for code, cents in (fixed or {}).items()}

    def validate(self, code: str) -> CouponValidation:
        code = code.upper()
        if code in self._percentages:
            return CouponValidation(valid=True, discount_percentage=self._percentages[code])
        if code in self._fixed:
            return CouponValidation(valid=True, discount_amount_cents=self._fixed[code])
        return CouponValidation(valid=False)
