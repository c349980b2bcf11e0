"""Tests for the coupon directory clients.

HTTP calls are mocked with `responses`.
"""

from decimal import Decimal

import pytest
import requests
import responses

from clients.coupon_client import CouponDirectoryClient, CouponDirectoryError, StaticCouponDirectory

BASE_URL = "https://coupons.test"


@pytest.fixture
def client():
    return CouponDirectoryClient(BASE_URL + "/", api_key="test-key", timeout_seconds=2)


class TestCouponDirectoryClientInit:

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            CouponDirectoryClient("")

    def test_strips_trailing_slash(self, client):
        assert client.base_url == BASE_URL


class TestValidate:

    @responses.activate
    def test_valid_percentage(self, client):
        responses.add(
            responses.GET, f"{BASE_URL}/coupons/WELCOME10",
            json={"valid": True, "discount_percentage": "10"}, status=200,
        )

        result = client.validate("WELCOME10")

        assert result.valid is True
        assert result.discount_percentage == Decimal("10")

    @responses.activate
    def test_sends_api_key(self, client):
        responses.add(responses.GET, f"{BASE_URL}/coupons/WELCOME10", json={"valid": False})

        client.validate("WELCOME10")

        assert responses.calls[0].request.headers["X-API-Key"] == "test-key"

    @responses.activate
    def test_no_api_key_header_when_unset(self):
        responses.add(responses.GET, f"{BASE_URL}/coupons/WELCOME10", json={"valid": False})

        CouponDirectoryClient(BASE_URL).validate("WELCOME10")

        assert "X-API-Key" not in responses.calls[0].request.headers

    @responses.activate
    def test_code_is_url_quoted(self, client):
        responses.add(responses.GET, f"{BASE_URL}/coupons/A%2FB", json={"valid": False})

        client.validate("A/B")

        assert responses.calls[0].request.url == f"{BASE_URL}/coupons/A%2FB"

    @responses.activate
    def test_404_is_invalid_not_error(self, client):
        responses.add(responses.GET, f"{BASE_URL}/coupons/NOPE", status=404)

        assert client.validate("NOPE").valid is False

    @responses.activate
    def test_server_error(self, client):
        responses.add(responses.GET, f"{BASE_URL}/coupons/WELCOME10", status=503)

        with pytest.raises(CouponDirectoryError, match="HTTP 503"):
            client.validate("WELCOME10")

    @responses.activate
    def test_connection_error(self, client):
        responses.add(
            responses.GET, f"{BASE_URL}/coupons/WELCOME10",
            body=requests.exceptions.ConnectionError("refused"),
        )

        with pytest.raises(CouponDirectoryError, match="Connection failed"):
            client.validate("WELCOME10")

    @responses.activate
    def test_non_json_body(self, client):
        responses.add(responses.GET, f"{BASE_URL}/coupons/WELCOME10", body="<html>oops</html>", status=200)

        with pytest.raises(CouponDirectoryError, match="Invalid response"):
            client.validate("WELCOME10")

    @responses.activate
    def test_payload_out_of_bounds(self, client):
        responses.add(
            responses.GET, f"{BASE_URL}/coupons/WELCOME10",
            json={"valid": True, "discount_percentage": 250},
        )

        with pytest.raises(CouponDirectoryError):
            client.validate("WELCOME10")


class TestStaticCouponDirectory:

    def test_percentage_and_fixed(self):
        directory = StaticCouponDirectory({"welcome10": 10}, fixed={"FIVEOFF": 500})

        assert directory.validate("WELCOME10").discount_percentage == Decimal("10")
        assert directory.validate("fiveoff").discount_amount_cents == 500

    def test_unknown(self):
        assert StaticCouponDirectory().validate("ANY").valid is False
