"""Tests for the shared HTTP client."""

import os
from unittest import mock

import aiohttp
import pytest
from aiohttp.test_utils import unused_port

from src.order_api.client import (
    ApiCallResult,
    OrderApiClient,
    build_url,
    call_api,
    encode_query_params,
    extract_error_message,
)
from src.order_api.config import ApiConfig, TargetService
from src.order_api.errors import ConfigurationError, TransportError, UpstreamError


class TestHelpers:
    def test_build_url_keeps_base_path(self):
        assert build_url("https://api.example.com/v1/", "/Orders") == "https://api.example.com/v1/Orders"
        assert build_url("https://api.example.com", "Orders/ORD1") == "https://api.example.com/Orders/ORD1"

    def test_encode_query_params_drops_none(self):
        params = encode_query_params({"pageSize": 20, "email": None, "active": True, "name": "Ann"})
        assert params == [("pageSize", "20"), ("active", "true"), ("name", "Ann")]
        assert encode_query_params(None) == []

    @pytest.mark.parametrize("text,expected", [
        ('{"message": "not found"}', "not found"),
        ('{"error": "bad token"}', "bad token"),
        ('{"message": "", "error": "fallback field"}', "fallback field"),
        ('{"detail": "x"}', "API request failed with status 500"),
        ("Service Unavailable", "Service Unavailable"),
        ("", "API request failed with status 500"),
    ])
    def test_extract_error_message(self, text, expected):
        assert extract_error_message(text, 500) == expected


class TestApiCallResult:
    def test_success_shape(self):
        result = ApiCallResult.ok({"a": 1})
        assert result.success
        assert result.to_dict() == {"success": True, "data": {"a": 1}}

    def test_error_shape(self):
        assert ApiCallResult.failed("boom", 502).to_dict() == {"error": "boom", "status": 502}
        assert ApiCallResult.failed("offline").to_dict() == {"error": "offline"}
        assert not ApiCallResult.failed("offline").success


class TestOrderApiClient:
    @pytest.mark.asyncio
    async def test_get_sends_headers_and_params(self, stub_upstream):
        app = await stub_upstream(
            ("GET", "/Orders", 200, {"isSuccess": True, "response": {"orders": []}}),
            ORDER_ORIGIN_URL="https://shop.example.com",
        )
        result = await call_api("/Orders", query_params={"pageSize": 5, "email": None})

        assert result.success
        assert result.data == {"isSuccess": True, "response": {"orders": []}}
        request = app["requests"][0]
        assert request["method"] == "GET"
        assert request["query"] == {"pageSize": "5"}
        assert request["body"] is None
        headers = request["headers"]
        assert headers["Authorization"] == "Bearer test-token"
        assert headers["Accept"] == "application/json"
        assert headers["User-Agent"] == "AI-Chatbot/1.0"
        assert headers["Origin"] == "https://shop.example.com"
        assert headers["Referer"] == "https://shop.example.com"

    @pytest.mark.asyncio
    async def test_body_only_for_post_and_put(self, stub_upstream):
        app = await stub_upstream(
            ("PUT", "/Orders/1/Status", 200, {"isSuccess": True}),
            ("DELETE", "/Orders/1", 200, {"isSuccess": True}),
        )
        await call_api("/Orders/1/Status", method="PUT", body={"statusCode": 12},
                       service=TargetService.ORDER_COMMANDS)
        await call_api("/Orders/1", method="DELETE", body={"ignored": True})

        put, delete = app["requests"]
        assert put["body"] == {"statusCode": 12}
        assert delete["body"] is None

    @pytest.mark.asyncio
    async def test_upstream_error_uses_message(self, stub_upstream):
        await stub_upstream(("GET", "/Orders/ORD99", 404, {"message": "not found"}))
        result = await call_api("/Orders/ORD99")
        assert result.to_dict() == {"error": "not found", "status": 404}

    @pytest.mark.asyncio
    async def test_upstream_error_plain_text(self, stub_upstream):
        await stub_upstream(("GET", "/Orders", 503, "Service Unavailable"))
        result = await call_api("/Orders")
        assert result.error == "Service Unavailable"
        assert result.status == 503

    @pytest.mark.asyncio
    async def test_non_json_success_body(self, stub_upstream):
        await stub_upstream(("GET", "/Orders", 200, "<html>maintenance</html>"))
        result = await call_api("/Orders")
        assert result.error.startswith("Failed to connect to order API")
        assert result.status is None

    @pytest.mark.asyncio
    async def test_request_raises_typed_errors(self, stub_upstream):
        await stub_upstream(("GET", "/Orders", 500, {"error": "database down"}))
        client = OrderApiClient()
        with pytest.raises(UpstreamError) as exc_info:
            await client.request("/Orders")
        assert exc_info.value.status == 500
        assert str(exc_info.value) == "database down"

    @pytest.mark.asyncio
    async def test_missing_configuration_skips_network(self, stub_upstream):
        app = await stub_upstream(("GET", "/Orders", 200, {}))
        with mock.patch.dict(os.environ, {"ORDER_API_TOKEN": ""}):
            result = await call_api("/Orders")
            with pytest.raises(ConfigurationError):
                await OrderApiClient().request("/Orders")
        assert "configuration is missing" in result.error
        assert "ORDER_API_TOKEN" in result.error
        assert result.status is None
        assert app["requests"] == []

    @pytest.mark.asyncio
    async def test_product_configuration_named(self):
        with mock.patch.dict(os.environ, {"ORDER_API_TOKEN": "t"}, clear=True):
            result = await call_api("/products/search", method="POST",
                                    service=TargetService.PRODUCT_QUERIES)
        assert result.error.startswith("Product API configuration is missing")
        assert "PRODUCT_QUERIES_API_BASE_URL" in result.error

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        config = ApiConfig(
            order_queries_base_url=f"http://127.0.0.1:{unused_port()}",
            api_token="t",
        )
        client = OrderApiClient(config)
        result = await client.call("/Orders")
        assert result.error.startswith("Failed to connect to order API:")
        assert result.status is None
        with pytest.raises(TransportError):
            await client.request("/Orders")

    @pytest.mark.asyncio
    async def test_injected_session_is_reused(self, stub_upstream):
        app = await stub_upstream(("GET", "/Orders", 200, [1, 2]))
        async with aiohttp.ClientSession() as session:
            client = OrderApiClient(session=session)
            first = await client.call("/Orders")
            second = await client.call("/Orders")
            assert not session.closed
        assert first.data == [1, 2]
        assert second.data == [1, 2]
        assert len(app["requests"]) == 2
