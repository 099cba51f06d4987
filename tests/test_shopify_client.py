from __future__ import annotations

import json

import httpx
import pytest

from app.core.config import Settings
from app.services.shopify_client import (
    ShopifyClient,
    ShopifyUnavailableError,
    UpstreamUnavailableError,
    location_key,
)


def _level(location: str, **quantities: int) -> dict:
    return {
        "node": {
            "location": {"id": f"gid://shopify/Location/{location}"},
            "quantities": [{"name": name, "quantity": qty} for name, qty in quantities.items()],
        }
    }


def _variant(sku: str, *levels: dict) -> dict:
    return {"node": {"sku": sku, "inventoryItem": {"inventoryLevels": {"edges": list(levels)}}}}


def _client(handler) -> ShopifyClient:
    return ShopifyClient(
        shop_domain="salon-supplies.myshopify.com",
        access_token="shpat_test",
        api_version="2024-07",
        timeout_seconds=2,
        transport=httpx.MockTransport(handler),
    )


class TestShopifyClient:
    def test_stock_positions_sum_locations(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "data": {
                        "productVariants": {
                            "edges": [
                                _variant("OLA-3", _level("1", available=4, incoming=6), _level("2", available=-1)),
                                _variant("OTHER", _level("1", available=50)),
                            ]
                        }
                    }
                },
            )

        with _client(handler) as client:
            positions = client.fetch_stock_positions(["OLA-3", "OLA-4"])

        assert set(positions) == {"OLA-3"}
        assert positions["OLA-3"].on_hand == 3
        assert positions["OLA-3"].due == 6
        assert positions["OLA-3"].in_order_book is None

        request = seen[0]
        assert request.url.path == "/admin/api/2024-07/graphql.json"
        assert request.headers["X-Shopify-Access-Token"] == "shpat_test"
        body = json.loads(request.content)
        assert 'sku:"OLA-3"' in body["variables"]["query"]

    def test_stock_positions_for_one_location(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"data": {"productVariants": {"edges": [
                    _variant("OLA-3", _level("1", available=4), _level("2", available=9)),
                ]}}},
            )

        with _client(handler) as client:
            positions = client.fetch_stock_positions(["OLA-3"], location_id="gid://shopify/Location/2")

        assert positions["OLA-3"].on_hand == 9

    def test_http_error_is_upstream_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="bad gateway")

        with _client(handler) as client:
            with pytest.raises(UpstreamUnavailableError):
                client.fetch_stock_positions(["OLA-3"])

    def test_timeout_is_upstream_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with _client(handler) as client:
            with pytest.raises(ShopifyUnavailableError):
                client.graphql("{ shop { name } }")

    def test_graphql_errors_are_upstream_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"errors": [{"message": "Throttled"}]})

        with _client(handler) as client:
            with pytest.raises(ShopifyUnavailableError):
                client.graphql("{ shop { name } }")

    def test_inventory_levels_follow_pagination(self):
        pages = {
            None: {
                "pageInfo": {"hasNextPage": True, "endCursor": "c1"},
                "edges": [_variant("OLA-3", _level("1", available=4)), _variant("", _level("1", available=1))],
            },
            "c1": {
                "pageInfo": {"hasNextPage": False, "endCursor": None},
                "edges": [_variant("OLA-4", _level("1", available=0), _level("2", available=7))],
            },
        }

        def handler(request: httpx.Request) -> httpx.Response:
            cursor = json.loads(request.content)["variables"]["cursor"]
            return httpx.Response(200, json={"data": {"productVariants": pages[cursor]}})

        with _client(handler) as client:
            levels = list(client.fetch_inventory_levels())

        assert levels == [("OLA-3", "1", 4), ("OLA-4", "1", 0), ("OLA-4", "2", 7)]

    def test_from_settings_requires_credentials(self):
        with pytest.raises(ShopifyUnavailableError):
            ShopifyClient.from_settings(Settings(SHOPIFY_SHOP_DOMAIN=None, SHOPIFY_ADMIN_ACCESS_TOKEN=None))

    def test_shop_domain_scheme_is_stripped(self):
        config = Settings(SHOPIFY_SHOP_DOMAIN="https://salon.myshopify.com/", SHOPIFY_ADMIN_ACCESS_TOKEN="x")

        assert config.SHOPIFY_SHOP_DOMAIN == "salon.myshopify.com"
        assert config.shopify_configured is True


def test_location_key():
    assert location_key("gid://shopify/Location/123") == "123"
    assert location_key("123") == "123"
    assert location_key(None) == ""
