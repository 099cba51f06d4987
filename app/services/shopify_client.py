from __future__ import annotations

import logging
from typing import Any, Generator, Iterator

import httpx

from app.core.config import Settings, settings
from app.core.forecast.domain import StockPosition


logger = logging.getLogger(__name__)

# Shopify search syntax limits how many OR-ed SKUs fit in one query.
SKU_CHUNK_SIZE = 50
MAX_PAGES = 200


class UpstreamUnavailableError(Exception):
    """An inventory or e-commerce dependency could not answer."""


class ShopifyUnavailableError(UpstreamUnavailableError):
    pass


STOCK_BY_SKU_QUERY = """
query StockBySku($query: String!, $first: Int!) {
  productVariants(first: $first, query: $query) {
    edges {
      node {
        sku
        inventoryItem {
          inventoryLevels(first: 50) {
            edges {
              node {
                location { id }
                quantities(names: ["available", "incoming"]) { name quantity }
              }
            }
          }
        }
      }
    }
  }
}
"""

INVENTORY_LEVELS_QUERY = """
query InventoryLevels($cursor: String) {
  productVariants(first: 100, after: $cursor) {
    pageInfo { hasNextPage endCursor }
    edges {
      node {
        sku
        inventoryItem {
          inventoryLevels(first: 50) {
            edges {
              node {
                location { id }
                quantities(names: ["available"]) { name quantity }
              }
            }
          }
        }
      }
    }
  }
}
"""


def location_key(location_gid: str | None) -> str:
    """``gid://shopify/Location/123`` and ``123`` both map to ``123``."""
    if not location_gid:
        return ""
    return str(location_gid).rsplit("/", 1)[-1]


def _quantities(level: dict[str, Any]) -> dict[str, int]:
    return {q.get("name"): int(q.get("quantity") or 0) for q in level.get("quantities") or []}


def _levels(variant: dict[str, Any]) -> list[dict[str, Any]]:
    item = variant.get("inventoryItem") or {}
    edges = (item.get("inventoryLevels") or {}).get("edges") or []
    return [edge["node"] for edge in edges if edge.get("node")]


class ShopifyClient:
    """Thin Shopify Admin GraphQL client used as the live stock source."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str = "2024-07",
        timeout_seconds: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=f"https://{shop_domain}/admin/api/{api_version}",
            headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(timeout_seconds, connect=min(5.0, timeout_seconds)),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "ShopifyClient":
        if not config.shopify_configured:
            raise ShopifyUnavailableError("Shopify credentials are not configured")
        return cls(
            shop_domain=config.SHOPIFY_SHOP_DOMAIN,
            access_token=config.SHOPIFY_ADMIN_ACCESS_TOKEN,
            api_version=config.SHOPIFY_API_VERSION,
            timeout_seconds=config.SHOPIFY_TIMEOUT_SECONDS,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ShopifyClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = self._client.post("/graphql.json", json={"query": query, "variables": variables or {}})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Shopify GraphQL request failed: %s", exc)
            raise ShopifyUnavailableError(f"Shopify request failed: {exc}") from exc
        except ValueError as exc:
            logger.warning("Shopify returned a non-JSON body")
            raise ShopifyUnavailableError("Shopify returned an invalid response") from exc

        if payload.get("errors"):
            logger.warning("Shopify GraphQL errors: %s", payload["errors"])
            raise ShopifyUnavailableError(f"Shopify GraphQL error: {payload['errors']}")

        data = payload.get("data")
        if data is None:
            raise ShopifyUnavailableError("Shopify response has no data")
        return data

    def fetch_stock_positions(
        self,
        skus: list[str],
        location_id: str | None = None,
    ) -> dict[str, StockPosition]:
        """Live ``available`` (on hand) and ``incoming`` (due) per SKU.

        SKUs unknown to Shopify are absent from the result. ``in_order_book``
        is not tracked by Shopify and is left as ``None``.
        """
        wanted_location = location_key(location_id) if location_id else None
        totals: dict[str, list[int]] = {}

        unique_skus = list(dict.fromkeys(s for s in skus if s))
        for offset in range(0, len(unique_skus), SKU_CHUNK_SIZE):
            chunk = unique_skus[offset:offset + SKU_CHUNK_SIZE]
            search = " OR ".join(f'sku:"{sku}"' for sku in chunk)
            data = self.graphql(STOCK_BY_SKU_QUERY, {"query": search, "first": len(chunk) * 2})

            for edge in (data.get("productVariants") or {}).get("edges") or []:
                variant = edge.get("node") or {}
                sku = variant.get("sku")
                if sku not in chunk:
                    continue
                on_hand, due = totals.setdefault(sku, [0, 0])
                for level in _levels(variant):
                    loc = location_key((level.get("location") or {}).get("id"))
                    if wanted_location is not None and loc != wanted_location:
                        continue
                    quantities = _quantities(level)
                    on_hand += quantities.get("available", 0)
                    due += quantities.get("incoming", 0)
                totals[sku] = [on_hand, due]

        return {
            sku: StockPosition(item_key=sku, on_hand=float(on_hand), due=float(due))
            for sku, (on_hand, due) in totals.items()
        }

    def fetch_inventory_levels(self) -> Iterator[tuple[str, str, int]]:
        """Yield ``(sku, location_id, available)`` for every variant with a SKU."""
        cursor = None
        for _ in range(MAX_PAGES):
            data = self.graphql(INVENTORY_LEVELS_QUERY, {"cursor": cursor})
            variants = data.get("productVariants") or {}

            for edge in variants.get("edges") or []:
                variant = edge.get("node") or {}
                sku = variant.get("sku")
                if not sku:
                    continue
                for level in _levels(variant):
                    loc = location_key((level.get("location") or {}).get("id"))
                    if loc:
                        yield sku, loc, _quantities(level).get("available", 0)

            page_info = variants.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                return
            cursor = page_info.get("endCursor")

        logger.warning("Shopify inventory pagination stopped after %s pages", MAX_PAGES)


def get_shopify_client() -> Generator[ShopifyClient | None, None, None]:
    """FastAPI dependency; yields ``None`` when Shopify is not configured."""
    if not settings.shopify_configured:
        yield None
        return
    client = ShopifyClient.from_settings()
    try:
        yield client
    finally:
        client.close()
