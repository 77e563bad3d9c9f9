"""HTTP client for the Shopify Admin API."""

from __future__ import annotations

import logging
import time
from typing import Any, Iterator

import httpx

from ...config import settings

PRODUCTS_PAGE_SIZE = 50
VARIANTS_PER_PRODUCT = 10

PRODUCTS_QUERY = """
query getProducts($cursor: String) {
  products(first: %d, after: $cursor) {
    edges {
      node {
        id
        title
        status
        variants(first: %d) {
          edges { node { id title sku price } }
        }
      }
      cursor
    }
    pageInfo { hasNextPage }
  }
}
""" % (PRODUCTS_PAGE_SIZE, VARIANTS_PER_PRODUCT)

logger = logging.getLogger(__name__)


class CommerceConfigError(RuntimeError):
    """Raised when the store URL or access token is missing."""


class CommerceError(RuntimeError):
    """Raised when the store answers with an error or cannot be reached."""


def _strip_gid(value: Any, kind: str) -> str:
    return str(value or "").replace(f"gid://shopify/{kind}/", "")


class ShopifyClient:
    def __init__(
        self,
        store_url: str | None = None,
        access_token: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        store_url = store_url or settings.shopify_store_url
        self.access_token = access_token or settings.shopify_access_token
        if not store_url or not self.access_token:
            raise CommerceConfigError("Shopify configuration missing")
        self.base_url = (store_url if store_url.startswith("http") else f"https://{store_url}").rstrip("/")
        self.api_version = api_version or settings.shopify_api_version
        self.timeout = timeout if timeout is not None else settings.shopify_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.shopify_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.shopify_backoff_seconds

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=f"{self.base_url}/admin/api/{self.api_version}",
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            headers={
                "X-Shopify-Access-Token": self.access_token,
                "Content-Type": "application/json",
            },
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.request(method, path, **kwargs)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as exc:
                    status_code = exc.response.status_code
                    # 4xx other than 429 is final
                    if status_code < 500 and status_code != 429:
                        raise CommerceError(f"Shopify API error: {status_code} {exc.response.reason_phrase}") from exc
                    attempt += 1
                    if attempt > self.max_retries:
                        raise CommerceError(f"Shopify API error: {status_code} {exc.response.reason_phrase}") from exc
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Shopify request timed out after {self.max_retries} retries: {exc}")
                        raise CommerceError("Shopify request timed out") from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Shopify timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.HTTPError, ValueError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise CommerceError(f"Failed to reach Shopify at {self.base_url}: {exc}") from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Shopify network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {exc}")
                    time.sleep(wait_time)
        finally:
            client.close()

    def get_order(self, order_id: str) -> dict:
        """Fetch one order through the REST endpoint."""
        data = self._request("GET", f"/orders/{order_id}.json")
        order = data.get("order")
        if not isinstance(order, dict):
            raise CommerceError("Shopify response missing order")
        return order

    def iter_products(self) -> Iterator[dict]:
        """Yield every product with its variants, following GraphQL cursors.

        Ids are returned without their ``gid://`` prefix.
        """
        cursor: str | None = None
        has_next_page = True
        while has_next_page:
            data = self._request("POST", "/graphql.json", json={"query": PRODUCTS_QUERY, "variables": {"cursor": cursor}})
            if data.get("errors"):
                raise CommerceError(f"Shopify GraphQL error: {data['errors']}")
            products = (data.get("data") or {}).get("products") or {}
            for edge in products.get("edges") or []:
                node = edge.get("node") or {}
                yield {
                    "id": _strip_gid(node.get("id"), "Product"),
                    "title": node.get("title") or "",
                    "status": node.get("status"),
                    "variants": [
                        {
                            "id": _strip_gid(variant["node"].get("id"), "ProductVariant"),
                            "title": variant["node"].get("title") or "",
                            "sku": variant["node"].get("sku") or "",
                            "price": variant["node"].get("price"),
                        }
                        for variant in (node.get("variants") or {}).get("edges") or []
                    ],
                }
                cursor = edge.get("cursor")
            has_next_page = bool((products.get("pageInfo") or {}).get("hasNextPage")) and cursor is not None


def get_shopify_client() -> ShopifyClient:
    return ShopifyClient()
