"""Pull order state and the product catalogue from the store into MongoDB."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from ...data import orders as orders_repo
from ...data import prescriptions as prescriptions_repo
from ...data import products as products_repo
from ...models.domain import LOCAL_ORDER_PREFIX
from .shopify_client import CommerceError, ShopifyClient

logger = logging.getLogger(__name__)


def derive_order_status(store_order: dict) -> str:
    if store_order.get("cancelled_at"):
        return "cancelled"
    if store_order.get("fulfillment_status") == "fulfilled":
        return "fulfilled"
    if store_order.get("financial_status") == "paid":
        return "processing"
    return "pending"


def normalize_financial_status(value: Optional[str]) -> str:
    if value == "paid":
        return "paid"
    if value in ("refunded", "partially_refunded"):
        return "refunded"
    return "pending"


def normalize_fulfillment_status(value: Optional[str]) -> str:
    if value in ("fulfilled", "partial"):
        return value
    return "unfulfilled"


def extract_tracking(store_order: dict, number: Optional[str], url: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Tracking details of the last fulfillment, falling back to what is stored."""
    fulfillments = store_order.get("fulfillments") or []
    if fulfillments:
        latest = fulfillments[-1]
        number = latest.get("tracking_number") or number
        url = latest.get("tracking_url") or url
    return number, url


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring unparseable store timestamp %r", value)
        return None


def _parse_amount(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def order_changes(order: dict, store_order: dict) -> dict[str, Any]:
    """Fields to write on ``order`` given the store's copy of it."""
    tracking_number, tracking_url = extract_tracking(store_order, order.get("tracking_number"), order.get("tracking_url"))
    changes: dict[str, Any] = {
        "order_status": derive_order_status(store_order),
        "financial_status": normalize_financial_status(store_order.get("financial_status")),
        "fulfillment_status": normalize_fulfillment_status(store_order.get("fulfillment_status")),
        "tracking_number": tracking_number,
        "tracking_url": tracking_url,
        "total_amount": _parse_amount(store_order.get("total_price")),
    }
    updated_at = _parse_timestamp(store_order.get("updated_at"))
    if updated_at is not None:
        changes["shopify_updated_at"] = updated_at
    return changes


def is_local_order(order: dict) -> bool:
    return str(order.get("shopify_order_id") or "").startswith(LOCAL_ORDER_PREFIX)


def apply_store_order(order: dict, store_order: dict) -> dict | None:
    """Write the store state onto the order and its prescription; return the expanded order."""
    changes = order_changes(order, store_order)
    updated = orders_repo.update_order(order["_id"], changes)
    prescriptions_repo.set_order_status(order.get("prescription_id"), changes["order_status"])
    return updated


def sync_order(order: dict, client: ShopifyClient) -> dict | None:
    """Refresh one order from the store. Raises ``CommerceError`` when the store fails."""
    store_order = client.get_order(str(order["shopify_order_id"]))
    return apply_store_order(order, store_order)


def bulk_sync_orders(orders: Iterable[dict], client: ShopifyClient) -> dict[str, Any]:
    orders = list(orders)
    synced: list[dict] = []
    failed = 0
    for order in orders:
        if is_local_order(order):
            failed += 1
            continue
        try:
            result = sync_order(order, client)
        except CommerceError as exc:
            logger.warning("Order %s failed to sync: %s", order["_id"], exc)
            failed += 1
            continue
        if result is not None:
            synced.append(result)
    return {
        "synced": len(synced),
        "failed": failed,
        "total": len(orders),
        "orders": synced,
    }


def sync_products(client: ShopifyClient) -> dict[str, Any]:
    """Upsert every store variant as a product, keyed by variant id or sku."""
    processed = added = updated = 0
    errors: list[str] = []
    for store_product in client.iter_products():
        processed += 1
        variants = store_product["variants"]
        status = "active" if store_product.get("status") == "ACTIVE" else "inactive"
        for variant in variants:
            sku = variant["sku"] or f"SHOPIFY-{variant['id']}"
            name = f"{store_product['title']} - {variant['title']}" if len(variants) > 1 else store_product["title"]
            fields = {
                "name": name,
                "price": _parse_amount(variant.get("price")),
                "shopify_product_id": store_product["id"],
                "shopify_variant_id": variant["id"],
                "status": status,
            }
            try:
                existing = products_repo.find_synced(variant["id"], sku)
                if existing is not None:
                    products_repo.update_product(existing["_id"], fields)
                    updated += 1
                else:
                    products_repo.create_product(
                        {**fields, "sku": sku, "description": f"{store_product['title']} - Synced from Shopify"}
                    )
                    added += 1
            except Exception as exc:
                logger.exception("Failed to store product %s", store_product["title"])
                errors.append(f"Error processing {store_product['title']}: {exc}")
    summary: dict[str, Any] = {"totalProcessed": processed, "addedCount": added, "updatedCount": updated}
    if errors:
        summary["errors"] = errors
    return summary
