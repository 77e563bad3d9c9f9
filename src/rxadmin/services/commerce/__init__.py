"""Store (Shopify) integration: HTTP client and sync routines."""

from .shopify_client import CommerceConfigError, CommerceError, ShopifyClient, get_shopify_client
from .sync import bulk_sync_orders, derive_order_status, is_local_order, sync_order, sync_products

__all__ = [
    "CommerceConfigError",
    "CommerceError",
    "ShopifyClient",
    "get_shopify_client",
    "bulk_sync_orders",
    "derive_order_status",
    "is_local_order",
    "sync_order",
    "sync_products",
]
