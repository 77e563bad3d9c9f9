"""Product catalogue endpoints and the Shopify product sync."""

from fastapi import APIRouter, Depends, Query, status

from ...auth import require_auth
from ...data import products as products_repo
from ...models.domain import ACTIVE, INACTIVE, SUPER_ADMIN, AuthIdentity
from ...schemas.products import ProductPayload
from ...services.commerce import shopify_client
from ...services.commerce import sync as commerce_sync
from ..params import Page, PageParams, json_body, not_found, object_id, record_status
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/products", tags=["products"])

admin_only = require_auth(SUPER_ADMIN)
product_body = json_body(ProductPayload, admin_only)

INVALID_ID = "Invalid product ID"


@router.get("")
@guarded("Failed to fetch products")
def list_products(
    search: str = Query(default=""),
    status_filter: str = Query(default="", alias="status"),
    page: Page = Depends(PageParams(50)),
    identity: AuthIdentity = Depends(require_auth()),
):
    products, total = products_repo.list_products(search=search, status=status_filter, page=page.page, limit=page.limit)
    return success_response({"products": products, "pagination": page.envelope(total)})


@router.post("")
@guarded("Failed to create product")
def create_product(payload: ProductPayload = Depends(product_body), identity: AuthIdentity = Depends(admin_only)):
    if not payload.name or not payload.sku or payload.price is None:
        raise ApiError("Name, sku, and price are required")
    if payload.price < 0:
        raise ApiError("Price cannot be negative")
    if payload.status is not None:
        record_status(payload.status)
    if products_repo.sku_taken(payload.sku):
        raise ApiError("SKU already exists")
    product = products_repo.create_product(
        {
            "name": payload.name,
            "sku": payload.sku,
            "description": payload.description,
            "price": payload.price,
            "shopify_product_id": payload.shopify_product_id or None,
            "shopify_variant_id": payload.shopify_variant_id or None,
            "status": payload.status or ACTIVE,
        }
    )
    return success_response({"product": product}, "Product created successfully", status.HTTP_201_CREATED)


@router.post("/sync")
@guarded("Failed to sync products from Shopify")
def sync_products(identity: AuthIdentity = Depends(admin_only)):
    try:
        client = shopify_client.get_shopify_client()
    except shopify_client.CommerceConfigError as exc:
        raise ApiError(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR) from exc
    try:
        summary = commerce_sync.sync_products(client)
    except shopify_client.CommerceError as exc:
        raise ApiError("Failed to sync products from Shopify", status.HTTP_502_BAD_GATEWAY, str(exc)) from exc
    stored = summary["addedCount"] + summary["updatedCount"]
    return success_response(summary, f"Successfully synced {stored} products from Shopify")


@router.get("/{product_id}")
@guarded("Failed to fetch product")
def get_product(product_id: str, identity: AuthIdentity = Depends(require_auth())):
    key = object_id(product_id, INVALID_ID)
    product = products_repo.get_product(key)
    if product is None:
        raise not_found("Product")
    return success_response({"product": product})


@router.put("/{product_id}")
@guarded("Failed to update product")
def update_product(
    product_id: str,
    payload: ProductPayload = Depends(product_body),
    identity: AuthIdentity = Depends(admin_only),
):
    key = object_id(product_id, INVALID_ID)
    current = products_repo.get_product(key)
    if current is None:
        raise not_found("Product")

    sent = payload.provided()
    changes: dict = {}
    if payload.sku and payload.sku.strip().upper() != current.get("sku"):
        if products_repo.sku_taken(payload.sku, exclude_id=key):
            raise ApiError("SKU already exists")
        changes["sku"] = payload.sku.strip().upper()
    if payload.name:
        changes["name"] = payload.name.strip()
    if payload.price is not None:
        if payload.price < 0:
            raise ApiError("Price cannot be negative")
        changes["price"] = payload.price
    for field in ("description", "shopify_product_id", "shopify_variant_id"):
        if field in sent:
            changes[field] = sent[field] or None
    if payload.status:
        changes["status"] = record_status(payload.status)

    product = products_repo.update_product(key, changes)
    return success_response({"product": product}, "Product updated successfully")


@router.delete("/{product_id}")
@guarded("Failed to delete product")
def delete_product(product_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(product_id, INVALID_ID)
    if products_repo.get_product(key) is None:
        raise not_found("Product")
    products_repo.update_product(key, {"status": INACTIVE})
    return success_response(None, "Product deleted successfully")
