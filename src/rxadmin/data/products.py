"""Product catalogue queries."""

from __future__ import annotations

from typing import Any, Optional

from ..persistence import documents as docs
from ..schemas.documents import ProductDocument

COLLECTION = "products"


def list_products(*, search: str = "", status: str = "", page: int = 1, limit: int = 50) -> tuple[list[dict], int]:
    query: dict[str, Any] = {}
    if search:
        query.update(docs.regex_filter(("name", "sku"), search))
    if status:
        query["status"] = status
    return docs.find_page(COLLECTION, query, page=page, limit=limit, sort=[("name", 1)])


def get_product(product_id: Any) -> dict | None:
    return docs.find_by_id(COLLECTION, product_id)


def sku_taken(sku: str, exclude_id: Optional[Any] = None) -> bool:
    query: dict[str, Any] = {"sku": sku.strip().upper()}
    if exclude_id is not None:
        query["_id"] = {"$ne": docs.to_object_id(exclude_id)}
    return docs.collection(COLLECTION).find_one(query, {"_id": 1}) is not None


def find_synced(variant_id: str, sku: str) -> dict | None:
    """Match a store variant to a stored product by variant id or sku."""
    return docs.collection(COLLECTION).find_one(
        {"$or": [{"shopify_variant_id": variant_id}, {"shopify_product_id": variant_id}, {"sku": sku.strip().upper()}]}
    )


def create_product(data: dict[str, Any]) -> dict:
    document = ProductDocument.model_validate(data).to_document()
    return docs.insert_document(COLLECTION, document)


def update_product(product_id: Any, changes: dict[str, Any]) -> dict | None:
    return docs.update_document(COLLECTION, product_id, changes)
