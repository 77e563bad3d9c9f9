"""Standalone city queries."""

from __future__ import annotations

import re
from typing import Any, Optional

from ..persistence import documents as docs
from ..schemas.documents import CityDocument

COLLECTION = "cities"
DISTRIBUTOR_SUMMARY = ("name", "email", "phone")


def _expand(city: dict | None) -> dict | None:
    return docs.populate(city, "distributor_id", "distributors", DISTRIBUTOR_SUMMARY)


def list_cities(
    *,
    search: str = "",
    status: str = "",
    distributor_channel: str = "",
    page: int = 1,
    limit: int = 50,
) -> tuple[list[dict], int]:
    query: dict[str, Any] = {}
    if search:
        query.update(docs.regex_filter(("name",), search))
    if status:
        query["status"] = status
    if distributor_channel:
        query["distributor_channel"] = distributor_channel
    items, total = docs.find_page(COLLECTION, query, page=page, limit=limit, sort=[("created_at", -1)])
    return [_expand(item) for item in items], total


def get_city(city_id: Any) -> dict | None:
    return _expand(docs.find_by_id(COLLECTION, city_id))


def name_taken(name: str, exclude_id: Optional[Any] = None) -> bool:
    query: dict[str, Any] = {"name": {"$regex": f"^{re.escape(name.strip())}$", "$options": "i"}}
    if exclude_id is not None:
        query["_id"] = {"$ne": docs.to_object_id(exclude_id)}
    return docs.collection(COLLECTION).find_one(query, {"_id": 1}) is not None


def create_city(data: dict[str, Any]) -> dict:
    document = CityDocument.model_validate(data).to_document()
    return docs.insert_document(COLLECTION, document)


def update_city(city_id: Any, changes: dict[str, Any]) -> dict | None:
    if docs.update_document(COLLECTION, city_id, changes) is None:
        return None
    return get_city(city_id)


def find_by_distributor(distributor_id: Any) -> dict | None:
    return docs.collection(COLLECTION).find_one(
        {"distributor_id": docs.as_reference(distributor_id), "status": "active"}
    )
