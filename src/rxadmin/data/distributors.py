"""Distributor account queries."""

from __future__ import annotations

from typing import Any, Optional

from ..persistence import documents as docs
from ..schemas.documents import DistributorDocument

COLLECTION = "distributors"


def list_distributors(*, search: str = "", status: str = "", page: int = 1, limit: int = 10) -> tuple[list[dict], int]:
    query: dict[str, Any] = {}
    if search:
        query.update(docs.regex_filter(("name", "email", "phone"), search))
    if status:
        query["status"] = status
    return docs.find_page(
        COLLECTION,
        query,
        page=page,
        limit=limit,
        sort=[("created_at", -1)],
        exclude=[docs.PASSWORD_FIELD],
    )


def get_distributor(distributor_id: Any) -> dict | None:
    return docs.find_by_id(COLLECTION, distributor_id, exclude=[docs.PASSWORD_FIELD])


def find_by_email(email: str) -> dict | None:
    """Look up a distributor including its password hash."""
    return docs.collection(COLLECTION).find_one({"email": email.strip().lower()})


def email_taken(email: str, exclude_id: Optional[Any] = None) -> bool:
    query: dict[str, Any] = {"email": email.strip().lower()}
    if exclude_id is not None:
        query["_id"] = {"$ne": docs.to_object_id(exclude_id)}
    return docs.collection(COLLECTION).find_one(query, {"_id": 1}) is not None


def create_distributor(data: dict[str, Any]) -> dict | None:
    document = DistributorDocument.model_validate(data).to_document()
    created = docs.insert_document(COLLECTION, document)
    return get_distributor(created["_id"])


def update_distributor(distributor_id: Any, changes: dict[str, Any]) -> dict | None:
    if docs.update_document(COLLECTION, distributor_id, changes) is None:
        return None
    return get_distributor(distributor_id)


def set_distributor_status(distributor_id: Any, status: str) -> dict | None:
    if docs.update_status(COLLECTION, distributor_id, status) is None:
        return None
    return get_distributor(distributor_id)
