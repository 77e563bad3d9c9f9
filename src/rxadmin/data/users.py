"""User account queries."""

from __future__ import annotations

from typing import Any, Optional

from ..persistence import documents as docs
from ..schemas.documents import UserDocument

COLLECTION = "users"
DISTRICT_SUMMARY = ("name", "code")


def _expand(user: dict | None) -> dict | None:
    return docs.populate(user, "district_id", "districts", DISTRICT_SUMMARY)


def list_users(
    *,
    search: str = "",
    role: str = "",
    status: str = "",
    page: int = 1,
    limit: int = 10,
) -> tuple[list[dict], int]:
    query: dict[str, Any] = {}
    if search:
        query.update(docs.regex_filter(("name", "email"), search))
    if role:
        query["role"] = role
    if status:
        query["status"] = status
    items, total = docs.find_page(
        COLLECTION,
        query,
        page=page,
        limit=limit,
        sort=[("created_at", -1)],
        exclude=[docs.PASSWORD_FIELD],
    )
    return [_expand(item) for item in items], total


def get_user(user_id: Any) -> dict | None:
    return _expand(docs.find_by_id(COLLECTION, user_id, exclude=[docs.PASSWORD_FIELD]))


def find_by_email(email: str) -> dict | None:
    """Look up an account including its password hash."""
    return docs.collection(COLLECTION).find_one({"email": email.strip().lower()})


def email_taken(email: str, exclude_id: Optional[Any] = None) -> bool:
    query: dict[str, Any] = {"email": email.strip().lower()}
    if exclude_id is not None:
        query["_id"] = {"$ne": docs.to_object_id(exclude_id)}
    return docs.collection(COLLECTION).find_one(query, {"_id": 1}) is not None


def create_user(data: dict[str, Any]) -> dict | None:
    document = UserDocument.model_validate(data).to_document()
    created = docs.insert_document(COLLECTION, document)
    return get_user(created["_id"])


def update_user(user_id: Any, changes: dict[str, Any]) -> dict | None:
    if docs.update_document(COLLECTION, user_id, changes) is None:
        return None
    return get_user(user_id)


def set_user_status(user_id: Any, status: str) -> dict | None:
    if docs.update_status(COLLECTION, user_id, status) is None:
        return None
    return get_user(user_id)


def count_kams_in_district(district_id: Any) -> int:
    return docs.collection(COLLECTION).count_documents(
        {"district_id": docs.as_reference(district_id), "role": "kam", "status": "active"}
    )


def kam_assignment(user_id: Any) -> tuple[Any, Any]:
    """The stored ``(district_id, team_id)`` of a KAM; either may be ``None``."""
    user = docs.find_by_id(COLLECTION, user_id, fields=("district_id", "team_id"))
    if user is None:
        return None, None
    return user.get("district_id"), user.get("team_id")
