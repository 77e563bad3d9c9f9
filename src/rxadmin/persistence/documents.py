"""Generic document helpers shared by the repositories."""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection

from ..db import mongo

PASSWORD_FIELD = "password"


def collection(name: str) -> Collection:
    return mongo.get_database()[name]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_object_id(value: Any) -> bool:
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and ObjectId.is_valid(value) and len(value) == 24


def to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if not is_valid_object_id(value):
        raise ValueError(f"'{value}' is not a valid ObjectId")
    return ObjectId(value)


def as_reference(value: Any) -> Any:
    """Store references as ObjectId when they look like one."""
    if value in (None, ""):
        return None
    if is_valid_object_id(value):
        return to_object_id(value)
    return value


def projection(fields: Iterable[str] | None = None, exclude: Iterable[str] | None = None) -> dict[str, int] | None:
    if fields:
        return {field: 1 for field in fields}
    if exclude:
        return {field: 0 for field in exclude}
    return None


def find_by_id(name: str, document_id: Any, fields: Iterable[str] | None = None, exclude: Iterable[str] | None = None) -> dict | None:
    key = to_object_id(document_id) if is_valid_object_id(document_id) else document_id
    return collection(name).find_one({"_id": key}, projection(fields, exclude))


def find_page(
    name: str,
    query: Mapping[str, Any],
    *,
    page: int,
    limit: int,
    sort: Sequence[tuple[str, int]] | None = None,
    exclude: Iterable[str] | None = None,
) -> tuple[list[dict], int]:
    """Return one page of matching documents and the total match count."""
    cursor = collection(name).find(dict(query), projection(exclude=exclude))
    if sort:
        cursor = cursor.sort(list(sort))
    items = list(cursor.skip((page - 1) * limit).limit(limit))
    total = collection(name).count_documents(dict(query))
    return items, total


def pagination(page: int, limit: int, total: int) -> dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }


def insert_document(name: str, data: Mapping[str, Any]) -> dict:
    now = utcnow()
    document = {**data, "created_at": now, "updated_at": now}
    result = collection(name).insert_one(document)
    document["_id"] = result.inserted_id
    return document


def update_document(name: str, document_id: Any, changes: Mapping[str, Any]) -> dict | None:
    """Apply ``$set`` changes and return the updated document."""
    if not changes:
        return find_by_id(name, document_id)
    return collection(name).find_one_and_update(
        {"_id": to_object_id(document_id)},
        {"$set": {**changes, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )


def update_status(name: str, document_id: Any, status: str) -> dict | None:
    """Set ``status`` only when it differs; an unchanged record is not rewritten."""
    current = find_by_id(name, document_id)
    if current is None or current.get("status") == status:
        return current
    return update_document(name, document_id, {"status": status})


def populate(document: dict | None, path: str, name: str, fields: Iterable[str] | None = None) -> dict | None:
    """Replace the reference at ``path`` with the referenced document.

    ``path`` may be dotted (``doctor_info.district_id``). A reference that no
    longer resolves becomes ``None``.
    """
    if not document:
        return document
    *parents, leaf = path.split(".")
    target: Any = document
    for key in parents:
        target = target.get(key)
        if not isinstance(target, dict):
            return document
    reference = target.get(leaf)
    if reference is None or isinstance(reference, dict):
        return document
    target[leaf] = find_by_id(name, reference, fields)
    return document


def regex_filter(fields: Sequence[str], term: str) -> dict[str, Any]:
    """Case-insensitive substring match over several fields."""
    pattern = re.escape(term)
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]}
