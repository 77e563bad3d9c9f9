"""Team queries and team product assignments."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from ..persistence import documents as docs
from ..schemas.documents import TeamDocument, TeamProductDocument

COLLECTION = "teams"
ASSIGNMENTS = "team_products"
DOCTOR_SUMMARY = ("name", "email", "specialty")
PRODUCT_FIELDS = ("name", "sku", "price", "description", "shopify_product_id", "shopify_variant_id")


def team_stats(team_id: Any) -> dict[str, int]:
    key = docs.as_reference(team_id)
    doctor_ids = [doctor["_id"] for doctor in docs.collection("doctors").find({"team_id": key}, {"_id": 1})]
    return {
        "doctors": docs.collection("doctors").count_documents({"team_id": key, "status": "active"}),
        "prescriptions": docs.collection("prescriptions").count_documents({"doctor_id": {"$in": doctor_ids}}),
    }


def list_teams(*, search: str = "", status: str = "", page: int = 1, limit: int = 50) -> tuple[list[dict], int]:
    query: dict[str, Any] = {}
    if search:
        query.update(docs.regex_filter(("name", "description"), search))
    if status:
        query["status"] = status
    items, total = docs.find_page(COLLECTION, query, page=page, limit=limit, sort=[("name", 1)])
    return [{**team, "stats": team_stats(team["_id"])} for team in items], total


def get_team(team_id: Any) -> dict | None:
    return docs.find_by_id(COLLECTION, team_id)


def get_team_detail(team_id: Any) -> dict | None:
    team = get_team(team_id)
    if team is None:
        return None
    doctors = list(
        docs.collection("doctors").find(
            {"team_id": team["_id"], "status": "active"}, docs.projection(DOCTOR_SUMMARY)
        )
    )
    stats = team_stats(team["_id"])
    stats["doctors"] = len(doctors)
    return {**team, "stats": stats, "doctors": doctors}


def teams_in_district(district_id: Any) -> list[dict]:
    cursor = docs.collection(COLLECTION).find({"district_id": docs.as_reference(district_id), "status": "active"})
    return list(cursor.sort([("name", 1)]))


def create_team(data: dict[str, Any]) -> dict:
    document = TeamDocument.model_validate(data).to_document()
    return docs.insert_document(COLLECTION, document)


def update_team(team_id: Any, changes: dict[str, Any]) -> dict | None:
    return docs.update_document(COLLECTION, team_id, changes)


def count_in_district(district_id: Any) -> int:
    return docs.collection(COLLECTION).count_documents(
        {"district_id": docs.as_reference(district_id), "status": "active"}
    )


def count_doctors(team_id: Any) -> int:
    return docs.collection("doctors").count_documents({"team_id": docs.as_reference(team_id), "status": "active"})


def team_products(team_id: Any) -> dict[str, Any]:
    """Active products flagged with whether the team carries them."""
    products = list(docs.collection("products").find({"status": "active"}, docs.projection(PRODUCT_FIELDS)).sort([("name", 1)]))
    assigned = {
        str(row["product_id"])
        for row in docs.collection(ASSIGNMENTS).find(
            {"team_id": docs.as_reference(team_id), "status": "active"}, {"product_id": 1}
        )
    }
    return {
        "products": [{**product, "isAssigned": str(product["_id"]) in assigned} for product in products],
        "totalProducts": len(products),
        "assignedCount": len(assigned),
    }


def missing_products(product_ids: Iterable[Any]) -> list[str]:
    """Ids from ``product_ids`` with no matching product."""
    wanted = list(dict.fromkeys(str(value) for value in product_ids))
    found = {
        str(product["_id"])
        for product in docs.collection("products").find(
            {"_id": {"$in": [docs.to_object_id(value) for value in wanted]}}, {"_id": 1}
        )
    }
    return [value for value in wanted if value not in found]


def replace_team_products(team_id: Any, product_ids: Iterable[Any], assigned_by: Optional[Any] = None) -> int:
    """Make ``product_ids`` the team's assignments; returns how many are assigned.

    The new set is upserted before anything outside it is removed, so a failed
    write never leaves the team with fewer products than it had.
    """
    key = docs.to_object_id(team_id)
    documents = [
        TeamProductDocument(team_id=key, product_id=product_id, assigned_by=assigned_by).to_document()
        for product_id in dict.fromkeys(str(value) for value in product_ids)
    ]
    assignments = docs.collection(ASSIGNMENTS)
    for document in documents:
        now = docs.utcnow()
        assignments.update_one(
            {"team_id": key, "product_id": document["product_id"]},
            {
                "$set": {**document, "updated_at": now},
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
        )
    kept = [document["product_id"] for document in documents]
    assignments.delete_many({"team_id": key, "product_id": {"$nin": kept}})
    return len(documents)
