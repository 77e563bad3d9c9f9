"""Doctor queries and per-doctor statistics."""

from __future__ import annotations

from typing import Any, Optional

from ..persistence import documents as docs
from ..schemas.documents import DoctorDocument

COLLECTION = "doctors"
DISTRICT_SUMMARY = ("name", "code")
KAM_SUMMARY = ("name", "email")


def _expand(doctor: dict | None) -> dict | None:
    docs.populate(doctor, "district_id", "districts", DISTRICT_SUMMARY)
    return docs.populate(doctor, "kam_id", "users", KAM_SUMMARY)


def list_doctors(
    *,
    district_id: Optional[str] = None,
    search: str = "",
    status: str = "",
    specialty: str = "",
    page: int = 1,
    limit: int = 10,
) -> tuple[list[dict], int]:
    clauses: list[dict[str, Any]] = []
    if district_id:
        clauses.append({"district_id": docs.as_reference(district_id)})
    if search:
        clauses.append(docs.regex_filter(("name", "email", "phone", "pmdc_number"), search))
    if status:
        clauses.append({"status": status})
    if specialty:
        clauses.append(docs.regex_filter(("specialty",), specialty))
    query = {"$and": clauses} if clauses else {}
    items, total = docs.find_page(
        COLLECTION,
        query,
        page=page,
        limit=limit,
        sort=[("created_at", -1)],
        exclude=[docs.PASSWORD_FIELD],
    )
    return [_expand(item) for item in items], total


def get_doctor(doctor_id: Any, expand: bool = True) -> dict | None:
    doctor = docs.find_by_id(COLLECTION, doctor_id, exclude=[docs.PASSWORD_FIELD])
    return _expand(doctor) if expand else doctor


def email_taken(email: str, exclude_id: Optional[Any] = None) -> bool:
    query: dict[str, Any] = {"email": email.strip().lower()}
    if exclude_id is not None:
        query["_id"] = {"$ne": docs.to_object_id(exclude_id)}
    return docs.collection(COLLECTION).find_one(query, {"_id": 1}) is not None


def create_doctor(data: dict[str, Any]) -> dict | None:
    document = DoctorDocument.model_validate(data).to_document()
    created = docs.insert_document(COLLECTION, document)
    return get_doctor(created["_id"])


def update_doctor(doctor_id: Any, changes: dict[str, Any]) -> dict | None:
    if docs.update_document(COLLECTION, doctor_id, changes) is None:
        return None
    return get_doctor(doctor_id)


def set_doctor_status(doctor_id: Any, status: str) -> dict | None:
    if docs.update_status(COLLECTION, doctor_id, status) is None:
        return None
    return get_doctor(doctor_id)


def _count_by(collection: str, match: dict[str, Any], field: str) -> list[dict]:
    pipeline = [
        {"$match": match},
        {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
        {"$sort": {"_id": 1}},
    ]
    return list(docs.collection(collection).aggregate(pipeline))


def doctor_stats(doctor_id: Any) -> dict[str, Any]:
    key = docs.to_object_id(doctor_id)
    prescriptions = docs.collection("prescriptions")
    recent = list(prescriptions.find({"doctor_id": key}).sort([("created_at", -1)]).limit(10))
    for prescription in recent:
        docs.populate(prescription, "patient_id", "patients", ("name", "mrn"))
    return {
        "stats": {
            "total_prescriptions": prescriptions.count_documents({"doctor_id": key}),
            "total_orders": docs.collection("orders").count_documents({"doctor_info.doctor_id": key}),
            "prescriptions_by_status": _count_by("prescriptions", {"doctor_id": key}, "order_status"),
            "orders_by_status": _count_by("orders", {"doctor_info.doctor_id": key}, "order_status"),
        },
        "recent_prescriptions": recent,
    }
