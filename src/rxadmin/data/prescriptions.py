"""Prescription queries."""

from __future__ import annotations

from typing import Any, Iterable

from ..persistence import documents as docs
from ..schemas.documents import PrescriptionDocument

COLLECTION = "prescriptions"
DISTRICT_SUMMARY = ("name", "code")


def list_prescriptions(
    *,
    search: str = "",
    order_status: str = "",
    priority: str = "",
    doctor_id: str = "",
    district_id: str = "",
    page: int = 1,
    limit: int = 20,
) -> tuple[list[dict], int]:
    query: dict[str, Any] = {}
    if search:
        query.update(docs.regex_filter(("mrn", "diagnosis", "shopify_order_id"), search))
    if order_status:
        query["order_status"] = order_status
    if priority:
        query["priority"] = priority
    if doctor_id:
        query["doctor_id"] = docs.as_reference(doctor_id)
    if district_id:
        query["district_id"] = docs.as_reference(district_id)
    items, total = docs.find_page(COLLECTION, query, page=page, limit=limit, sort=[("created_at", -1)])
    for item in items:
        docs.populate(item, "patient_id", "patients", ("name", "mrn", "phone", "age", "gender", "city"))
        docs.populate(item, "doctor_id", "doctors", ("name", "email", "phone", "specialty"))
        docs.populate(item, "district_id", "districts", DISTRICT_SUMMARY)
    return items, total


def get_prescription_detail(prescription_id: Any) -> dict | None:
    """Prescription with patient, doctor (and its district), district and related order."""
    prescription = docs.find_by_id(COLLECTION, prescription_id)
    if prescription is None:
        return None
    docs.populate(prescription, "patient_id", "patients", ("name", "mrn", "phone", "age", "gender", "city", "address"))
    docs.populate(prescription, "doctor_id", "doctors", ("name", "email", "phone", "pmdc_number", "specialty", "district_id"))
    if isinstance(prescription.get("doctor_id"), dict):
        docs.populate(prescription["doctor_id"], "district_id", "districts", DISTRICT_SUMMARY)
    docs.populate(prescription, "district_id", "districts", DISTRICT_SUMMARY)

    order = None
    if prescription.get("shopify_order_id"):
        order = docs.collection("orders").find_one({"prescription_id": prescription["_id"]})
        docs.populate(order, "doctor_info.district_id", "districts", DISTRICT_SUMMARY)
    return {"prescription": prescription, "order": order}


def ids_for_patients(patient_ids: Iterable[Any]) -> list[Any]:
    cursor = docs.collection(COLLECTION).find({"patient_id": {"$in": list(patient_ids)}}, {"_id": 1})
    return [row["_id"] for row in cursor]


def set_order_status(prescription_id: Any, order_status: str) -> None:
    if prescription_id is None or not docs.is_valid_object_id(prescription_id):
        return
    docs.update_document(COLLECTION, prescription_id, {"order_status": order_status})


def create_prescription(data: dict[str, Any]) -> dict:
    document = PrescriptionDocument.model_validate(data).to_document()
    return docs.insert_document(COLLECTION, document)
