"""Patient queries."""

from __future__ import annotations

from typing import Any

from ..persistence import documents as docs
from ..schemas.documents import PatientDocument

COLLECTION = "patients"
CREATOR_SUMMARY = ("name", "email", "phone", "specialty")


def list_patients(*, search: str = "", gender: str = "", city: str = "", page: int = 1, limit: int = 20) -> tuple[list[dict], int]:
    clauses: list[dict[str, Any]] = []
    if search:
        clauses.append(docs.regex_filter(("name", "mrn", "phone"), search))
    if gender:
        clauses.append({"gender": gender})
    if city:
        clauses.append(docs.regex_filter(("city",), city))
    query = {"$and": clauses} if clauses else {}
    items, total = docs.find_page(COLLECTION, query, page=page, limit=limit, sort=[("mrn", -1)])
    return [docs.populate(item, "created_by", "doctors", CREATOR_SUMMARY) for item in items], total


def get_patient_overview(patient_id: Any) -> dict | None:
    """Patient with its latest prescriptions and orders."""
    patient = docs.find_by_id(COLLECTION, patient_id)
    if patient is None:
        return None
    docs.populate(patient, "created_by", "doctors", ("name", "email", "phone", "pmdc_number", "specialty", "district_id"))
    if isinstance(patient.get("created_by"), dict):
        docs.populate(patient["created_by"], "district_id", "districts", ("name", "code"))

    prescriptions = docs.collection("prescriptions")
    orders = docs.collection("orders")
    recent_prescriptions = list(prescriptions.find({"patient_id": patient["_id"]}).sort([("created_at", -1)]).limit(10))
    for prescription in recent_prescriptions:
        docs.populate(prescription, "doctor_id", "doctors", ("name", "email", "specialty"))
        docs.populate(prescription, "district_id", "districts", ("name", "code"))
    recent_orders = list(orders.find({"patient_info.mrn": patient.get("mrn")}).sort([("created_at", -1)]).limit(10))
    for order in recent_orders:
        docs.populate(order, "doctor_info.district_id", "districts", ("name", "code"))

    return {
        "patient": patient,
        "prescriptions": recent_prescriptions,
        "orders": recent_orders,
        "stats": {
            "totalPrescriptions": prescriptions.count_documents({"patient_id": patient["_id"]}),
            "totalOrders": orders.count_documents({"patient_info.mrn": patient.get("mrn")}),
        },
    }


def patient_ids_in_city(city_name: str) -> list[Any]:
    return [row["_id"] for row in docs.collection(COLLECTION).find({"city": city_name}, {"_id": 1})]


def create_patient(data: dict[str, Any]) -> dict:
    document = PatientDocument.model_validate(data).to_document()
    return docs.insert_document(COLLECTION, document)
