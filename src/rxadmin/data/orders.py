"""Order queries and the order → prescription → patient/doctor/district expansion."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from ..persistence import documents as docs
from ..schemas.documents import OrderDocument

COLLECTION = "orders"
DISTRICT_SUMMARY = ("name", "code")
DOCTOR_DETAIL = ("name", "email", "phone", "pmdc_number", "specialty")
PATIENT_DETAIL = ("name", "mrn", "phone", "age", "gender", "city", "address")


def expand_order(order: dict | None) -> dict | None:
    """Resolve the prescription chain and the doctor snapshot references."""
    if order is None:
        return None
    docs.populate(order, "prescription_id", "prescriptions")
    prescription = order.get("prescription_id")
    if isinstance(prescription, dict):
        docs.populate(prescription, "patient_id", "patients", PATIENT_DETAIL)
        docs.populate(prescription, "doctor_id", "doctors", DOCTOR_DETAIL)
        docs.populate(prescription, "district_id", "districts", DISTRICT_SUMMARY)
    docs.populate(order, "doctor_info.doctor_id", "doctors", DOCTOR_DETAIL)
    docs.populate(order, "doctor_info.district_id", "districts", DISTRICT_SUMMARY)
    return order


def list_orders(
    *,
    prescription_ids: Optional[Iterable[Any]] = None,
    search: str = "",
    order_status: str = "",
    financial_status: str = "",
    fulfillment_status: str = "",
    page: int = 1,
    limit: int = 20,
) -> tuple[list[dict], int]:
    query: dict[str, Any] = {}
    if prescription_ids is not None:
        query["prescription_id"] = {"$in": list(prescription_ids)}
    if search:
        query.update(
            docs.regex_filter(
                ("patient_info.name", "patient_info.mrn", "patient_info.phone", "shopify_order_number", "doctor_info.name"),
                search,
            )
        )
    if order_status:
        query["order_status"] = order_status
    if financial_status:
        query["financial_status"] = financial_status
    if fulfillment_status:
        query["fulfillment_status"] = fulfillment_status
    items, total = docs.find_page(COLLECTION, query, page=page, limit=limit, sort=[("created_at", -1)])
    for item in items:
        docs.populate(item, "prescription_id", "prescriptions", ("prescription_text", "diagnosis", "priority"))
        docs.populate(item, "doctor_info.district_id", "districts", DISTRICT_SUMMARY)
    return items, total


def get_order(order_id: Any) -> dict | None:
    return docs.find_by_id(COLLECTION, order_id)


def get_order_detail(order_id: Any) -> dict | None:
    return expand_order(get_order(order_id))


def find_orders(order_ids: Iterable[Any]) -> list[dict]:
    keys = [docs.to_object_id(value) for value in order_ids if docs.is_valid_object_id(value)]
    if not keys:
        return []
    return list(docs.collection(COLLECTION).find({"_id": {"$in": keys}}))


def create_order(data: dict[str, Any]) -> dict:
    document = OrderDocument.model_validate(data).to_document()
    return docs.insert_document(COLLECTION, document)


def update_order(order_id: Any, changes: dict[str, Any]) -> dict | None:
    if docs.update_document(COLLECTION, order_id, changes) is None:
        return None
    return get_order_detail(order_id)
