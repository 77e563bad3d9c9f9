"""Headline counts and recent activity for the admin dashboard."""

from __future__ import annotations

from typing import Any

from ..persistence import documents as docs

RECENT_LIMIT = 10


def _count(name: str, query: dict[str, Any] | None = None) -> int:
    return docs.collection(name).count_documents(query or {})


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def dashboard_stats() -> dict[str, Any]:
    total_orders = _count("orders")
    fulfilled = _count("orders", {"order_status": "fulfilled"})
    total_doctors = _count("doctors")
    active_doctors = _count("doctors", {"status": "active"})
    return {
        "users": _count("users"),
        "doctors": {
            "total": total_doctors,
            "active": active_doctors,
            "inactive": _count("doctors", {"status": "inactive"}),
            "activeRate": _rate(active_doctors, total_doctors),
        },
        "prescriptions": _count("prescriptions"),
        "orders": {
            "total": total_orders,
            "pending": _count("orders", {"order_status": "pending"}),
            "processing": _count("orders", {"order_status": "processing"}),
            "fulfilled": fulfilled,
            "active": _count("orders", {"order_status": {"$in": ["pending", "processing"]}}),
            "fulfillmentRate": _rate(fulfilled, total_orders),
        },
        "patients": _count("patients"),
        "products": _count("products"),
        "districts": _count("districts"),
        "teams": _count("teams"),
        "activeTeams": _count("teams", {"status": "active"}),
        "activeKAMs": _count("users", {"role": "kam", "status": "active"}),
    }


def recent_orders(limit: int = RECENT_LIMIT) -> list[dict[str, Any]]:
    cursor = docs.collection("orders").find(
        {},
        docs.projection(
            ("shopify_order_number", "shopify_order_id", "order_status", "total_amount", "patient_info", "created_at")
        ),
    )
    rows = []
    for order in cursor.sort([("shopify_order_number", -1), ("created_at", -1)]).limit(limit):
        patient = order.get("patient_info") or {}
        rows.append(
            {
                "id": order["_id"],
                "orderNumber": order.get("shopify_order_number") or "N/A",
                "shopifyOrderId": order.get("shopify_order_id"),
                "patient": {
                    "name": patient.get("name") or "Unknown Patient",
                    "mrn": patient.get("mrn") or "N/A",
                    "phone": patient.get("phone") or "N/A",
                },
                "status": order.get("order_status"),
                "totalAmount": order.get("total_amount") or 0,
                "createdAt": order.get("created_at"),
            }
        )
    return rows


def recent_activities(limit: int = RECENT_LIMIT) -> list[dict[str, Any]]:
    """Latest prescriptions written, newest first."""
    cursor = docs.collection("prescriptions").find({}).sort([("created_at", -1)]).limit(limit)
    activities = []
    for prescription in cursor:
        docs.populate(prescription, "patient_id", "patients", ("name", "mrn"))
        docs.populate(prescription, "doctor_id", "doctors", ("name", "specialty"))
        patient = prescription.get("patient_id") or {}
        doctor = prescription.get("doctor_id") or {}
        activities.append(
            {
                "id": prescription["_id"],
                "type": "prescription",
                "prescriptionNumber": prescription.get("mrn") or "N/A",
                "patient": {
                    "name": patient.get("name") or "Unknown Patient",
                    "mrn": prescription.get("mrn") or "N/A",
                },
                "doctor": {
                    "name": doctor.get("name") or "Unknown Doctor",
                    "specialty": doctor.get("specialty") or "General",
                },
                "status": prescription.get("order_status"),
                "medicationCount": 1 if prescription.get("selected_product") else 0,
                "createdAt": prescription.get("created_at"),
            }
        )
    return activities
