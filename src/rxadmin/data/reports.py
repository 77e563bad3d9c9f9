"""Sales and team performance reports built from doctors, prescriptions and orders."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Optional

from ..persistence import documents as docs


def created_between(date_from: Optional[date], date_to: Optional[date]) -> dict[str, datetime]:
    """``created_at`` bounds covering whole days, ``date_to`` included."""
    bounds: dict[str, datetime] = {}
    if date_from:
        bounds["$gte"] = datetime.combine(date_from, time.min, tzinfo=timezone.utc)
    if date_to:
        bounds["$lte"] = datetime.combine(date_to, time.max, tzinfo=timezone.utc)
    return bounds


def _money(value: float) -> float:
    return round(value, 2)


def _revenue(orders: Iterable[dict]) -> float:
    return sum(float(order.get("total_amount") or 0) for order in orders)


def _fulfillment_rate(orders: list[dict]) -> float:
    if not orders:
        return 0.0
    fulfilled = sum(1 for order in orders if order.get("order_status") == "fulfilled")
    return _money(fulfilled / len(orders) * 100)


def _activity(doctor_ids: list[Any], bounds: dict[str, datetime]) -> tuple[list[dict], list[dict]]:
    """Prescriptions by ``doctor_ids`` in the window, and the orders placed for them."""
    query: dict[str, Any] = {"doctor_id": {"$in": doctor_ids}}
    if bounds:
        query["created_at"] = bounds
    prescriptions = list(docs.collection("prescriptions").find(query))
    orders = list(
        docs.collection("orders").find({"prescription_id": {"$in": [item["_id"] for item in prescriptions]}})
    )
    return prescriptions, orders


def report_context(*, team_id: Optional[Any] = None, district_id: Optional[Any] = None) -> dict | None:
    """Describe the team, or failing that the district, a report was narrowed to."""
    if team_id is not None:
        team = docs.find_by_id("teams", team_id)
        if team is not None:
            return {"type": "team", "_id": team["_id"], "name": team.get("name")}
        return None
    if district_id is None:
        return None
    district = docs.find_by_id("districts", district_id)
    if district is None:
        return None
    kam = docs.collection("users").find_one({"district_id": district["_id"], "role": "kam", "status": "active"})
    return {
        "type": "district",
        "_id": district["_id"],
        "name": district.get("name"),
        "code": district.get("code"),
        "kam": {"name": kam["name"], "email": kam["email"]} if kam else None,
    }


def sales_report(
    *,
    district_id: Optional[Any] = None,
    team_id: Optional[Any] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    assigned: bool = True,
) -> dict[str, Any]:
    """Revenue, order and patient totals for active doctors, with a per-doctor breakdown.

    Doctors must match every given filter. ``assigned=False`` stands for a
    caller with no district or team and yields an empty report.
    """
    doctor_query: dict[str, Any] = {"status": "active"}
    if district_id is not None:
        doctor_query["district_id"] = district_id
    if team_id is not None:
        doctor_query["team_id"] = team_id
    doctors = []
    if assigned:
        fields = docs.projection(("name", "team_id", "district_id"))
        doctors = list(docs.collection("doctors").find(doctor_query, fields))
    prescriptions, orders = _activity([doctor["_id"] for doctor in doctors], created_between(date_from, date_to))

    orders_by_prescription: dict[Any, list[dict]] = {}
    for order in orders:
        orders_by_prescription.setdefault(order.get("prescription_id"), []).append(order)

    performance = []
    for doctor in doctors:
        written = [item for item in prescriptions if item.get("doctor_id") == doctor["_id"]]
        placed = [order for item in written for order in orders_by_prescription.get(item["_id"], [])]
        performance.append(
            {
                "doctor": {"_id": doctor["_id"], "name": doctor.get("name")},
                "prescriptions": len(written),
                "orders": len(placed),
                "revenue": _money(_revenue(placed)),
                "patients": len({item.get("patient_id") for item in written}),
            }
        )
    performance.sort(key=lambda row: row["revenue"], reverse=True)

    revenue = _revenue(orders)

    return {
        "summary": {
            "totalRevenue": _money(revenue),
            "totalPrescriptions": len(prescriptions),
            "totalOrders": len(orders),
            "activePatients": len({item.get("patient_id") for item in prescriptions}),
            "averageOrderValue": _money(revenue / len(orders)) if orders else 0.0,
            "fulfillmentRate": _fulfillment_rate(orders),
        },
        "doctors": performance,
        "dateRange": {
            "from": date_from.isoformat() if date_from else None,
            "to": date_to.isoformat() if date_to else None,
        },
    }


def team_performance(
    *,
    team_id: Optional[Any] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> dict[str, Any]:
    query: dict[str, Any] = {"status": "active"}
    if team_id is not None:
        query["_id"] = team_id
    bounds = created_between(date_from, date_to)

    rows = []
    for team in docs.collection("teams").find(query):
        doctor_ids = [
            doctor["_id"]
            for doctor in docs.collection("doctors").find({"team_id": team["_id"], "status": "active"}, {"_id": 1})
        ]
        prescriptions, orders = _activity(doctor_ids, bounds)
        rows.append(
            {
                "team": {"_id": team["_id"], "name": team.get("name")},
                "stats": {
                    "doctors": len(doctor_ids),
                    "prescriptions": len(prescriptions),
                    "orders": len(orders),
                    "revenue": _money(_revenue(orders)),
                    "fulfillmentRate": _fulfillment_rate(orders),
                },
            }
        )
    rows.sort(key=lambda row: row["stats"]["revenue"], reverse=True)

    totals = {"doctors": 0, "prescriptions": 0, "orders": 0, "revenue": 0.0}
    for row in rows:
        for field in totals:
            totals[field] += row["stats"][field]
    totals["revenue"] = _money(totals["revenue"])

    return {
        "teams": rows,
        "totals": totals,
        "dateRange": {
            "from": date_from.isoformat() if date_from else None,
            "to": date_to.isoformat() if date_to else None,
        },
    }
