from datetime import datetime, timezone

import pytest
from bson import ObjectId

from src.rxadmin.data import doctors as doctors_repo
from src.rxadmin.data import orders as orders_repo
from src.rxadmin.data import patients as patients_repo
from src.rxadmin.data import prescriptions as prescriptions_repo
from src.rxadmin.data import teams as teams_repo
from tests.helpers import bearer


def _doctor(email: str, name: str, district_id, team_id=None) -> dict:
    return doctors_repo.create_doctor(
        {
            "email": email,
            "password": "x",
            "name": name,
            "phone": "0300",
            "district_id": district_id,
            "team_id": team_id,
            "pmdc_number": "P-" + email,
            "specialty": "Cardiology",
        }
    )


def _prescription(db, doctor: dict, patient_id, written_on: datetime) -> dict:
    prescription = prescriptions_repo.create_prescription(
        {
            "mrn": "MRN-" + str(patient_id)[-4:],
            "patient_id": patient_id,
            "doctor_id": doctor["_id"],
            "district_id": doctor["district_id"],
            "prescription_text": "Atorvastatin 20mg",
            "duration_days": 30,
        }
    )
    db.prescriptions.update_one({"_id": prescription["_id"]}, {"$set": {"created_at": written_on}})
    return prescription


def _order(prescription: dict, number: str, amount: float, order_status: str, patient_name=None) -> dict:
    return orders_repo.create_order(
        {
            "prescription_id": prescription["_id"],
            "shopify_order_id": "LOCAL-" + number,
            "shopify_order_number": number,
            "patient_info": {"name": patient_name, "mrn": prescription["mrn"]},
            "total_amount": amount,
            "order_status": order_status,
        }
    )


@pytest.fixture
def sales(db, district, kam) -> dict:
    """Two teams in one district; North outsells South."""
    north = teams_repo.create_team({"name": "North", "district_id": district["_id"]})
    south = teams_repo.create_team({"name": "South", "district_id": district["_id"]})
    first = _doctor("one@example.com", "Dr. One", district["_id"], north["_id"])
    second = _doctor("two@example.com", "Dr. Two", district["_id"], south["_id"])
    _doctor("far@example.com", "Dr. Far", ObjectId())

    ayesha = patients_repo.create_patient(
        {"mrn": "MRN-0001", "name": "Ayesha", "phone": "0333", "city": "Lahore", "created_by": first["_id"]}
    )
    other_patient = ObjectId()
    march = _prescription(db, first, ayesha["_id"], datetime(2024, 3, 10, 12, tzinfo=timezone.utc))
    april = _prescription(db, first, other_patient, datetime(2024, 4, 2, 9, tzinfo=timezone.utc))
    south_march = _prescription(db, second, ayesha["_id"], datetime(2024, 3, 15, 8, tzinfo=timezone.utc))
    _order(march, "#1001", 1000, "fulfilled", patient_name="Ayesha")
    _order(april, "#1002", 500, "pending")
    _order(south_march, "#1003", 300, "fulfilled", patient_name="Ayesha")
    return {"north": north, "south": south, "first": first, "second": second}


def test_sales_report_totals_and_doctor_ranking(api_client, admin_headers, sales) -> None:
    response = api_client.get("/api/reports/sales", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["summary"] == {
        "totalRevenue": 1800.0,
        "totalPrescriptions": 3,
        "totalOrders": 3,
        "activePatients": 2,
        "averageOrderValue": 600.0,
        "fulfillmentRate": 66.67,
    }
    assert [row["doctor"]["name"] for row in data["doctors"]] == ["Dr. One", "Dr. Two", "Dr. Far"]
    assert data["doctors"][0] == {
        "doctor": {"_id": str(sales["first"]["_id"]), "name": "Dr. One"},
        "prescriptions": 2,
        "orders": 2,
        "revenue": 1500.0,
        "patients": 2,
    }
    assert data["context"] is None
    assert data["dateRange"] == {"from": None, "to": None}


def test_sales_report_date_range_includes_whole_last_day(api_client, admin_headers, sales) -> None:
    response = api_client.get(
        "/api/reports/sales", params={"dateFrom": "2024-03-01", "dateTo": "2024-03-31"}, headers=admin_headers
    )
    summary = response.json()["data"]["summary"]
    assert summary["totalRevenue"] == 1300.0
    assert summary["fulfillmentRate"] == 100.0
    assert response.json()["data"]["dateRange"] == {"from": "2024-03-01", "to": "2024-03-31"}

    response = api_client.get("/api/reports/sales", params={"dateTo": "2024-03-10"}, headers=admin_headers)
    assert response.json()["data"]["summary"]["totalPrescriptions"] == 1


def test_sales_report_team_filter_wins_over_district(api_client, admin_headers, district, sales) -> None:
    response = api_client.get(
        "/api/reports/sales",
        params={"teamId": str(sales["north"]["_id"]), "districtId": str(district["_id"])},
        headers=admin_headers,
    )

    data = response.json()["data"]
    assert [row["doctor"]["name"] for row in data["doctors"]] == ["Dr. One"]
    assert data["context"] == {"type": "team", "_id": str(sales["north"]["_id"]), "name": "North"}


def test_sales_report_district_context_names_the_kam(api_client, admin_headers, district, sales) -> None:
    response = api_client.get("/api/reports/sales", params={"districtId": str(district["_id"])}, headers=admin_headers)

    data = response.json()["data"]
    assert data["summary"]["totalOrders"] == 3
    assert data["context"]["code"] == "LHR"
    assert data["context"]["kam"] == {"name": "Kamran", "email": "kam@example.com"}


def test_kam_sales_report_is_confined_to_own_team(api_client, kam_headers, kam, sales, db) -> None:
    response = api_client.get("/api/reports/sales", headers=kam_headers)
    data = response.json()["data"]
    assert data["summary"]["totalOrders"] == 0
    assert data["doctors"] == []

    db.users.update_one({"_id": kam["_id"]}, {"$set": {"team_id": sales["south"]["_id"]}})
    response = api_client.get(
        "/api/reports/sales", params={"teamId": str(sales["north"]["_id"])}, headers=kam_headers
    )
    data = response.json()["data"]
    assert data["summary"]["totalRevenue"] == 300.0
    assert [row["doctor"]["name"] for row in data["doctors"]] == ["Dr. Two"]
    assert data["context"]["type"] == "district"


def test_sales_report_rejects_bad_filters(api_client, admin_headers, db) -> None:
    response = api_client.get("/api/reports/sales", params={"teamId": "bad"}, headers=admin_headers)
    assert response.json()["error"]["message"] == "Invalid team ID"

    response = api_client.get("/api/reports/sales", params={"dateFrom": "yesterday"}, headers=admin_headers)
    assert response.status_code == 400

    response = api_client.get(
        "/api/reports/sales", params={"dateFrom": "2024-05-01", "dateTo": "2024-04-01"}, headers=admin_headers
    )
    assert response.json()["error"]["message"] == "dateFrom must not be after dateTo"

    response = api_client.get("/api/reports/sales", headers=bearer("distributor"))
    assert response.status_code == 401


def test_team_performance(api_client, admin_headers, kam_headers, sales) -> None:
    response = api_client.get("/api/reports/team-performance", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert [row["team"]["name"] for row in data["teams"]] == ["North", "South"]
    assert data["teams"][0]["stats"] == {
        "doctors": 1,
        "prescriptions": 2,
        "orders": 2,
        "revenue": 1500.0,
        "fulfillmentRate": 50.0,
    }
    assert data["totals"] == {"doctors": 2, "prescriptions": 3, "orders": 3, "revenue": 1800.0}

    response = api_client.get(
        "/api/reports/team-performance", params={"teamId": str(sales["south"]["_id"])}, headers=admin_headers
    )
    assert [row["team"]["name"] for row in response.json()["data"]["teams"]] == ["South"]

    response = api_client.get("/api/reports/team-performance", headers=kam_headers)
    assert response.status_code == 401


def test_dashboard_stats(api_client, admin_headers, sales) -> None:
    response = api_client.get("/api/dashboard/stats", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Dashboard statistics retrieved successfully"
    stats = response.json()["data"]
    assert stats["doctors"] == {"total": 3, "active": 3, "inactive": 0, "activeRate": 100.0}
    assert stats["orders"] == {
        "total": 3,
        "pending": 1,
        "processing": 0,
        "fulfilled": 2,
        "active": 1,
        "fulfillmentRate": 66.7,
    }
    assert stats["prescriptions"] == 3
    assert stats["teams"] == stats["activeTeams"] == 2
    assert stats["activeKAMs"] == 1


def test_dashboard_recent_orders_and_activities(api_client, admin_headers, sales) -> None:
    response = api_client.get("/api/dashboard/recent-orders", headers=admin_headers)
    orders = response.json()["data"]
    assert [order["orderNumber"] for order in orders] == ["#1003", "#1002", "#1001"]
    assert orders[1]["patient"]["name"] == "Unknown Patient"
    assert orders[0]["totalAmount"] == 300

    response = api_client.get("/api/dashboard/activities", headers=admin_headers)
    activities = response.json()["data"]
    assert len(activities) == 3
    assert activities[0]["patient"]["name"] == "Unknown Patient"
    assert activities[1]["patient"]["name"] == "Ayesha"
    assert activities[0]["doctor"] == {"name": "Dr. One", "specialty": "Cardiology"}
    assert activities[0]["type"] == "prescription"


def test_dashboard_is_admin_only(api_client, kam_headers) -> None:
    for path in ("/api/dashboard/stats", "/api/dashboard/recent-orders", "/api/dashboard/activities"):
        assert api_client.get(path, headers=kam_headers).status_code == 401
