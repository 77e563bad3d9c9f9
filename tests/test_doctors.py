import pytest
from bson import ObjectId

from src.rxadmin.data import districts as districts_repo
from src.rxadmin.data import doctors as doctors_repo
from src.rxadmin.data import orders as orders_repo
from src.rxadmin.data import prescriptions as prescriptions_repo
from tests.helpers import bearer


def _doctor(district_id, email: str, name: str = "Dr. Sana", specialty: str = "Cardiology") -> dict:
    return doctors_repo.create_doctor(
        {
            "email": email,
            "password": "x",
            "name": name,
            "phone": "0300-0000000",
            "district_id": district_id,
            "pmdc_number": "PMDC-" + email.split("@")[0],
            "specialty": specialty,
        }
    )


@pytest.fixture
def other_district(db) -> dict:
    return districts_repo.create_district({"name": "Karachi", "code": "KHI"})


def test_kam_list_is_confined_to_own_district(api_client, kam_headers, district, other_district) -> None:
    _doctor(district["_id"], "home@example.com")
    _doctor(other_district["_id"], "away@example.com")

    response = api_client.get(
        "/api/doctors", params={"district_id": str(other_district["_id"])}, headers=kam_headers
    )

    assert response.status_code == 200
    doctors = response.json()["data"]["doctors"]
    assert [doctor["email"] for doctor in doctors] == ["home@example.com"]
    assert doctors[0]["district_id"]["code"] == "LHR"
    assert "password" not in doctors[0]


def test_admin_list_filters(api_client, admin_headers, district, other_district) -> None:
    _doctor(district["_id"], "cardio@example.com", specialty="Cardiology")
    _doctor(other_district["_id"], "derm@example.com", name="Dr. Omar", specialty="Dermatology")

    response = api_client.get("/api/doctors", params={"specialty": "derm"}, headers=admin_headers)
    assert [doctor["email"] for doctor in response.json()["data"]["doctors"]] == ["derm@example.com"]

    response = api_client.get("/api/doctors", params={"search": "omar", "specialty": "cardio"}, headers=admin_headers)
    assert response.json()["data"]["doctors"] == []

    response = api_client.get("/api/doctors", params={"district_id": "bad"}, headers=admin_headers)
    assert response.status_code == 400


def test_kam_creates_doctor_in_own_district(api_client, kam_headers, kam, district, other_district) -> None:
    body = {
        "email": "New.Doc@Example.com",
        "password": "pass1234",
        "name": "Dr. New",
        "phone": "0301",
        "district_id": str(other_district["_id"]),
        "pmdc_number": "P-9",
        "specialty": "ENT",
    }

    response = api_client.post("/api/doctors", json=body, headers=kam_headers)

    assert response.status_code == 201
    doctor = response.json()["data"]["doctor"]
    assert doctor["email"] == "new.doc@example.com"
    assert doctor["district_id"]["_id"] == str(district["_id"])
    assert doctor["kam_id"]["_id"] == str(kam["_id"])

    response = api_client.post("/api/doctors", json=body, headers=kam_headers)
    assert response.json()["error"]["message"] == "Email already exists"


def test_kam_without_district_cannot_create(api_client) -> None:
    response = api_client.post("/api/doctors", json={}, headers=bearer("kam"))

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "You are not assigned to any district"


def test_kam_cannot_touch_doctor_outside_district(api_client, kam_headers, other_district) -> None:
    doctor = _doctor(other_district["_id"], "away@example.com")
    url = f"/api/doctors/{doctor['_id']}"

    for response in (
        api_client.get(url, headers=kam_headers),
        api_client.put(url, json={"name": "Changed"}, headers=kam_headers),
        api_client.delete(url, headers=kam_headers),
        api_client.patch(f"{url}/status", json={"status": "inactive"}, headers=kam_headers),
        api_client.get(f"{url}/stats", headers=kam_headers),
    ):
        assert response.status_code == 403
        assert response.json()["error"]["message"] == "You do not have access to this doctor"


def test_kam_cannot_move_doctor_to_another_district(api_client, kam_headers, district, other_district) -> None:
    doctor = _doctor(district["_id"], "home@example.com")

    response = api_client.put(
        f"/api/doctors/{doctor['_id']}", json={"district_id": str(other_district["_id"])}, headers=kam_headers
    )

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "You cannot change doctor district"


def test_doctor_status_and_soft_delete(api_client, kam_headers, district, db) -> None:
    doctor = _doctor(district["_id"], "home@example.com")
    url = f"/api/doctors/{doctor['_id']}"

    response = api_client.patch(f"{url}/status", json={"status": "inactive"}, headers=kam_headers)
    assert response.json()["message"] == "Doctor deactivated successfully"

    response = api_client.patch(f"{url}/status", json={"status": "active"}, headers=kam_headers)
    assert response.json()["message"] == "Doctor activated successfully"

    response = api_client.delete(url, headers=kam_headers)
    assert response.json()["message"] == "Doctor deleted successfully"
    assert db.doctors.find_one({"_id": doctor["_id"]})["status"] == "inactive"


def test_unknown_doctor_is_404(api_client, admin_headers) -> None:
    response = api_client.get(f"/api/doctors/{ObjectId()}", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Doctor not found"


def test_doctor_stats(api_client, admin_headers, district) -> None:
    doctor = _doctor(district["_id"], "home@example.com")
    prescription = prescriptions_repo.create_prescription(
        {
            "mrn": "MRN-1",
            "patient_id": ObjectId(),
            "doctor_id": doctor["_id"],
            "district_id": district["_id"],
            "prescription_text": "Aspirin 75mg daily",
            "duration_days": 30,
            "order_status": "processing",
        }
    )
    orders_repo.create_order(
        {
            "prescription_id": prescription["_id"],
            "shopify_order_id": "LOCAL-1",
            "shopify_order_number": "1001",
            "doctor_info": {"doctor_id": doctor["_id"], "name": "Dr. Sana"},
            "total_amount": 250,
        }
    )

    response = api_client.get(f"/api/doctors/{doctor['_id']}/stats", headers=admin_headers)

    stats = response.json()["data"]["stats"]
    assert stats["total_prescriptions"] == 1
    assert stats["total_orders"] == 1
    assert stats["prescriptions_by_status"] == [{"_id": "processing", "count": 1}]
    assert stats["orders_by_status"] == [{"_id": "pending", "count": 1}]
    assert len(response.json()["data"]["recent_prescriptions"]) == 1
