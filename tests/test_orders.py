from typing import Optional

import pytest
from bson import ObjectId

from src.rxadmin.config import settings
from src.rxadmin.data import cities as cities_repo
from src.rxadmin.data import doctors as doctors_repo
from src.rxadmin.data import orders as orders_repo
from src.rxadmin.data import patients as patients_repo
from src.rxadmin.data import prescriptions as prescriptions_repo
from src.rxadmin.services.commerce import shopify_client
from src.rxadmin.services.commerce.shopify_client import CommerceError
from tests.helpers import bearer


class DummyStore:
    def __init__(self, orders: Optional[dict] = None, products: Optional[list] = None, fail: bool = False):
        self.orders = orders or {}
        self.products = products or []
        self.fail = fail
        self.requested: list[str] = []

    def get_order(self, order_id: str) -> dict:
        self.requested.append(order_id)
        if self.fail:
            raise CommerceError("Shopify API error: 503 Service Unavailable")
        return self.orders[order_id]

    def iter_products(self):
        if self.fail:
            raise CommerceError("Shopify GraphQL error: throttled")
        yield from self.products


@pytest.fixture
def use_store(monkeypatch: pytest.MonkeyPatch):
    def install(store: DummyStore) -> DummyStore:
        monkeypatch.setattr(shopify_client, "get_shopify_client", lambda: store)
        return store

    return install


@pytest.fixture
def chain(db, district) -> dict:
    """City, patient, doctor, prescription and order linked together."""
    city = cities_repo.create_city({"name": "Lahore", "distributor_channel": "pillbox"})
    patient = patients_repo.create_patient(
        {"mrn": "MRN-0001", "name": "Ayesha", "phone": "0333", "city": "Lahore", "created_by": ObjectId()}
    )
    doctor = doctors_repo.create_doctor(
        {
            "email": "doc@example.com",
            "password": "x",
            "name": "Dr. Sana",
            "phone": "0300",
            "district_id": district["_id"],
            "pmdc_number": "P-1",
            "specialty": "Cardiology",
        }
    )
    prescription = prescriptions_repo.create_prescription(
        {
            "mrn": "MRN-0001",
            "patient_id": patient["_id"],
            "doctor_id": doctor["_id"],
            "district_id": district["_id"],
            "prescription_text": "Atorvastatin 20mg",
            "duration_days": 30,
            "shopify_order_id": "5001",
        }
    )
    order = orders_repo.create_order(
        {
            "prescription_id": prescription["_id"],
            "shopify_order_id": "5001",
            "shopify_order_number": "#1001",
            "patient_info": {"mrn": "MRN-0001", "name": "Ayesha", "city_id": city["_id"], "city_name": "Lahore"},
            "doctor_info": {"doctor_id": doctor["_id"], "name": "Dr. Sana", "district_id": district["_id"]},
            "total_amount": 1500,
        }
    )
    return {"city": city, "patient": patient, "doctor": doctor, "prescription": prescription, "order": order}


def test_prescription_detail_expands_references(api_client, admin_headers, chain) -> None:
    response = api_client.get(f"/api/prescriptions/{chain['prescription']['_id']}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    prescription = data["prescription"]
    assert prescription["patient_id"]["name"] == "Ayesha"
    assert prescription["doctor_id"]["district_id"]["code"] == "LHR"
    assert prescription["district_id"]["name"] == "Lahore Central"
    assert data["order"]["shopify_order_number"] == "#1001"
    assert data["order"]["doctor_info"]["district_id"]["code"] == "LHR"


def test_prescriptions_are_admin_only(api_client, kam_headers) -> None:
    response = api_client.get("/api/prescriptions", headers=kam_headers)

    assert response.status_code == 401


def test_patient_overview(api_client, admin_headers, chain) -> None:
    response = api_client.get(f"/api/patients/{chain['patient']['_id']}", headers=admin_headers)

    data = response.json()["data"]
    assert data["patient"]["mrn"] == "MRN-0001"
    assert data["stats"] == {"totalPrescriptions": 1, "totalOrders": 1}


def test_order_detail_expands_prescription_chain(api_client, admin_headers, chain) -> None:
    response = api_client.get(f"/api/orders/{chain['order']['_id']}", headers=admin_headers)

    assert response.status_code == 200
    order = response.json()["data"]["order"]
    assert order["prescription_id"]["patient_id"]["mrn"] == "MRN-0001"
    assert order["prescription_id"]["doctor_id"]["specialty"] == "Cardiology"
    assert order["doctor_info"]["doctor_id"]["email"] == "doc@example.com"


def test_distributor_sees_only_orders_in_its_city(api_client, chain) -> None:
    own = bearer("distributor", city_id=str(chain["city"]["_id"]))
    response = api_client.get("/api/orders", headers=own)
    assert response.status_code == 200
    assert [order["shopify_order_number"] for order in response.json()["data"]["orders"]] == ["#1001"]

    elsewhere = bearer("distributor", city_id=str(ObjectId()))
    response = api_client.get("/api/orders", headers=elsewhere)
    assert response.json()["data"]["orders"] == []
    assert response.json()["data"]["pagination"]["total"] == 0

    response = api_client.get(f"/api/orders/{chain['order']['_id']}", headers=elsewhere)
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Unauthorized to view this order"

    response = api_client.get("/api/orders", headers=bearer("distributor"))
    assert response.json()["data"]["orders"] == []


def test_kam_cannot_read_orders(api_client, kam_headers) -> None:
    response = api_client.get("/api/orders", headers=kam_headers)

    assert response.status_code == 401


def test_update_order_status(api_client, admin_headers, chain) -> None:
    url = f"/api/orders/{chain['order']['_id']}"

    response = api_client.put(url, json={"order_status": "shipped"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid order status"

    response = api_client.put(url, json={"order_status": "processing", "financial_status": "paid"}, headers=admin_headers)
    assert response.status_code == 200
    order = response.json()["data"]["order"]
    assert order["order_status"] == "processing"
    assert order["financial_status"] == "paid"


def test_sync_order_applies_store_state(api_client, admin_headers, chain, use_store, db) -> None:
    store = use_store(
        DummyStore(
            orders={
                "5001": {
                    "financial_status": "paid",
                    "fulfillment_status": "fulfilled",
                    "total_price": "1650.00",
                    "updated_at": "2024-05-01T10:00:00Z",
                    "fulfillments": [{"tracking_number": "TCS-1", "tracking_url": "https://track/TCS-1"}],
                }
            }
        )
    )

    response = api_client.post(f"/api/orders/{chain['order']['_id']}/sync", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Order status synced successfully from Shopify"
    order = response.json()["data"]["order"]
    assert order["order_status"] == "fulfilled"
    assert order["fulfillment_status"] == "fulfilled"
    assert order["tracking_number"] == "TCS-1"
    assert order["total_amount"] == 1650.0
    assert store.requested == ["5001"]
    assert db.prescriptions.find_one({"_id": chain["prescription"]["_id"]})["order_status"] == "fulfilled"


def test_sync_order_falls_back_to_cached_copy(api_client, admin_headers, chain, use_store) -> None:
    use_store(DummyStore(fail=True))

    response = api_client.post(f"/api/orders/{chain['order']['_id']}/sync", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Could not sync with Shopify, returning cached data"
    assert body["data"]["order"]["order_status"] == "pending"
    assert "503" in body["data"]["warning"]


def test_sync_local_order_skips_store(api_client, admin_headers, chain, use_store) -> None:
    store = use_store(DummyStore())
    orders_repo.update_order(chain["order"]["_id"], {"shopify_order_id": "LOCAL-42"})

    response = api_client.post(f"/api/orders/{chain['order']['_id']}/sync", headers=admin_headers)

    assert response.json()["message"] == "Non-Shopify order - no sync needed"
    assert store.requested == []


def test_sync_without_store_configuration(api_client, admin_headers, chain, monkeypatch) -> None:
    monkeypatch.setattr(settings, "shopify_store_url", None)
    monkeypatch.setattr(settings, "shopify_access_token", None)

    response = api_client.post(f"/api/orders/{chain['order']['_id']}/sync", headers=admin_headers)

    assert response.status_code == 500
    assert response.json()["error"]["message"] == "Shopify configuration missing"


def test_bulk_sync_counts_local_and_failed_orders(api_client, admin_headers, chain, use_store) -> None:
    local = orders_repo.create_order(
        {
            "prescription_id": chain["prescription"]["_id"],
            "shopify_order_id": "LOCAL-7",
            "shopify_order_number": "LOCAL-7",
            "total_amount": 10,
        }
    )
    use_store(DummyStore(orders={"5001": {"financial_status": "paid", "total_price": "1500"}}))

    response = api_client.post(
        "/api/orders/bulk-sync",
        json={"order_ids": [str(chain["order"]["_id"]), str(local["_id"])]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Synced 1 out of 2 orders"
    assert body["data"]["failed"] == 1
    assert body["data"]["orders"][0]["order_status"] == "processing"


def test_bulk_sync_validation(api_client, admin_headers, db) -> None:
    response = api_client.post("/api/orders/bulk-sync", json={"order_ids": []}, headers=admin_headers)
    assert response.json()["error"]["message"] == "order_ids array is required"

    response = api_client.post("/api/orders/bulk-sync", json={"order_ids": [str(ObjectId())]}, headers=admin_headers)
    assert response.json()["message"] == "No orders found to sync"

    response = api_client.post("/api/orders/bulk-sync", json={"order_ids": ["x"]}, headers=bearer("distributor"))
    assert response.status_code == 401


def test_product_sync_upserts_variants(api_client, admin_headers, use_store, db) -> None:
    db.products.insert_one({"name": "Old", "sku": "ASP-75", "price": 1.0, "status": "active"})
    use_store(
        DummyStore(
            products=[
                {
                    "id": "11",
                    "title": "Aspirin",
                    "status": "ACTIVE",
                    "variants": [{"id": "111", "title": "Default", "sku": "asp-75", "price": "120.00"}],
                },
                {
                    "id": "22",
                    "title": "Brufen",
                    "status": "DRAFT",
                    "variants": [
                        {"id": "221", "title": "200mg", "sku": "", "price": "80"},
                        {"id": "222", "title": "400mg", "sku": "BRU-400", "price": "140"},
                    ],
                },
            ]
        )
    )

    response = api_client.post("/api/products/sync", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"] == {"totalProcessed": 2, "addedCount": 2, "updatedCount": 1}
    assert response.json()["message"] == "Successfully synced 3 products from Shopify"
    assert db.products.find_one({"sku": "ASP-75"})["price"] == 120.0
    generated = db.products.find_one({"sku": "SHOPIFY-221"})
    assert generated["name"] == "Brufen - 200mg"
    assert generated["status"] == "inactive"


def test_product_sync_upstream_failure_is_502(api_client, admin_headers, use_store) -> None:
    use_store(DummyStore(fail=True))

    response = api_client.post("/api/products/sync", headers=admin_headers)

    assert response.status_code == 502
    assert response.json()["error"]["message"] == "Failed to sync products from Shopify"
