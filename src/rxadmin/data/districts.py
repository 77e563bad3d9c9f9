"""District queries, including the cities embedded in each district."""

from __future__ import annotations

from typing import Any, Optional

from ..persistence import documents as docs
from ..schemas.documents import DistrictCity, DistrictDocument

COLLECTION = "districts"
KAM_SUMMARY = ("name", "email")
DISTRIBUTOR_SUMMARY = ("name", "email", "phone")


def _expand_kam(district: dict | None) -> dict | None:
    return docs.populate(district, "kam_id", "users", KAM_SUMMARY)


def list_districts(*, search: str = "", status: str = "", page: int = 1, limit: int = 50) -> tuple[list[dict], int]:
    query: dict[str, Any] = {}
    if search:
        query.update(docs.regex_filter(("name", "code"), search))
    if status:
        query["status"] = status
    items, total = docs.find_page(COLLECTION, query, page=page, limit=limit, sort=[("name", 1)])
    return [_expand_kam(item) for item in items], total


def get_district(district_id: Any, expand_kam: bool = False) -> dict | None:
    district = docs.find_by_id(COLLECTION, district_id)
    return _expand_kam(district) if expand_kam else district


def code_taken(code: str, exclude_id: Optional[Any] = None) -> bool:
    query: dict[str, Any] = {"code": code.strip().upper()}
    if exclude_id is not None:
        query["_id"] = {"$ne": docs.to_object_id(exclude_id)}
    return docs.collection(COLLECTION).find_one(query, {"_id": 1}) is not None


def create_district(data: dict[str, Any]) -> dict | None:
    document = DistrictDocument.model_validate(data).to_document()
    created = docs.insert_document(COLLECTION, document)
    return get_district(created["_id"], expand_kam=True)


def update_district(district_id: Any, changes: dict[str, Any]) -> dict | None:
    if docs.update_document(COLLECTION, district_id, changes) is None:
        return None
    return get_district(district_id, expand_kam=True)


def set_district_status(district_id: Any, status: str) -> dict | None:
    if docs.update_status(COLLECTION, district_id, status) is None:
        return None
    return get_district(district_id, expand_kam=True)


def active_city_directory() -> list[dict]:
    """Flatten the active cities of every active district."""
    districts = docs.collection(COLLECTION).find(
        {"status": "active"}, {"name": 1, "code": 1, "cities": 1}
    ).sort([("name", 1)])
    directory: list[dict] = []
    for district in districts:
        for city in district.get("cities") or []:
            if city.get("status", "active") != "active":
                continue
            directory.append(
                {
                    "cityName": city.get("name"),
                    "districtId": district["_id"],
                    "districtName": district.get("name"),
                    "districtCode": district.get("code"),
                    "distributorChannel": city.get("distributor_channel"),
                    "distributorId": city.get("distributor_id"),
                }
            )
    return directory


def expand_city_distributors(cities: list[dict]) -> list[dict]:
    for city in cities:
        docs.populate(city, "distributor_id", "distributors", DISTRIBUTOR_SUMMARY)
    return cities


def find_city(district: dict, city_id: Any) -> dict | None:
    if not docs.is_valid_object_id(city_id):
        return None
    key = docs.to_object_id(city_id)
    return next((city for city in district.get("cities") or [] if city.get("_id") == key), None)


def city_name_taken(district: dict, name: str, exclude_id: Optional[Any] = None) -> bool:
    wanted = name.strip().lower()
    for city in district.get("cities") or []:
        if exclude_id is not None and city.get("_id") == exclude_id:
            continue
        if city.get("status", "active") == "active" and str(city.get("name", "")).lower() == wanted:
            return True
    return False


def add_city(district_id: Any, data: dict[str, Any]) -> list[dict]:
    city = DistrictCity.model_validate(data).to_document()
    docs.collection(COLLECTION).update_one(
        {"_id": docs.to_object_id(district_id)},
        {"$push": {"cities": city}, "$set": {"updated_at": docs.utcnow()}},
    )
    return district_cities(district_id)


def update_city(district_id: Any, city_id: Any, changes: dict[str, Any]) -> list[dict]:
    cities = district_cities(district_id)
    key = docs.to_object_id(city_id)
    for city in cities:
        if city.get("_id") == key:
            city.update(changes)
    if changes:
        docs.update_document(COLLECTION, district_id, {"cities": cities})
    return cities


def district_cities(district_id: Any) -> list[dict]:
    district = docs.find_by_id(COLLECTION, district_id, fields=["cities"])
    return list((district or {}).get("cities") or [])


def cities_served_by(distributor_id: Any) -> list[dict]:
    """Cities, across districts, that a distributor is assigned to."""
    key = docs.as_reference(distributor_id)
    assigned: list[dict] = []
    for district in docs.collection(COLLECTION).find({"cities.distributor_id": key}, {"name": 1, "code": 1, "cities": 1}):
        for city in district.get("cities") or []:
            if city.get("distributor_id") == key and city.get("status", "active") == "active":
                assigned.append(
                    {
                        "cityName": city.get("name"),
                        "districtName": district.get("name"),
                        "districtCode": district.get("code"),
                    }
                )
    return assigned
