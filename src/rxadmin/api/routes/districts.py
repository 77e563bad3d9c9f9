"""District endpoints, including the cities embedded in each district."""

from fastapi import APIRouter, Depends, Query, status

from ...auth import require_auth
from ...data import distributors as distributors_repo
from ...data import districts as districts_repo
from ...data import teams as teams_repo
from ...data import users as users_repo
from ...models.domain import ACTIVE, DISTRIBUTOR_CHANNELS, INACTIVE, SUPER_ADMIN, AuthIdentity
from ...schemas.common import StatusUpdate
from ...schemas.districts import DistrictCityPayload, DistrictPayload
from ..params import (
    Page,
    PageParams,
    json_body,
    not_found,
    object_id,
    one_of,
    optional_object_id,
    record_status,
    toggled_message,
)
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/districts", tags=["districts"])

admin_only = require_auth(SUPER_ADMIN)
district_body = json_body(DistrictPayload, admin_only)
status_body = json_body(StatusUpdate, admin_only)
city_body = json_body(DistrictCityPayload, admin_only)

INVALID_ID = "Invalid district ID"
INVALID_CITY_ID = "Invalid city ID"
INVALID_CHANNEL = 'distributor_channel must be either "pillbox" or "other"'


@router.get("")
@guarded("Failed to fetch districts")
def list_districts(
    search: str = Query(default=""),
    status_filter: str = Query(default="", alias="status"),
    page: Page = Depends(PageParams(50)),
    identity: AuthIdentity = Depends(require_auth()),
):
    districts, total = districts_repo.list_districts(
        search=search, status=status_filter, page=page.page, limit=page.limit
    )
    return success_response({"districts": districts, "pagination": page.envelope(total)})


@router.post("")
@guarded("Failed to create district")
def create_district(payload: DistrictPayload = Depends(district_body), identity: AuthIdentity = Depends(admin_only)):
    if not payload.name or not payload.code:
        raise ApiError("Name and code are required")
    kam_id = optional_object_id(payload.kam_id, "Invalid KAM ID")
    if payload.status is not None:
        record_status(payload.status)
    if districts_repo.code_taken(payload.code):
        raise ApiError("District code already exists")

    district = districts_repo.create_district(
        {
            "name": payload.name,
            "code": payload.code,
            "kam_id": kam_id,
            "status": payload.status or ACTIVE,
        }
    )
    return success_response({"district": district}, "District created successfully", status.HTTP_201_CREATED)


@router.get("/{district_id}")
@guarded("Failed to fetch district")
def get_district(district_id: str, identity: AuthIdentity = Depends(require_auth())):
    key = object_id(district_id, INVALID_ID)
    district = districts_repo.get_district(key, expand_kam=True)
    if district is None:
        raise not_found("District")
    return success_response({"district": district})


@router.put("/{district_id}")
@guarded("Failed to update district")
def update_district(
    district_id: str,
    payload: DistrictPayload = Depends(district_body),
    identity: AuthIdentity = Depends(admin_only),
):
    key = object_id(district_id, INVALID_ID)
    current = districts_repo.get_district(key)
    if current is None:
        raise not_found("District")

    changes: dict = {}
    if payload.code and payload.code.strip().upper() != current.get("code"):
        if districts_repo.code_taken(payload.code, exclude_id=key):
            raise ApiError("District code already exists")
        changes["code"] = payload.code.strip().upper()
    if payload.name:
        changes["name"] = payload.name.strip()
    if "kam_id" in payload.provided():
        changes["kam_id"] = optional_object_id(payload.kam_id, "Invalid KAM ID")
    if payload.status:
        changes["status"] = record_status(payload.status)

    district = districts_repo.update_district(key, changes)
    return success_response({"district": district}, "District updated successfully")


@router.delete("/{district_id}")
@guarded("Failed to delete district")
def delete_district(district_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(district_id, INVALID_ID)
    if districts_repo.get_district(key) is None:
        raise not_found("District")
    teams = teams_repo.count_in_district(key)
    if teams:
        raise ApiError(f"Cannot delete district. Please delete all {teams} assigned team(s) first.")
    kams = users_repo.count_kams_in_district(key)
    if kams:
        raise ApiError(f"Cannot delete district. Please delete all {kams} assigned KAM(s) first.")
    districts_repo.set_district_status(key, INACTIVE)
    return success_response(None, "District deleted successfully")


@router.patch("/{district_id}/status")
@guarded("Failed to update district status")
def update_district_status(
    district_id: str,
    payload: StatusUpdate = Depends(status_body),
    identity: AuthIdentity = Depends(admin_only),
):
    key = object_id(district_id, INVALID_ID)
    new_status = record_status(payload.status)
    district = districts_repo.set_district_status(key, new_status)
    if district is None:
        raise not_found("District")
    return success_response({"district": district}, toggled_message("District", new_status))


def _assignable_distributor(distributor_id):
    distributor = distributors_repo.get_distributor(distributor_id)
    if distributor is None:
        raise not_found("Distributor")
    if distributor.get("status") != ACTIVE:
        raise ApiError("Cannot assign an inactive distributor")
    return distributor


@router.get("/{district_id}/cities")
@guarded("Failed to fetch cities")
def list_district_cities(district_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(district_id, INVALID_ID)
    district = districts_repo.get_district(key)
    if district is None:
        raise not_found("District")
    return success_response(
        {
            "districtId": district["_id"],
            "districtName": district.get("name"),
            "cities": districts_repo.expand_city_distributors(list(district.get("cities") or [])),
        }
    )


@router.post("/{district_id}/cities")
@guarded("Failed to add city")
def add_district_city(
    district_id: str,
    payload: DistrictCityPayload = Depends(city_body),
    identity: AuthIdentity = Depends(admin_only),
):
    key = object_id(district_id, INVALID_ID)
    if not payload.name or not payload.distributor_channel:
        raise ApiError("City name and distributor_channel are required")
    channel = one_of(payload.distributor_channel, DISTRIBUTOR_CHANNELS, INVALID_CHANNEL)
    distributor_id = optional_object_id(payload.distributor_id, "Invalid distributor ID")
    if channel == "other" and distributor_id is None:
        raise ApiError('distributor_id is required for "other" distributor channel')
    if distributor_id is not None:
        _assignable_distributor(distributor_id)

    district = districts_repo.get_district(key)
    if district is None:
        raise not_found("District")
    if districts_repo.city_name_taken(district, payload.name):
        raise ApiError("City already exists in this district")

    cities = districts_repo.add_city(
        key,
        {
            "name": payload.name,
            "distributor_channel": channel,
            "distributor_id": distributor_id if channel == "other" else None,
        },
    )
    return success_response({"cities": cities}, "City added successfully", status.HTTP_201_CREATED)


@router.put("/{district_id}/cities/{city_id}")
@guarded("Failed to update city")
def update_district_city(
    district_id: str,
    city_id: str,
    payload: DistrictCityPayload = Depends(city_body),
    identity: AuthIdentity = Depends(admin_only),
):
    key = object_id(district_id, INVALID_ID)
    city_key = object_id(city_id, INVALID_CITY_ID)
    district = districts_repo.get_district(key)
    if district is None:
        raise not_found("District")
    city = districts_repo.find_city(district, city_key)
    if city is None:
        raise not_found("City")

    changes: dict = {}
    if payload.distributor_channel:
        changes["distributor_channel"] = one_of(payload.distributor_channel, DISTRIBUTOR_CHANNELS, INVALID_CHANNEL)
    channel = changes.get("distributor_channel", city.get("distributor_channel"))
    if "distributor_id" in payload.provided():
        distributor_id = optional_object_id(payload.distributor_id, "Invalid distributor ID")
        if distributor_id is not None and channel == "other":
            _assignable_distributor(distributor_id)
        changes["distributor_id"] = distributor_id
    if channel == "pillbox":
        changes["distributor_id"] = None
    elif changes.get("distributor_id", city.get("distributor_id")) is None:
        raise ApiError('distributor_id is required for "other" distributor channel')
    if payload.name:
        if districts_repo.city_name_taken(district, payload.name, exclude_id=city_key):
            raise ApiError("City already exists in this district")
        changes["name"] = payload.name.strip()

    cities = districts_repo.update_city(key, city_key, changes)
    return success_response({"cities": cities}, "City updated successfully")


@router.delete("/{district_id}/cities/{city_id}")
@guarded("Failed to delete city")
def delete_district_city(district_id: str, city_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(district_id, INVALID_ID)
    city_key = object_id(city_id, INVALID_CITY_ID)
    district = districts_repo.get_district(key)
    if district is None:
        raise not_found("District")
    if districts_repo.find_city(district, city_key) is None:
        raise not_found("City")
    cities = districts_repo.update_city(key, city_key, {"status": INACTIVE})
    return success_response({"cities": cities}, "City deleted successfully")
