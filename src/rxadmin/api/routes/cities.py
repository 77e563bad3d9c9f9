"""City endpoints: the cross-district directory and standalone cities."""

from fastapi import APIRouter, Depends, Query, status

from ...auth import hash_password, require_auth
from ...data import cities as cities_repo
from ...data import distributors as distributors_repo
from ...data import districts as districts_repo
from ...models.domain import ACTIVE, DISTRIBUTOR_CHANNELS, INACTIVE, SUPER_ADMIN, AuthIdentity
from ...schemas.cities import CityPayload
from ..params import Page, PageParams, json_body, not_found, object_id, one_of
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/cities", tags=["cities"])

admin_only = require_auth(SUPER_ADMIN)
city_body = json_body(CityPayload, admin_only)

INVALID_ID = "Invalid city ID"
DUPLICATE_NAME = "City with this name already exists"


@router.get("/all")
@guarded("Failed to fetch cities")
def list_all_cities(identity: AuthIdentity = Depends(require_auth())):
    return success_response({"cities": districts_repo.active_city_directory()})


@router.get("")
@guarded("Failed to fetch cities")
def list_cities(
    search: str = Query(default=""),
    status_filter: str = Query(default="", alias="status"),
    distributor_channel: str = Query(default=""),
    page: Page = Depends(PageParams(50)),
    identity: AuthIdentity = Depends(require_auth()),
):
    cities, total = cities_repo.list_cities(
        search=search,
        status=status_filter,
        distributor_channel=distributor_channel,
        page=page.page,
        limit=page.limit,
    )
    return success_response({"cities": cities, "pagination": page.envelope(total)})


@router.post("")
@guarded("Failed to create city")
def create_city(payload: CityPayload = Depends(city_body), identity: AuthIdentity = Depends(admin_only)):
    if not payload.name or not payload.distributor_channel:
        raise ApiError("City name and distributor channel are required")
    channel = one_of(
        payload.distributor_channel,
        DISTRIBUTOR_CHANNELS,
        'distributor_channel must be either "pillbox" or "other"',
    )
    if cities_repo.name_taken(payload.name):
        raise ApiError(DUPLICATE_NAME)

    distributor = None
    if channel == "other":
        if not (
            payload.distributor_name
            and payload.distributor_email
            and payload.distributor_phone
            and payload.distributor_password
        ):
            raise ApiError('Distributor details are required for "Other" channel')
        if distributors_repo.email_taken(payload.distributor_email):
            raise ApiError("Distributor with this email already exists")
        distributor = distributors_repo.create_distributor(
            {
                "name": payload.distributor_name,
                "email": payload.distributor_email,
                "phone": payload.distributor_phone,
                "password": hash_password(payload.distributor_password),
                "status": ACTIVE,
            }
        )

    city = cities_repo.create_city(
        {
            "name": payload.name,
            "distributor_channel": channel,
            "distributor_id": distributor["_id"] if distributor else None,
            "status": ACTIVE,
        }
    )
    if distributor is not None:
        distributors_repo.update_distributor(distributor["_id"], {"city_id": city["_id"]})
    return success_response({"city": cities_repo.get_city(city["_id"])}, "City created successfully", status.HTTP_201_CREATED)


@router.get("/{city_id}")
@guarded("Failed to fetch city")
def get_city(city_id: str, identity: AuthIdentity = Depends(require_auth())):
    key = object_id(city_id, INVALID_ID)
    city = cities_repo.get_city(key)
    if city is None:
        raise not_found("City")
    return success_response({"city": city})


@router.put("/{city_id}")
@guarded("Failed to update city")
def update_city(city_id: str, payload: CityPayload = Depends(city_body), identity: AuthIdentity = Depends(admin_only)):
    key = object_id(city_id, INVALID_ID)
    if not payload.name:
        raise ApiError("City name is required")
    if cities_repo.name_taken(payload.name, exclude_id=key):
        raise ApiError(DUPLICATE_NAME)
    city = cities_repo.update_city(key, {"name": payload.name.strip()})
    if city is None:
        raise not_found("City")
    return success_response({"city": city}, "City updated successfully")


@router.delete("/{city_id}")
@guarded("Failed to delete city")
def delete_city(city_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(city_id, INVALID_ID)
    city = cities_repo.get_city(key)
    if city is None:
        raise not_found("City")
    distributor = city.get("distributor_id")
    if isinstance(distributor, dict):
        distributors_repo.set_distributor_status(distributor["_id"], INACTIVE)
    cities_repo.update_city(key, {"status": INACTIVE})
    return success_response(None, "City deleted successfully")
