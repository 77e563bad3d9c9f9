"""Distributor administration endpoints (super admin only)."""

from fastapi import APIRouter, Depends, Query, status

from ...auth import hash_password, require_auth
from ...data import cities as cities_repo
from ...data import distributors as distributors_repo
from ...data import districts as districts_repo
from ...models.domain import ACTIVE, INACTIVE, SUPER_ADMIN, AuthIdentity
from ...schemas.common import StatusUpdate
from ...schemas.distributors import DistributorPayload
from ..params import Page, PageParams, json_body, not_found, object_id, record_status, toggled_message
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/distributors", tags=["distributors"])

admin_only = require_auth(SUPER_ADMIN)
distributor_body = json_body(DistributorPayload, admin_only)
status_body = json_body(StatusUpdate, admin_only)

INVALID_ID = "Invalid distributor ID"


@router.get("")
@guarded("Failed to fetch distributors")
def list_distributors(
    search: str = Query(default=""),
    status_filter: str = Query(default="", alias="status"),
    page: Page = Depends(PageParams(10)),
    identity: AuthIdentity = Depends(admin_only),
):
    distributors, total = distributors_repo.list_distributors(
        search=search, status=status_filter, page=page.page, limit=page.limit
    )
    return success_response({"distributors": distributors, "pagination": page.envelope(total)})


@router.post("")
@guarded("Failed to create distributor")
def create_distributor(
    payload: DistributorPayload = Depends(distributor_body),
    identity: AuthIdentity = Depends(admin_only),
):
    if not payload.email or not payload.password or not payload.name or not payload.phone:
        raise ApiError("Email, password, name, and phone are required")
    if payload.status is not None:
        record_status(payload.status)
    if distributors_repo.email_taken(payload.email):
        raise ApiError("Email already exists")
    distributor = distributors_repo.create_distributor(
        {
            "email": payload.email,
            "password": hash_password(payload.password),
            "name": payload.name,
            "phone": payload.phone,
            "status": payload.status or ACTIVE,
        }
    )
    return success_response({"distributor": distributor}, "Distributor created successfully", status.HTTP_201_CREATED)


@router.get("/{distributor_id}")
@guarded("Failed to fetch distributor")
def get_distributor(distributor_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(distributor_id, INVALID_ID)
    distributor = distributors_repo.get_distributor(key)
    if distributor is None:
        raise not_found("Distributor")
    return success_response(
        {"distributor": distributor, "assignedCities": districts_repo.cities_served_by(key)}
    )


@router.put("/{distributor_id}")
@guarded("Failed to update distributor")
def update_distributor(
    distributor_id: str,
    payload: DistributorPayload = Depends(distributor_body),
    identity: AuthIdentity = Depends(admin_only),
):
    key = object_id(distributor_id, INVALID_ID)
    current = distributors_repo.get_distributor(key)
    if current is None:
        raise not_found("Distributor")

    changes: dict = {}
    if payload.email and payload.email.strip().lower() != current["email"]:
        if distributors_repo.email_taken(payload.email, exclude_id=key):
            raise ApiError("Email already exists")
        changes["email"] = payload.email.strip().lower()
    if payload.name:
        changes["name"] = payload.name.strip()
    if payload.phone:
        changes["phone"] = payload.phone.strip()
    if payload.password:
        changes["password"] = hash_password(payload.password)

    distributor = distributors_repo.update_distributor(key, changes)
    return success_response({"distributor": distributor}, "Distributor updated successfully")


@router.delete("/{distributor_id}")
@guarded("Failed to delete distributor")
def delete_distributor(distributor_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(distributor_id, INVALID_ID)
    if distributors_repo.get_distributor(key) is None:
        raise not_found("Distributor")
    if districts_repo.cities_served_by(key) or cities_repo.find_by_distributor(key) is not None:
        raise ApiError("Cannot delete distributor. They are assigned to one or more cities.")
    distributors_repo.set_distributor_status(key, INACTIVE)
    return success_response(None, "Distributor deleted successfully")


@router.patch("/{distributor_id}/status")
@guarded("Failed to update distributor status")
def update_distributor_status(
    distributor_id: str,
    payload: StatusUpdate = Depends(status_body),
    identity: AuthIdentity = Depends(admin_only),
):
    key = object_id(distributor_id, INVALID_ID)
    new_status = record_status(payload.status, "Valid status (active or inactive) is required")
    distributor = distributors_repo.set_distributor_status(key, new_status)
    if distributor is None:
        raise not_found("Distributor")
    return success_response({"distributor": distributor}, toggled_message("Distributor", new_status))
