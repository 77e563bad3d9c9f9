"""Doctor endpoints; KAM callers are confined to their own district."""

from fastapi import APIRouter, Depends, Query, status

from ...auth import hash_password, require_auth
from ...data import doctors as doctors_repo
from ...models.domain import ACTIVE, INACTIVE, AuthIdentity
from ...schemas.common import StatusUpdate
from ...schemas.doctors import DoctorPayload
from ..params import (
    Page,
    PageParams,
    forbidden,
    json_body,
    not_found,
    object_id,
    optional_object_id,
    record_status,
    toggled_message,
)
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/doctors", tags=["doctors"])

authenticated = require_auth()
doctor_body = json_body(DoctorPayload, authenticated)
status_body = json_body(StatusUpdate, authenticated)

INVALID_ID = "Invalid doctor ID"
NO_ACCESS = "You do not have access to this doctor"


def _scoped_doctor(doctor_id, identity: AuthIdentity) -> dict:
    """Load a doctor and enforce KAM district scoping."""
    doctor = doctors_repo.get_doctor(doctor_id, expand=False)
    if doctor is None:
        raise not_found("Doctor")
    if identity.is_kam:
        district = identity.assigned_district
        if not district or district != str(doctor.get("district_id")):
            raise forbidden(NO_ACCESS)
    return doctor


@router.get("")
@guarded("Failed to fetch doctors")
def list_doctors(
    search: str = Query(default=""),
    district_id: str = Query(default=""),
    status_filter: str = Query(default="", alias="status"),
    specialty: str = Query(default=""),
    page: Page = Depends(PageParams(10)),
    identity: AuthIdentity = Depends(authenticated),
):
    if district_id:
        object_id(district_id, "Invalid district ID")
    if identity.is_kam and identity.assigned_district:
        district_id = identity.assigned_district
    doctors, total = doctors_repo.list_doctors(
        district_id=district_id or None,
        search=search,
        status=status_filter,
        specialty=specialty,
        page=page.page,
        limit=page.limit,
    )
    return success_response({"doctors": doctors, "pagination": page.envelope(total)})


@router.post("")
@guarded("Failed to create doctor")
def create_doctor(payload: DoctorPayload = Depends(doctor_body), identity: AuthIdentity = Depends(authenticated)):
    district_id = payload.district_id
    if identity.is_kam:
        if not identity.assigned_district:
            raise forbidden("You are not assigned to any district")
        district_id = identity.assigned_district
    required = (payload.email, payload.password, payload.name, payload.phone, district_id, payload.pmdc_number, payload.specialty)
    if not all(required):
        raise ApiError("All fields are required")
    district_key = object_id(district_id, "Invalid district ID")
    team_key = optional_object_id(payload.team_id, "Invalid team ID")
    if doctors_repo.email_taken(payload.email):
        raise ApiError("Email already exists")

    doctor = doctors_repo.create_doctor(
        {
            "email": payload.email,
            "password": hash_password(payload.password),
            "name": payload.name,
            "phone": payload.phone,
            "district_id": district_key,
            "kam_id": identity.user_id if identity.is_kam else None,
            "team_id": team_key,
            "pmdc_number": payload.pmdc_number,
            "specialty": payload.specialty,
            "status": ACTIVE,
        }
    )
    return success_response({"doctor": doctor}, "Doctor created successfully", status.HTTP_201_CREATED)


@router.get("/{doctor_id}")
@guarded("Failed to fetch doctor")
def get_doctor(doctor_id: str, identity: AuthIdentity = Depends(authenticated)):
    key = object_id(doctor_id, INVALID_ID)
    _scoped_doctor(key, identity)
    return success_response({"doctor": doctors_repo.get_doctor(key)})


@router.put("/{doctor_id}")
@guarded("Failed to update doctor")
def update_doctor(
    doctor_id: str,
    payload: DoctorPayload = Depends(doctor_body),
    identity: AuthIdentity = Depends(authenticated),
):
    key = object_id(doctor_id, INVALID_ID)
    current = _scoped_doctor(key, identity)
    if identity.is_kam and payload.district_id and payload.district_id != str(current.get("district_id")):
        raise forbidden("You cannot change doctor district")

    sent = payload.provided()
    changes: dict = {}
    if payload.email and payload.email.strip().lower() != current["email"]:
        if doctors_repo.email_taken(payload.email, exclude_id=key):
            raise ApiError("Email already exists")
        changes["email"] = payload.email.strip().lower()
    for field in ("name", "phone", "pmdc_number", "specialty"):
        value = getattr(payload, field)
        if value:
            changes[field] = value.strip()
    if payload.district_id:
        changes["district_id"] = object_id(payload.district_id, "Invalid district ID")
    if "kam_id" in sent:
        changes["kam_id"] = optional_object_id(payload.kam_id, "Invalid KAM ID")
    if "team_id" in sent:
        changes["team_id"] = optional_object_id(payload.team_id, "Invalid team ID")
    if payload.status:
        changes["status"] = record_status(payload.status)
    if payload.password:
        changes["password"] = hash_password(payload.password)

    doctor = doctors_repo.update_doctor(key, changes)
    return success_response({"doctor": doctor}, "Doctor updated successfully")


@router.delete("/{doctor_id}")
@guarded("Failed to delete doctor")
def delete_doctor(doctor_id: str, identity: AuthIdentity = Depends(authenticated)):
    key = object_id(doctor_id, INVALID_ID)
    _scoped_doctor(key, identity)
    doctors_repo.set_doctor_status(key, INACTIVE)
    return success_response(None, "Doctor deleted successfully")


@router.patch("/{doctor_id}/status")
@guarded("Failed to update doctor status")
def update_doctor_status(
    doctor_id: str,
    payload: StatusUpdate = Depends(status_body),
    identity: AuthIdentity = Depends(authenticated),
):
    key = object_id(doctor_id, INVALID_ID)
    new_status = record_status(payload.status)
    _scoped_doctor(key, identity)
    doctor = doctors_repo.set_doctor_status(key, new_status)
    return success_response({"doctor": doctor}, toggled_message("Doctor", new_status))


@router.get("/{doctor_id}/stats")
@guarded("Failed to fetch doctor statistics")
def get_doctor_stats(doctor_id: str, identity: AuthIdentity = Depends(authenticated)):
    key = object_id(doctor_id, INVALID_ID)
    _scoped_doctor(key, identity)
    return success_response(doctors_repo.doctor_stats(key))
