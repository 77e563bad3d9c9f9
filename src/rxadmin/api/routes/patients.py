"""Patient endpoints (super admin only)."""

from fastapi import APIRouter, Depends, Query

from ...auth import require_auth
from ...data import patients as patients_repo
from ...models.domain import SUPER_ADMIN, AuthIdentity
from ..params import Page, PageParams, not_found, object_id
from ..responses import guarded, success_response

router = APIRouter(prefix="/patients", tags=["patients"])

admin_only = require_auth(SUPER_ADMIN)


@router.get("")
@guarded("Failed to fetch patients")
def list_patients(
    search: str = Query(default=""),
    gender: str = Query(default=""),
    city: str = Query(default=""),
    page: Page = Depends(PageParams(20)),
    identity: AuthIdentity = Depends(admin_only),
):
    patients, total = patients_repo.list_patients(
        search=search, gender=gender, city=city, page=page.page, limit=page.limit
    )
    return success_response({"patients": patients, "pagination": page.envelope(total)})


@router.get("/{patient_id}")
@guarded("Failed to fetch patient")
def get_patient(patient_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(patient_id, "Invalid patient ID")
    overview = patients_repo.get_patient_overview(key)
    if overview is None:
        raise not_found("Patient")
    return success_response(overview)
