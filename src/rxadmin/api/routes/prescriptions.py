"""Prescription endpoints (super admin only)."""

from fastapi import APIRouter, Depends, Query

from ...auth import require_auth
from ...data import prescriptions as prescriptions_repo
from ...models.domain import SUPER_ADMIN, AuthIdentity
from ..params import Page, PageParams, not_found, object_id
from ..responses import guarded, success_response

router = APIRouter(prefix="/prescriptions", tags=["prescriptions"])

admin_only = require_auth(SUPER_ADMIN)


@router.get("")
@guarded("Failed to fetch prescriptions")
def list_prescriptions(
    search: str = Query(default=""),
    order_status: str = Query(default=""),
    priority: str = Query(default=""),
    doctor_id: str = Query(default=""),
    district_id: str = Query(default=""),
    page: Page = Depends(PageParams(20)),
    identity: AuthIdentity = Depends(admin_only),
):
    if doctor_id:
        object_id(doctor_id, "Invalid doctor ID")
    if district_id:
        object_id(district_id, "Invalid district ID")
    prescriptions, total = prescriptions_repo.list_prescriptions(
        search=search,
        order_status=order_status,
        priority=priority,
        doctor_id=doctor_id,
        district_id=district_id,
        page=page.page,
        limit=page.limit,
    )
    return success_response({"prescriptions": prescriptions, "pagination": page.envelope(total)})


@router.get("/{prescription_id}")
@guarded("Failed to fetch prescription")
def get_prescription(prescription_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(prescription_id, "Invalid prescription ID")
    detail = prescriptions_repo.get_prescription_detail(key)
    if detail is None:
        raise not_found("Prescription")
    return success_response(detail)
