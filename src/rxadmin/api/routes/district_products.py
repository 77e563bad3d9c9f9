"""Deprecated district product endpoints.

Products are available to every doctor regardless of district. The routes
stay mounted for older clients: reads are always empty and toggles are
validated and acknowledged without being stored.
"""

from fastapi import APIRouter, Depends

from ...auth import require_auth
from ...data import products as products_repo
from ...models.domain import KAM, AuthIdentity
from ...schemas.documents import DistrictProductDocument
from ...schemas.products import DistrictProductToggle
from ..params import json_body, not_found, object_id, record_status
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/district-products", tags=["district-products"])

kam_only = require_auth(KAM)
toggle_body = json_body(DistrictProductToggle, kam_only)


@router.get("")
@guarded("Failed to fetch district products")
def list_district_products(identity: AuthIdentity = Depends(kam_only)):
    return success_response({"districtProducts": []})


@router.post("/toggle")
@guarded("Failed to update product availability")
def toggle_district_product(
    payload: DistrictProductToggle = Depends(toggle_body),
    identity: AuthIdentity = Depends(kam_only),
):
    if not identity.assigned_district:
        raise ApiError("No district assigned to this KAM")
    if not payload.product_id:
        raise ApiError("Product ID is required")
    product_key = object_id(payload.product_id, "Invalid product ID")
    new_status = record_status(payload.status, "Valid status is required (active or inactive)")
    if products_repo.get_product(product_key) is None:
        raise not_found("Product")

    acknowledged = DistrictProductDocument(
        district_id=identity.assigned_district,
        product_id=product_key,
        assigned_by=identity.user_id,
        status=new_status,
    ).to_document()
    return success_response(
        {"districtProduct": acknowledged},
        f"Product {'enabled' if new_status == 'active' else 'disabled'} for your district",
    )
