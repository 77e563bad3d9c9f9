"""Team endpoints and team product assignments."""

from fastapi import APIRouter, Depends, Query, status

from ...auth import require_auth
from ...data import teams as teams_repo
from ...models.domain import ACTIVE, INACTIVE, KAM, SUPER_ADMIN, AuthIdentity
from ...persistence.documents import is_valid_object_id
from ...schemas.teams import TeamPayload, TeamProductsUpdate
from ..params import Page, PageParams, json_body, not_found, object_id, optional_object_id, record_status
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/teams", tags=["teams"])

admin_only = require_auth(SUPER_ADMIN)
team_body = json_body(TeamPayload, admin_only)
team_products_body = json_body(TeamProductsUpdate, admin_only)

INVALID_ID = "Invalid team ID"


@router.get("")
@guarded("Failed to fetch teams")
def list_teams(
    search: str = Query(default=""),
    status_filter: str = Query(default="", alias="status"),
    page: Page = Depends(PageParams(50)),
    identity: AuthIdentity = Depends(require_auth()),
):
    teams, total = teams_repo.list_teams(search=search, status=status_filter, page=page.page, limit=page.limit)
    return success_response({"teams": teams, "pagination": page.envelope(total)})


@router.post("")
@guarded("Failed to create team")
def create_team(payload: TeamPayload = Depends(team_body), identity: AuthIdentity = Depends(admin_only)):
    if not payload.name:
        raise ApiError("Name is required")
    district_id = optional_object_id(payload.district_id, "Invalid district ID")
    if payload.status is not None:
        record_status(payload.status)
    team = teams_repo.create_team(
        {
            "name": payload.name,
            "description": payload.description or "",
            "district_id": district_id,
            "status": payload.status or ACTIVE,
        }
    )
    return success_response({"team": team}, "Team created successfully", status.HTTP_201_CREATED)


@router.get("/by-district/{district_id}")
@guarded("Failed to fetch teams")
def list_teams_by_district(district_id: str, identity: AuthIdentity = Depends(require_auth())):
    key = object_id(district_id, "Invalid district ID")
    return success_response({"teams": teams_repo.teams_in_district(key)})


@router.get("/{team_id}")
@guarded("Failed to fetch team")
def get_team(team_id: str, identity: AuthIdentity = Depends(require_auth())):
    key = object_id(team_id, INVALID_ID)
    team = teams_repo.get_team_detail(key)
    if team is None:
        raise not_found("Team")
    return success_response({"team": team})


@router.put("/{team_id}")
@guarded("Failed to update team")
def update_team(team_id: str, payload: TeamPayload = Depends(team_body), identity: AuthIdentity = Depends(admin_only)):
    key = object_id(team_id, INVALID_ID)
    if teams_repo.get_team(key) is None:
        raise not_found("Team")
    sent = payload.provided()
    changes: dict = {}
    if payload.name:
        changes["name"] = payload.name.strip()
    if "description" in sent:
        changes["description"] = (payload.description or "").strip()
    if "district_id" in sent:
        changes["district_id"] = optional_object_id(payload.district_id, "Invalid district ID")
    if payload.status:
        changes["status"] = record_status(payload.status)
    team = teams_repo.update_team(key, changes)
    return success_response({"team": team}, "Team updated successfully")


@router.delete("/{team_id}")
@guarded("Failed to delete team")
def delete_team(team_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(team_id, INVALID_ID)
    if teams_repo.get_team(key) is None:
        raise not_found("Team")
    doctors = teams_repo.count_doctors(key)
    if doctors:
        raise ApiError(f"Cannot delete team. Please reassign or delete all {doctors} assigned doctor(s) first.")
    teams_repo.update_team(key, {"status": INACTIVE})
    return success_response(None, "Team deleted successfully")


@router.get("/{team_id}/products")
@guarded("Failed to fetch team products")
def list_team_products(team_id: str, identity: AuthIdentity = Depends(require_auth(SUPER_ADMIN, KAM))):
    key = object_id(team_id, INVALID_ID)
    if teams_repo.get_team(key) is None:
        raise not_found("Team")
    return success_response(teams_repo.team_products(key))


@router.post("/{team_id}/products")
@guarded("Failed to assign products to team")
def assign_team_products(
    team_id: str,
    payload: TeamProductsUpdate = Depends(team_products_body),
    identity: AuthIdentity = Depends(admin_only),
):
    key = object_id(team_id, INVALID_ID)
    if not isinstance(payload.productIds, list):
        raise ApiError("productIds must be an array")
    if not all(is_valid_object_id(value) for value in payload.productIds):
        raise ApiError("Invalid product ID")
    if teams_repo.get_team(key) is None:
        raise not_found("Team")
    if teams_repo.missing_products(payload.productIds):
        raise not_found("Product")
    assigned = teams_repo.replace_team_products(key, payload.productIds, assigned_by=identity.user_id)
    return success_response(
        {"message": "Products assigned successfully", "assignedCount": assigned},
        "Products updated successfully",
    )
