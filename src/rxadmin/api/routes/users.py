"""User administration endpoints (super admin only)."""

from fastapi import APIRouter, Depends, Query, status

from ...auth import hash_password, require_auth
from ...data import users as users_repo
from ...models.domain import KAM, SUPER_ADMIN, USER_ROLES, AuthIdentity
from ...schemas.common import StatusUpdate
from ...schemas.users import UserPayload
from ..params import (
    Page,
    PageParams,
    json_body,
    not_found,
    object_id,
    optional_object_id,
    record_status,
    toggled_message,
)
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/users", tags=["users"])

admin_only = require_auth(SUPER_ADMIN)
user_body = json_body(UserPayload, admin_only)
status_body = json_body(StatusUpdate, admin_only)

INVALID_ID = "Invalid user ID"
INVALID_ROLE = "Invalid role. Must be super_admin or kam"


@router.get("")
@guarded("Failed to fetch users")
def list_users(
    search: str = Query(default=""),
    role: str = Query(default=""),
    status_filter: str = Query(default="", alias="status"),
    page: Page = Depends(PageParams(10)),
    identity: AuthIdentity = Depends(admin_only),
):
    users, total = users_repo.list_users(
        search=search, role=role, status=status_filter, page=page.page, limit=page.limit
    )
    return success_response({"users": users, "pagination": page.envelope(total)})


@router.post("")
@guarded("Failed to create user")
def create_user(payload: UserPayload = Depends(user_body), identity: AuthIdentity = Depends(admin_only)):
    if not payload.email or not payload.password or not payload.name or not payload.role:
        raise ApiError("Email, password, name, and role are required")
    if payload.role not in USER_ROLES:
        raise ApiError(INVALID_ROLE)
    if payload.role == KAM and not payload.district_id:
        raise ApiError("District is required for KAM role")
    district_id = optional_object_id(payload.district_id, "Invalid district ID")
    team_id = optional_object_id(payload.team_id, "Invalid team ID")
    if payload.status is not None:
        record_status(payload.status)
    if users_repo.email_taken(payload.email):
        raise ApiError("Email already exists")

    user = users_repo.create_user(
        {
            "email": payload.email,
            "password": hash_password(payload.password),
            "name": payload.name,
            "role": payload.role,
            "district_id": district_id if payload.role == KAM else None,
            "team_id": team_id,
            "status": payload.status or "active",
        }
    )
    return success_response({"user": user}, "User created successfully", status.HTTP_201_CREATED)


@router.get("/{user_id}")
@guarded("Failed to fetch user")
def get_user(user_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(user_id, INVALID_ID)
    user = users_repo.get_user(key)
    if user is None:
        raise not_found("User")
    return success_response({"user": user})


@router.put("/{user_id}")
@guarded("Failed to update user")
def update_user(user_id: str, payload: UserPayload = Depends(user_body), identity: AuthIdentity = Depends(admin_only)):
    key = object_id(user_id, INVALID_ID)
    current = users_repo.get_user(key)
    if current is None:
        raise not_found("User")

    sent = payload.provided()
    changes: dict = {}
    if payload.email and payload.email.strip().lower() != current["email"]:
        if users_repo.email_taken(payload.email, exclude_id=key):
            raise ApiError("Email already exists")
        changes["email"] = payload.email.strip().lower()
    if payload.name:
        changes["name"] = payload.name.strip()
    if payload.role:
        if payload.role not in USER_ROLES:
            raise ApiError(INVALID_ROLE)
        changes["role"] = payload.role
    role = changes.get("role", current["role"])
    if "district_id" in sent:
        changes["district_id"] = optional_object_id(payload.district_id, "Invalid district ID") if role == KAM else None
    elif role != KAM:
        changes["district_id"] = None
    if role == KAM and changes.get("district_id", current.get("district_id")) is None:
        raise ApiError("District is required for KAM role")
    if "team_id" in sent:
        changes["team_id"] = optional_object_id(payload.team_id, "Invalid team ID")
    if payload.status:
        changes["status"] = record_status(payload.status)
    if payload.password:
        changes["password"] = hash_password(payload.password)

    user = users_repo.update_user(key, changes)
    return success_response({"user": user}, "User updated successfully")


@router.delete("/{user_id}")
@guarded("Failed to delete user")
def delete_user(user_id: str, identity: AuthIdentity = Depends(admin_only)):
    key = object_id(user_id, INVALID_ID)
    if users_repo.set_user_status(key, "inactive") is None:
        raise not_found("User")
    return success_response(None, "User deleted successfully")


@router.patch("/{user_id}/status")
@guarded("Failed to update user status")
def update_user_status(
    user_id: str,
    payload: StatusUpdate = Depends(status_body),
    identity: AuthIdentity = Depends(admin_only),
):
    key = object_id(user_id, INVALID_ID)
    new_status = record_status(payload.status)
    user = users_repo.set_user_status(key, new_status)
    if user is None:
        raise not_found("User")
    return success_response({"user": user}, toggled_message("User", new_status))
