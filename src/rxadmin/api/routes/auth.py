"""Login and current-profile endpoints."""

from fastapi import APIRouter, Depends, status

from ...auth import require_auth, sign_token, verify_password
from ...data import distributors as distributors_repo
from ...data import users as users_repo
from ...models.domain import ACTIVE, DISTRIBUTOR, AuthIdentity
from ...schemas.auth import LoginRequest
from ..params import not_found
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid email or password"


def _str_or_none(value):
    return str(value) if value is not None else None


def _check_credentials(account: dict | None, password: str, inactive_message: str) -> dict:
    if account is None:
        raise ApiError(INVALID_CREDENTIALS, status.HTTP_401_UNAUTHORIZED)
    if account.get("status") != ACTIVE:
        raise ApiError(inactive_message, status.HTTP_403_FORBIDDEN)
    if not verify_password(password, account.get("password")):
        raise ApiError(INVALID_CREDENTIALS, status.HTTP_401_UNAUTHORIZED)
    return account


@router.post("/login")
@guarded("An error occurred during login")
def login(payload: LoginRequest):
    if not payload.email or not payload.password:
        raise ApiError("Email and password are required")

    user = _check_credentials(
        users_repo.find_by_email(payload.email),
        payload.password,
        "Your account has been deactivated",
    )
    identity = AuthIdentity(
        user_id=str(user["_id"]),
        email=user["email"],
        role=user["role"],
        district_id=_str_or_none(user.get("district_id")),
        team_id=_str_or_none(user.get("team_id")),
    )
    return success_response(
        {
            "user": {
                "id": user["_id"],
                "email": user["email"],
                "name": user.get("name"),
                "role": user["role"],
                "team_id": user.get("team_id"),
                "district_id": user.get("district_id"),
            },
            "token": sign_token(identity),
        },
        "Login successful",
    )


@router.post("/distributor-login")
@guarded("An error occurred during login")
def distributor_login(payload: LoginRequest):
    if not payload.email or not payload.password:
        raise ApiError("Email and password are required")

    distributor = _check_credentials(
        distributors_repo.find_by_email(payload.email),
        payload.password,
        "Your account is inactive. Please contact support.",
    )
    identity = AuthIdentity(
        user_id=str(distributor["_id"]),
        email=distributor["email"],
        role=DISTRIBUTOR,
        city_id=_str_or_none(distributor.get("city_id")),
    )
    return success_response(
        {
            "token": sign_token(identity),
            "user": {
                "id": distributor["_id"],
                "email": distributor["email"],
                "name": distributor.get("name"),
                "role": DISTRIBUTOR,
                "city_id": distributor.get("city_id"),
            },
        },
        "Login successful",
    )


@router.get("/me")
@guarded("An error occurred")
def me(identity: AuthIdentity = Depends(require_auth())):
    if identity.is_distributor:
        distributor = distributors_repo.get_distributor(identity.user_id)
        if distributor is None:
            raise not_found("User")
        return success_response(
            {
                "id": distributor["_id"],
                "email": distributor["email"],
                "name": distributor.get("name"),
                "role": DISTRIBUTOR,
                "city_id": distributor.get("city_id"),
                "status": distributor.get("status"),
            }
        )

    user = users_repo.get_user(identity.user_id)
    if user is None:
        raise not_found("User")
    return success_response(
        {
            "id": user["_id"],
            "email": user["email"],
            "name": user.get("name"),
            "role": user["role"],
            "assigned_district": user.get("district_id"),
            "status": user.get("status"),
        }
    )
