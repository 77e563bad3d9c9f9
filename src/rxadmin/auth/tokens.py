"""Bearer token signing and verification."""

from __future__ import annotations

from typing import Any

import jwt

from ..config import settings
from ..models.domain import AuthIdentity, TOKEN_ROLES


class InvalidTokenError(Exception):
    """Raised when a bearer token cannot be trusted."""


def sign_token(identity: AuthIdentity) -> str:
    """Sign a token for the identity. Tokens carry no expiry."""
    payload: dict[str, Any] = {
        "userId": identity.user_id,
        "email": identity.email,
        "role": identity.role,
        "district_id": identity.district_id,
        "team_id": identity.team_id,
        "city_id": identity.city_id,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> AuthIdentity:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as exc:
        raise InvalidTokenError("Invalid token") from exc

    user_id = payload.get("userId")
    role = payload.get("role")
    if not user_id or role not in TOKEN_ROLES:
        raise InvalidTokenError("Invalid token")

    return AuthIdentity(
        user_id=str(user_id),
        email=str(payload.get("email") or ""),
        role=role,
        district_id=payload.get("district_id") or payload.get("assigned_district"),
        team_id=payload.get("team_id"),
        city_id=payload.get("city_id"),
    )
