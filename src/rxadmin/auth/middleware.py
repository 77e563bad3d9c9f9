"""Request authentication and role authorization."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from fastapi import Header, status

from ..api.responses import ApiError
from ..models.domain import AuthIdentity, AuthVerdict
from .tokens import InvalidTokenError, verify_token

BEARER_PREFIX = "Bearer "


def authorize(authorization: Optional[str], allowed_roles: Iterable[str] | None = None) -> AuthVerdict:
    """Verify the Authorization header and check the caller's role.

    Args:
        authorization: Raw ``Authorization`` header value.
        allowed_roles: Optional allow-list; when omitted any valid identity passes.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return AuthVerdict(authorized=False, message="No token provided")

    token = authorization[len(BEARER_PREFIX):].strip()
    try:
        identity = verify_token(token)
    except InvalidTokenError as exc:
        return AuthVerdict(authorized=False, message=str(exc) or "Authentication failed")

    roles = tuple(allowed_roles) if allowed_roles else ()
    if roles and identity.role not in roles:
        return AuthVerdict(authorized=False, message="Insufficient permissions")

    return AuthVerdict(authorized=True, message="Authorized", user=identity)


def require_auth(*roles: str) -> Callable[..., AuthIdentity]:
    """Build a dependency that rejects unauthorized callers with a 401 envelope."""

    def dependency(authorization: Optional[str] = Header(default=None)) -> AuthIdentity:
        verdict = authorize(authorization, roles or None)
        if not verdict.authorized or verdict.user is None:
            raise ApiError(verdict.message, status.HTTP_401_UNAUTHORIZED)
        return verdict.user

    return dependency
