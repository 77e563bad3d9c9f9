"""Authentication helpers."""

from .middleware import authorize, require_auth
from .passwords import hash_password, verify_password
from .tokens import InvalidTokenError, sign_token, verify_token

__all__ = [
    "authorize",
    "require_auth",
    "hash_password",
    "verify_password",
    "sign_token",
    "verify_token",
    "InvalidTokenError",
]
