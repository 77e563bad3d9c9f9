"""Path, query and body checks shared by the route handlers."""

import json
from typing import Any, Callable, Iterable, Optional, Type, TypeVar

from bson import ObjectId
from fastapi import Depends, Query, Request, status
from pydantic import BaseModel, ValidationError

from ..models.domain import RECORD_STATUSES, AuthIdentity
from ..persistence.documents import is_valid_object_id, pagination
from .responses import ApiError

INVALID_STATUS = "Invalid status. Must be active or inactive"

ModelT = TypeVar("ModelT", bound=BaseModel)


class Page:
    __slots__ = ("page", "limit")

    def __init__(self, page: int, limit: int) -> None:
        self.page = page
        self.limit = limit

    def envelope(self, total: int) -> dict[str, int]:
        return pagination(self.page, self.limit, total)


class PageParams:
    """``page``/``limit`` query parameters with a per-resource default limit."""

    def __init__(self, default_limit: int = 10) -> None:
        self.default_limit = default_limit

    def __call__(
        self,
        page: int = Query(default=1, ge=1, description="1-based page index"),
        limit: Optional[int] = Query(default=None, ge=1, le=200, description="Records per page"),
    ) -> Page:
        return Page(page=page, limit=limit or self.default_limit)


def object_id(value: Any, message: str) -> ObjectId:
    """Parse an id or fail with a 400 before any query runs."""
    if not is_valid_object_id(value):
        raise ApiError(message, status.HTTP_400_BAD_REQUEST)
    return ObjectId(str(value))


def optional_object_id(value: Any, message: str) -> Optional[ObjectId]:
    if value in (None, ""):
        return None
    return object_id(value, message)


def record_status(value: Any, message: str = INVALID_STATUS) -> str:
    if value not in RECORD_STATUSES:
        raise ApiError(message, status.HTTP_400_BAD_REQUEST)
    return value


def one_of(value: Any, allowed: Iterable[str], message: str) -> str:
    if value not in tuple(allowed):
        raise ApiError(message, status.HTTP_400_BAD_REQUEST)
    return value


def toggled_message(resource: str, new_status: str) -> str:
    return f"{resource} {'activated' if new_status == 'active' else 'deactivated'} successfully"


def not_found(resource: str) -> ApiError:
    return ApiError(f"{resource} not found", status.HTTP_404_NOT_FOUND)


def forbidden(message: str) -> ApiError:
    return ApiError(message, status.HTTP_403_FORBIDDEN)


def json_body(model: Type[ModelT], guard: Callable[..., AuthIdentity]) -> Callable[..., Any]:
    """Build a body dependency that only parses once ``guard`` has let the caller through.

    Unauthorized callers get their 401 whatever they sent; a body that is not
    JSON or does not fit ``model`` is a 400.
    """

    async def dependency(request: Request, identity: AuthIdentity = Depends(guard)) -> ModelT:
        try:
            raw = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ApiError("Invalid request", status.HTTP_400_BAD_REQUEST, [{"msg": "Body is not valid JSON"}]) from exc
        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            details = exc.errors(include_url=False, include_context=False)
            raise ApiError("Invalid request", status.HTTP_400_BAD_REQUEST, details) from exc

    return dependency
