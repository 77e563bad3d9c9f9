"""Uniform JSON envelope shared by every endpoint."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar

from bson import ObjectId
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_ENCODERS = {ObjectId: str}


class ApiError(Exception):
    """Expected failure rendered as an error envelope."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


def success_response(data: Any = None, message: str = "Success", status_code: int = status.HTTP_200_OK) -> JSONResponse:
    payload = {"success": True, "data": data, "message": message}
    return JSONResponse(content=jsonable_encoder(payload, custom_encoder=_ENCODERS), status_code=status_code)


def error_response(message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: Any = None) -> JSONResponse:
    error: dict[str, Any] = {"message": message}
    if details:
        error["details"] = details
    payload = {"success": False, "error": error}
    return JSONResponse(content=jsonable_encoder(payload, custom_encoder=_ENCODERS), status_code=status_code)


def guarded(failure_message: str) -> Callable[[F], F]:
    """Convert unexpected handler exceptions into a logged 500 envelope."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except ApiError:
                raise
            except Exception as exc:
                logger.exception("%s: %s", failure_message, exc)
                raise ApiError(failure_message, status.HTTP_500_INTERNAL_SERVER_ERROR) from exc

        return wrapper  # type: ignore[return-value]

    return decorator


def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.message, exc.status_code, exc.details)


def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response("Invalid request", status.HTTP_400_BAD_REQUEST, exc.errors())


def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response("An error occurred", status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
