"""Pydantic request models for authentication endpoints."""

from __future__ import annotations

from typing import Optional

from .common import RequestModel


class LoginRequest(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None
