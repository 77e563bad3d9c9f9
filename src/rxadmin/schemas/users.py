"""Pydantic request models for user endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field

from .common import RequestModel


class UserPayload(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    district_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("district_id", "assigned_district"),
    )
    team_id: Optional[str] = None
    status: Optional[str] = None
