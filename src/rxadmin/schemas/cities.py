"""Pydantic request models for standalone city endpoints."""

from __future__ import annotations

from typing import Optional

from .common import RequestModel


class CityPayload(RequestModel):
    name: Optional[str] = None
    distributor_channel: Optional[str] = None
    distributor_name: Optional[str] = None
    distributor_email: Optional[str] = None
    distributor_phone: Optional[str] = None
    distributor_password: Optional[str] = None
