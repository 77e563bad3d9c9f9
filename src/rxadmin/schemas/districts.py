"""Pydantic request models for district and embedded city endpoints."""

from __future__ import annotations

from typing import Optional

from .common import RequestModel


class DistrictPayload(RequestModel):
    name: Optional[str] = None
    code: Optional[str] = None
    kam_id: Optional[str] = None
    status: Optional[str] = None


class DistrictCityPayload(RequestModel):
    name: Optional[str] = None
    distributor_channel: Optional[str] = None
    distributor_id: Optional[str] = None
