"""Pydantic request models for doctor endpoints."""

from __future__ import annotations

from typing import Optional

from .common import RequestModel


class DoctorPayload(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    district_id: Optional[str] = None
    kam_id: Optional[str] = None
    team_id: Optional[str] = None
    pmdc_number: Optional[str] = None
    specialty: Optional[str] = None
    status: Optional[str] = None
