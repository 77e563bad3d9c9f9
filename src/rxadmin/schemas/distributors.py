"""Pydantic request models for distributor endpoints."""

from __future__ import annotations

from typing import Optional

from .common import RequestModel


class DistributorPayload(RequestModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
