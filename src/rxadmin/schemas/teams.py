"""Pydantic request models for team endpoints."""

from __future__ import annotations

from typing import Any, Optional

from .common import RequestModel


class TeamPayload(RequestModel):
    name: Optional[str] = None
    description: Optional[str] = None
    district_id: Optional[str] = None
    status: Optional[str] = None


class TeamProductsUpdate(RequestModel):
    # Left untyped so a non-list value reaches the handler's own check
    productIds: Any = None
