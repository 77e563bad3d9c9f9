"""Pydantic request models for order endpoints."""

from __future__ import annotations

from typing import Any, Optional

from .common import RequestModel


class OrderStatusUpdate(RequestModel):
    order_status: Optional[str] = None
    financial_status: Optional[str] = None
    fulfillment_status: Optional[str] = None


class BulkSyncRequest(RequestModel):
    order_ids: Any = None
