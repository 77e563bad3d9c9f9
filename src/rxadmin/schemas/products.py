"""Pydantic request models for product endpoints."""

from __future__ import annotations

from typing import Optional

from .common import RequestModel


class ProductPayload(RequestModel):
    name: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    shopify_product_id: Optional[str] = None
    shopify_variant_id: Optional[str] = None
    status: Optional[str] = None


class DistrictProductToggle(RequestModel):
    product_id: Optional[str] = None
    status: Optional[str] = None
