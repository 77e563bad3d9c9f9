"""Order endpoints, including status sync from the Shopify store."""

import logging

from fastapi import APIRouter, Depends, Query, status

from ...auth import require_auth
from ...data import cities as cities_repo
from ...data import orders as orders_repo
from ...data import patients as patients_repo
from ...data import prescriptions as prescriptions_repo
from ...models.domain import (
    DISTRIBUTOR,
    FINANCIAL_STATUSES,
    FULFILLMENT_STATUSES,
    ORDER_STATUSES,
    SUPER_ADMIN,
    AuthIdentity,
)
from ...schemas.orders import BulkSyncRequest, OrderStatusUpdate
from ...services.commerce import shopify_client
from ...services.commerce import sync as commerce_sync
from ..params import Page, PageParams, forbidden, json_body, not_found, object_id, one_of
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/orders", tags=["orders"])
logger = logging.getLogger(__name__)

staff = require_auth(SUPER_ADMIN, DISTRIBUTOR)
order_status_body = json_body(OrderStatusUpdate, staff)
admin_only = require_auth(SUPER_ADMIN)
bulk_sync_body = json_body(BulkSyncRequest, admin_only)

INVALID_ID = "Invalid order ID"


def _distributor_prescriptions(identity: AuthIdentity) -> list:
    """Prescriptions whose patients live in the distributor's city."""
    if not identity.city_id:
        return []
    city = cities_repo.get_city(identity.city_id)
    if city is None:
        return []
    patient_ids = patients_repo.patient_ids_in_city(city["name"])
    if not patient_ids:
        return []
    return prescriptions_repo.ids_for_patients(patient_ids)


def _check_city(order: dict, identity: AuthIdentity, message: str) -> None:
    if not identity.is_distributor or not identity.city_id:
        return
    order_city = (order.get("patient_info") or {}).get("city_id")
    if order_city is not None and str(order_city) != identity.city_id:
        raise forbidden(message)


def _client():
    try:
        return shopify_client.get_shopify_client()
    except shopify_client.CommerceConfigError as exc:
        raise ApiError(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR) from exc


@router.get("")
@guarded("Failed to fetch orders")
def list_orders(
    search: str = Query(default=""),
    order_status: str = Query(default=""),
    financial_status: str = Query(default=""),
    fulfillment_status: str = Query(default=""),
    page: Page = Depends(PageParams(20)),
    identity: AuthIdentity = Depends(staff),
):
    prescription_ids = None
    if identity.is_distributor:
        prescription_ids = _distributor_prescriptions(identity)
        if not prescription_ids:
            return success_response({"orders": [], "pagination": page.envelope(0)})
    orders, total = orders_repo.list_orders(
        prescription_ids=prescription_ids,
        search=search,
        order_status=order_status,
        financial_status=financial_status,
        fulfillment_status=fulfillment_status,
        page=page.page,
        limit=page.limit,
    )
    return success_response({"orders": orders, "pagination": page.envelope(total)})


@router.post("/bulk-sync")
@guarded("Failed to bulk sync orders")
def bulk_sync_orders(payload: BulkSyncRequest = Depends(bulk_sync_body), identity: AuthIdentity = Depends(admin_only)):
    if not isinstance(payload.order_ids, list) or not payload.order_ids:
        raise ApiError("order_ids array is required")
    for value in payload.order_ids:
        object_id(value, INVALID_ID)

    orders = orders_repo.find_orders(payload.order_ids)
    if not orders:
        return success_response(
            {"synced": 0, "failed": 0, "total": 0, "orders": []},
            "No orders found to sync",
        )
    result = commerce_sync.bulk_sync_orders(orders, _client())
    return success_response(result, f"Synced {result['synced']} out of {result['total']} orders")


@router.get("/{order_id}")
@guarded("Failed to fetch order")
def get_order(order_id: str, identity: AuthIdentity = Depends(staff)):
    key = object_id(order_id, INVALID_ID)
    order = orders_repo.get_order(key)
    if order is None:
        raise not_found("Order")
    _check_city(order, identity, "Unauthorized to view this order")
    return success_response({"order": orders_repo.expand_order(order)})


@router.put("/{order_id}")
@guarded("Failed to update order")
def update_order(
    order_id: str,
    payload: OrderStatusUpdate = Depends(order_status_body),
    identity: AuthIdentity = Depends(staff),
):
    key = object_id(order_id, INVALID_ID)
    changes: dict = {}
    if payload.order_status:
        changes["order_status"] = one_of(payload.order_status, ORDER_STATUSES, "Invalid order status")
    if payload.financial_status:
        changes["financial_status"] = one_of(payload.financial_status, FINANCIAL_STATUSES, "Invalid financial status")
    if payload.fulfillment_status:
        changes["fulfillment_status"] = one_of(
            payload.fulfillment_status, FULFILLMENT_STATUSES, "Invalid fulfillment status"
        )

    order = orders_repo.get_order(key)
    if order is None:
        raise not_found("Order")
    _check_city(order, identity, "Unauthorized to update this order")
    updated = orders_repo.update_order(key, changes)
    return success_response({"order": updated}, "Order status updated successfully")


@router.post("/{order_id}/sync")
@guarded("Failed to sync order")
def sync_order(order_id: str, identity: AuthIdentity = Depends(staff)):
    key = object_id(order_id, INVALID_ID)
    order = orders_repo.get_order(key)
    if order is None:
        raise not_found("Order")
    _check_city(order, identity, "Unauthorized to update this order")

    if commerce_sync.is_local_order(order):
        return success_response(
            {"order": orders_repo.expand_order(order)},
            "Non-Shopify order - no sync needed",
        )

    client = _client()
    try:
        synced = commerce_sync.sync_order(order, client)
    except shopify_client.CommerceError as exc:
        logger.warning("Order %s sync failed, serving cached copy: %s", order_id, exc)
        return success_response(
            {"order": orders_repo.get_order_detail(key), "warning": str(exc)},
            "Could not sync with Shopify, returning cached data",
        )
    return success_response({"order": synced}, "Order status synced successfully from Shopify")
