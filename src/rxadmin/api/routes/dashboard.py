"""Dashboard summary endpoints (super admin only)."""

from fastapi import APIRouter, Depends

from ...auth import require_auth
from ...data import dashboard as dashboard_repo
from ...models.domain import SUPER_ADMIN, AuthIdentity
from ..responses import guarded, success_response

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

admin_only = require_auth(SUPER_ADMIN)


@router.get("/stats")
@guarded("Failed to fetch dashboard statistics")
def dashboard_stats(identity: AuthIdentity = Depends(admin_only)):
    return success_response(dashboard_repo.dashboard_stats(), "Dashboard statistics retrieved successfully")


@router.get("/recent-orders")
@guarded("Failed to fetch recent orders")
def recent_orders(identity: AuthIdentity = Depends(admin_only)):
    return success_response(dashboard_repo.recent_orders(), "Recent orders retrieved successfully")


@router.get("/activities")
@guarded("Failed to fetch dashboard activities")
def recent_activities(identity: AuthIdentity = Depends(admin_only)):
    return success_response(dashboard_repo.recent_activities(), "Recent activities retrieved successfully")
