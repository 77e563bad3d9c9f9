"""Sales and team performance reports."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import require_auth
from ...data import reports as reports_repo
from ...data import users as users_repo
from ...models.domain import KAM, SUPER_ADMIN, AuthIdentity
from ..params import optional_object_id
from ..responses import ApiError, guarded, success_response

router = APIRouter(prefix="/reports", tags=["reports"])
logger = logging.getLogger(__name__)

admin_only = require_auth(SUPER_ADMIN)
report_viewers = require_auth(SUPER_ADMIN, KAM)


def _check_range(date_from: Optional[date], date_to: Optional[date]) -> None:
    if date_from and date_to and date_from > date_to:
        raise ApiError("dateFrom must not be after dateTo")


@router.get("/sales")
@guarded("Failed to generate sales report")
def sales_report(
    date_from: Optional[date] = Query(default=None, alias="dateFrom"),
    date_to: Optional[date] = Query(default=None, alias="dateTo"),
    team_id: str = Query(default="", alias="teamId"),
    district_id: str = Query(default="", alias="districtId"),
    identity: AuthIdentity = Depends(report_viewers),
):
    """Sales for active doctors; KAM callers only see their own district and team."""
    _check_range(date_from, date_to)
    team_key = optional_object_id(team_id, "Invalid team ID")
    district_key = optional_object_id(district_id, "Invalid district ID")

    if identity.is_kam:
        district_key, team_key = users_repo.kam_assignment(identity.user_id)
        assigned = district_key is not None and team_key is not None
        logger.debug("Sales report for KAM %s (assigned=%s)", identity.user_id, assigned)
        report = reports_repo.sales_report(
            district_id=district_key, team_id=team_key, date_from=date_from, date_to=date_to, assigned=assigned
        )
        report["context"] = reports_repo.report_context(district_id=district_key)
    else:
        report = reports_repo.sales_report(
            district_id=None if team_key else district_key, team_id=team_key, date_from=date_from, date_to=date_to
        )
        report["context"] = reports_repo.report_context(team_id=team_key, district_id=district_key)
    return success_response(report)


@router.get("/team-performance")
@guarded("Failed to generate team performance report")
def team_performance(
    date_from: Optional[date] = Query(default=None, alias="dateFrom"),
    date_to: Optional[date] = Query(default=None, alias="dateTo"),
    team_id: str = Query(default="", alias="teamId"),
    identity: AuthIdentity = Depends(admin_only),
):
    _check_range(date_from, date_to)
    team_key = optional_object_id(team_id, "Invalid team ID")
    return success_response(reports_repo.team_performance(team_id=team_key, date_from=date_from, date_to=date_to))
