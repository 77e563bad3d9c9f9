"""Domain constants and the authenticated caller identity."""

from dataclasses import dataclass
from typing import Optional

SUPER_ADMIN = "super_admin"
KAM = "kam"
DISTRIBUTOR = "distributor"

USER_ROLES = (SUPER_ADMIN, KAM)
TOKEN_ROLES = (SUPER_ADMIN, KAM, DISTRIBUTOR)

ACTIVE = "active"
INACTIVE = "inactive"
RECORD_STATUSES = (ACTIVE, INACTIVE)

DISTRIBUTOR_CHANNELS = ("pillbox", "other")

ORDER_STATUSES = ("pending", "processing", "fulfilled", "cancelled")
FINANCIAL_STATUSES = ("pending", "paid", "refunded")
FULFILLMENT_STATUSES = ("unfulfilled", "fulfilled", "partial")
PRESCRIPTION_PRIORITIES = ("normal", "urgent", "emergency")
PATIENT_GENDERS = ("male", "female", "other")

LOCAL_ORDER_PREFIX = "LOCAL-"


@dataclass(slots=True)
class AuthIdentity:
    """Claims carried by a verified bearer token."""

    user_id: str
    email: str
    role: str
    district_id: Optional[str] = None
    team_id: Optional[str] = None
    city_id: Optional[str] = None

    @property
    def assigned_district(self) -> Optional[str]:
        return self.district_id

    @property
    def is_kam(self) -> bool:
        return self.role == KAM

    @property
    def is_distributor(self) -> bool:
        return self.role == DISTRIBUTOR


@dataclass(slots=True)
class AuthVerdict:
    """Outcome of authenticating and authorizing a request."""

    authorized: bool
    message: str
    user: Optional[AuthIdentity] = None
