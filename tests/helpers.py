from typing import Optional

from bson import ObjectId

from src.rxadmin.auth import sign_token
from src.rxadmin.models.domain import AuthIdentity

PASSWORD = "s3cret-pass"


def bearer(
    role: str,
    user_id: Optional[str] = None,
    district_id: Optional[str] = None,
    city_id: Optional[str] = None,
) -> dict[str, str]:
    """Authorization header for a freshly signed token."""
    identity = AuthIdentity(
        user_id=user_id or str(ObjectId()),
        email=f"{role}@example.com",
        role=role,
        district_id=district_id,
        city_id=city_id,
    )
    return {"Authorization": f"Bearer {sign_token(identity)}"}
