"""Request models shared across resources."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict


class RequestModel(BaseModel):
    """Permissive body model; handlers check required fields themselves."""

    model_config = ConfigDict(extra="ignore")

    def provided(self) -> dict:
        """Fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class StatusUpdate(RequestModel):
    status: Optional[str] = None
