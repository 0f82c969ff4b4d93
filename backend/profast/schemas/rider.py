"""
Rider application schemas.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

PENDING = "pending"
ACTIVE = "active"


class RiderApplication(BaseModel):
    """Free-form application (name, region, bike details, ...)."""

    model_config = ConfigDict(extra="allow")

    email: Optional[str] = Field(default=None, description="Applicant's account email")
    status: Optional[str] = Field(default=None, description="Defaults to 'pending'")

    def to_document(self) -> Dict[str, Any]:
        document = self.model_dump(exclude_unset=True)
        document.update(self.model_extra or {})
        if not document.get("status"):
            document["status"] = PENDING
        return document


class RiderStatusUpdate(BaseModel):
    status: str = Field(min_length=1, description="pending, active, rejected, ...")
    email: Optional[str] = Field(
        default=None,
        description="Account to promote on activation; defaults to the rider's own email",
    )
