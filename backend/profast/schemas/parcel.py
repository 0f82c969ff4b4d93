"""
Parcel request schemas.

Parcels are free-form shipment documents: any JSON object is accepted and
stored as sent. The typed fields below only document the keys the rest of
the API relies on.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ParcelCreate(BaseModel):
    model_config = ConfigDict(extra="allow")

    created_by: Optional[str] = Field(default=None, description="Email of the sender")
    payment_status: Optional[str] = Field(default=None, description="unpaid or paid")

    def to_document(self) -> Dict[str, Any]:
        """Exactly the keys the client sent, nothing added."""
        document = self.model_dump(exclude_unset=True)
        document.update(self.model_extra or {})
        return document
