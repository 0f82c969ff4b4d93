"""
Tracking event schemas.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TrackingEventCreate(BaseModel):
    tracking_id: str = Field(min_length=1)
    parcel_id: Optional[str] = Field(default=None, description="Parcel the event belongs to")
    status: str = Field(description="Free-form status label, e.g. rider_assigned")
    message: str
    updated_by: Optional[str] = Field(default=None, description="Email of the actor")


class TrackingRecorded(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    inserted_id: str = Field(alias="insertedId")
