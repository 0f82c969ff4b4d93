"""
ProFast Parcel API — Tracking Route Handler
=============================================

What:  POST /tracking appends one event to a parcel's tracking log.
"""

from fastapi import APIRouter, Depends

from profast.database import MongoGateway, get_gateway
from profast.schemas.common import ErrorResponse
from profast.schemas.tracking import TrackingEventCreate, TrackingRecorded
from profast.services.tracking_service import tracking_service

router = APIRouter(tags=["Tracking"])


@router.post(
    "/tracking",
    response_model=TrackingRecorded,
    responses={400: {"description": "Malformed parcel id", "model": ErrorResponse}},
    summary="Append a tracking event",
)
async def append_tracking_event(
    event: TrackingEventCreate,
    gateway: MongoGateway = Depends(get_gateway),
) -> TrackingRecorded:
    return await tracking_service.append_event(gateway, event)
