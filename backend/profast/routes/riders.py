"""
ProFast Parcel API — Rider Route Handlers
===========================================

What:  Rider applications, pending/active lists and status changes.
How:   Activation promotes the linked account in a BackgroundTask, after the
       status update has been answered.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends

from profast.database import MongoGateway, get_gateway
from profast.schemas.common import ErrorResponse, InsertResult, UpdateResult
from profast.schemas.rider import RiderApplication, RiderStatusUpdate
from profast.services.rider_service import rider_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/riders", tags=["Riders"])


@router.post("", response_model=InsertResult, summary="Submit a rider application")
async def create_rider_application(
    application: RiderApplication,
    gateway: MongoGateway = Depends(get_gateway),
) -> InsertResult:
    return await rider_service.create_application(gateway, application)


@router.get("/pending", response_model=List[Dict[str, Any]], summary="Pending applications")
async def list_pending_riders(
    gateway: MongoGateway = Depends(get_gateway),
) -> List[Dict[str, Any]]:
    return await rider_service.list_pending(gateway)


@router.get("/active", response_model=List[Dict[str, Any]], summary="Active riders")
async def list_active_riders(
    gateway: MongoGateway = Depends(get_gateway),
) -> List[Dict[str, Any]]:
    return await rider_service.list_active(gateway)


@router.patch(
    "/{rider_id}/status",
    response_model=UpdateResult,
    responses={400: {"description": "Malformed rider id or status", "model": ErrorResponse}},
    summary="Change a rider's status",
)
async def update_rider_status(
    rider_id: str,
    payload: RiderStatusUpdate,
    background_tasks: BackgroundTasks,
    gateway: MongoGateway = Depends(get_gateway),
) -> UpdateResult:
    result, promote_email = await rider_service.update_status(
        gateway, rider_id, payload.status, payload.email
    )
    if promote_email:
        background_tasks.add_task(rider_service.activate_linked_user, gateway, promote_email)
    return result
