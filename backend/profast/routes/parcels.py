"""
ProFast Parcel API — Parcel Route Handlers
============================================

What:  GET /parcels, GET /parcels/{id}, POST /parcels, DELETE /parcels/{id}.
Who:   Called by the sender dashboard (my parcels, parcel details, booking).

GET /parcels requires a verified bearer token (see ROUTE_POLICIES).
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from profast.database import MongoGateway, get_gateway
from profast.schemas.common import DeleteResult, ErrorResponse, InsertResult
from profast.schemas.parcel import ParcelCreate
from profast.services.parcel_service import parcel_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Parcels"])


@router.get(
    "/parcels",
    response_model=List[Dict[str, Any]],
    responses={
        401: {"description": "Missing bearer token", "model": ErrorResponse},
        403: {"description": "Invalid bearer token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List parcels, optionally by creator",
)
async def list_parcels(
    email: Optional[str] = Query(default=None, description="Only parcels created by this email"),
    gateway: MongoGateway = Depends(get_gateway),
) -> List[Dict[str, Any]]:
    """Newest first by `createdAt`."""
    return await parcel_service.list_parcels(gateway, email)


@router.get(
    "/parcels/{parcel_id}",
    response_model=Dict[str, Any],
    responses={
        400: {"description": "Malformed parcel id", "model": ErrorResponse},
        404: {"description": "Parcel not found", "model": ErrorResponse},
    },
    summary="Get a single parcel",
)
async def get_parcel(
    parcel_id: str,
    gateway: MongoGateway = Depends(get_gateway),
) -> Dict[str, Any]:
    return await parcel_service.get_parcel(gateway, parcel_id)


@router.post(
    "/parcels",
    status_code=201,
    response_model=InsertResult,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Create a parcel",
    description="Stores the submitted parcel document as sent.",
)
async def create_parcel(
    parcel: ParcelCreate,
    gateway: MongoGateway = Depends(get_gateway),
) -> InsertResult:
    return await parcel_service.create_parcel(gateway, parcel)


@router.delete(
    "/parcels/{parcel_id}",
    response_model=DeleteResult,
    responses={400: {"description": "Malformed parcel id", "model": ErrorResponse}},
    summary="Delete a parcel",
)
async def delete_parcel(
    parcel_id: str,
    gateway: MongoGateway = Depends(get_gateway),
) -> DeleteResult:
    """`deletedCount` is 0 when no parcel had that id."""
    return await parcel_service.delete_parcel(gateway, parcel_id)
