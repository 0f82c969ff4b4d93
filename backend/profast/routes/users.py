"""
ProFast Parcel API — User Route Handlers
==========================================

What:  User search, role lookup, signup and role changes.
Who:   Signup/login pages (POST /users, GET /users/{email}/role) and the
       admin console (search, PATCH role).
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response

from profast.database import MongoGateway, get_gateway
from profast.schemas.common import ErrorResponse, UpdateResult
from profast.schemas.user import RoleResponse, RoleUpdate, UserCreate, UserCreated
from profast.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/search",
    response_model=List[Dict[str, Any]],
    responses={400: {"description": "Missing email query", "model": ErrorResponse}},
    summary="Search users by partial email",
)
async def search_users(
    email: Optional[str] = Query(default=None, description="Case-insensitive email fragment"),
    gateway: MongoGateway = Depends(get_gateway),
) -> List[Dict[str, Any]]:
    return await user_service.search_users(gateway, email)


@router.get(
    "/{email}/role",
    response_model=RoleResponse,
    responses={
        400: {"description": "Missing email", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Get a user's role",
)
async def get_user_role(
    email: str,
    gateway: MongoGateway = Depends(get_gateway),
) -> RoleResponse:
    role = await user_service.get_user_role(gateway, email)
    return RoleResponse(role=role)


@router.post(
    "",
    status_code=201,
    response_model=UserCreated,
    response_model_exclude_none=True,
    responses={
        200: {"description": "User already existed", "model": UserCreated},
        201: {"description": "User created", "model": UserCreated},
    },
    summary="Create a user if the email is new",
)
async def create_user(
    payload: UserCreate,
    response: Response,
    gateway: MongoGateway = Depends(get_gateway),
) -> UserCreated:
    body, inserted = await user_service.create_user(gateway, payload)
    if not inserted:
        response.status_code = 200
    return body


@router.patch(
    "/{user_id}/role",
    response_model=UpdateResult,
    responses={
        400: {"description": "Invalid role or user id", "model": ErrorResponse},
        401: {"description": "Missing bearer token", "model": ErrorResponse},
        403: {"description": "Invalid bearer token", "model": ErrorResponse},
    },
    summary="Change a user's role (admin or user)",
)
async def update_user_role(
    user_id: str,
    payload: RoleUpdate,
    gateway: MongoGateway = Depends(get_gateway),
) -> UpdateResult:
    return await user_service.update_user_role(gateway, user_id, payload.role)
