"""
ProFast Parcel API — User Service
===================================

What:  Account search, role lookup, idempotent signup and role changes.

Idempotent signup:
    1. Look the email up; an existing account is returned as inserted=False.
    2. Insert with role "user".
    3. A DuplicateRecordError from the unique index on users.email means a
       concurrent signup won the race; it is reported as inserted=False too.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from profast.database import MongoGateway, to_object_id
from profast.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from profast.schemas.common import UpdateResult
from profast.schemas.user import (
    ASSIGNABLE_ROLES,
    DEFAULT_ROLE,
    RIDER_ROLE,
    UserCreate,
    UserCreated,
)

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10
SEARCH_PROJECTION = {"email": 1, "role": 1, "created_at": 1}


class UserService:

    async def search_users(
        self, gateway: MongoGateway, email_fragment: Optional[str]
    ) -> List[Dict[str, Any]]:
        """Case-insensitive partial email match, at most SEARCH_LIMIT results."""
        if not email_fragment or not email_fragment.strip():
            raise ValidationError(message="Missing email query parameter", field="email")

        pattern = re.escape(email_fragment.strip())
        return await gateway.users.find_many(
            {"email": {"$regex": pattern, "$options": "i"}},
            limit=SEARCH_LIMIT,
            projection=SEARCH_PROJECTION,
        )

    async def get_user_role(self, gateway: MongoGateway, email: Optional[str]) -> str:
        if not email or not email.strip():
            raise ValidationError(message="Email is required", field="email")

        user = await gateway.users.find_one({"email": email.strip()})
        if user is None:
            raise NotFoundError(resource="user", message="User not found")
        return user.get("role") or DEFAULT_ROLE

    async def create_user(self, gateway: MongoGateway, payload: UserCreate) -> Tuple[UserCreated, bool]:
        """
        Returns the response body and whether a document was inserted.
        """
        existing = await gateway.users.find_one({"email": payload.email})
        if existing is not None:
            return UserCreated(message="User already exists", inserted=False), False

        try:
            outcome = await gateway.users.insert_one(payload.to_document())
        except DuplicateRecordError:
            logger.info("Concurrent signup for %s resolved as existing user", payload.email)
            return UserCreated(message="User already exists", inserted=False), False

        logger.info("User created: %s", outcome.inserted_id)
        return (
            UserCreated(message="User created", inserted=True, inserted_id=outcome.inserted_id),
            True,
        )

    async def update_user_role(self, gateway: MongoGateway, user_id: str, role: str) -> UpdateResult:
        if role not in ASSIGNABLE_ROLES:
            raise ValidationError(
                message=f"Invalid role '{role}'. Must be one of: {', '.join(ASSIGNABLE_ROLES)}",
                field="role",
            )

        outcome = await gateway.users.update_one(
            {"_id": to_object_id(user_id, "user id")},
            {"$set": {"role": role}},
        )
        logger.info("Role of user %s set to %s (matched=%d)", user_id, role, outcome.matched_count)
        return UpdateResult.from_outcome(outcome)

    async def promote_to_rider(self, gateway: MongoGateway, email: str) -> UpdateResult:
        outcome = await gateway.users.update_one({"email": email}, {"$set": {"role": RIDER_ROLE}})
        if outcome.matched_count == 0:
            logger.warning("No user account with email %s to promote to rider", email)
        return UpdateResult.from_outcome(outcome)


user_service = UserService()
