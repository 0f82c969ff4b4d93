"""
ProFast Parcel API — Parcel Service
=====================================

What:  Parcel listing, lookup, creation and deletion.
How:   Stateless; each call receives the MongoGateway it should use.
"""

import logging
from typing import Any, Dict, List, Optional

from profast.database import MongoGateway, to_object_id
from profast.exceptions import NotFoundError
from profast.schemas.common import DeleteResult, InsertResult
from profast.schemas.parcel import ParcelCreate

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("createdAt", -1)]


class ParcelService:

    async def list_parcels(
        self, gateway: MongoGateway, email: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """All parcels, or only those created by `email`, newest first."""
        query = {"created_by": email} if email else {}
        return await gateway.parcels.find_many(query, sort=NEWEST_FIRST)

    async def get_parcel(self, gateway: MongoGateway, parcel_id: str) -> Dict[str, Any]:
        parcel = await gateway.parcels.find_one({"_id": to_object_id(parcel_id, "parcel id")})
        if parcel is None:
            raise NotFoundError(resource="parcel", resource_id=parcel_id)
        return parcel

    async def create_parcel(self, gateway: MongoGateway, parcel: ParcelCreate) -> InsertResult:
        outcome = await gateway.parcels.insert_one(parcel.to_document())
        logger.info("Parcel created: %s (created_by=%s)", outcome.inserted_id, parcel.created_by)
        return InsertResult.from_outcome(outcome)

    async def delete_parcel(self, gateway: MongoGateway, parcel_id: str) -> DeleteResult:
        # Reports deletedCount 0 for an unknown id rather than raising
        outcome = await gateway.parcels.delete_one({"_id": to_object_id(parcel_id, "parcel id")})
        logger.info("Parcel delete %s: deleted_count=%d", parcel_id, outcome.deleted_count)
        return DeleteResult.from_outcome(outcome)


parcel_service = ParcelService()
