"""
ProFast Parcel API — Rider Service
====================================

What:  Rider applications and status transitions.

Activation:
    Setting a rider's status to "active" also promotes the linked user
    account to role "rider". The promotion is a second, independent write
    that runs as a background task after the status update has been
    answered; its failure is logged and never undoes the status change.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from profast.database import MongoGateway, to_object_id
from profast.exceptions import ProFastError
from profast.schemas.common import InsertResult, UpdateResult
from profast.schemas.rider import ACTIVE, PENDING, RiderApplication
from profast.services.user_service import user_service

logger = logging.getLogger(__name__)


class RiderService:

    async def create_application(self, gateway: MongoGateway, application: RiderApplication) -> InsertResult:
        outcome = await gateway.riders.insert_one(application.to_document())
        logger.info("Rider application received: %s", outcome.inserted_id)
        return InsertResult.from_outcome(outcome)

    async def list_by_status(self, gateway: MongoGateway, status: str) -> List[Dict[str, Any]]:
        # ObjectIds grow with insertion time
        return await gateway.riders.find_many({"status": status}, sort=[("_id", -1)])

    async def list_pending(self, gateway: MongoGateway) -> List[Dict[str, Any]]:
        return await self.list_by_status(gateway, PENDING)

    async def list_active(self, gateway: MongoGateway) -> List[Dict[str, Any]]:
        return await self.list_by_status(gateway, ACTIVE)

    async def update_status(
        self,
        gateway: MongoGateway,
        rider_id: str,
        status: str,
        email: Optional[str] = None,
    ) -> Tuple[UpdateResult, Optional[str]]:
        """
        Set the rider's status.

        Returns the update result and, when the rider became active, the
        email whose account should be promoted (None otherwise).
        """
        rider_oid = to_object_id(rider_id, "rider id")
        outcome = await gateway.riders.update_one({"_id": rider_oid}, {"$set": {"status": status}})
        logger.info("Rider %s status -> %s (matched=%d)", rider_id, status, outcome.matched_count)

        promote_email = None
        if status == ACTIVE and outcome.matched_count:
            promote_email = email
            if not promote_email:
                rider = await gateway.riders.find_one({"_id": rider_oid})
                promote_email = rider.get("email") if rider else None
            if not promote_email:
                logger.warning("Rider %s activated without an email; no account promoted", rider_id)

        return UpdateResult.from_outcome(outcome), promote_email

    async def activate_linked_user(self, gateway: MongoGateway, email: str) -> None:
        """Background step of activation. Logs failures instead of raising."""
        try:
            await user_service.promote_to_rider(gateway, email)
        except ProFastError as exc:
            logger.error(
                "Rider activation: could not promote %s to rider: %s | Context: %s",
                email,
                exc.message,
                exc.context,
            )


rider_service = RiderService()
