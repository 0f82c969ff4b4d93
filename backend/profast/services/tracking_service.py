"""
Tracking events: an append-only log of parcel status changes.
"""

import logging
from datetime import datetime, timezone

from profast.database import MongoGateway, to_object_id
from profast.schemas.tracking import TrackingEventCreate, TrackingRecorded

logger = logging.getLogger(__name__)


class TrackingService:

    async def append_event(self, gateway: MongoGateway, event: TrackingEventCreate) -> TrackingRecorded:
        document = {
            "tracking_id": event.tracking_id,
            "status": event.status,
            "message": event.message,
            "time": datetime.now(timezone.utc),
        }
        if event.updated_by:
            document["updated_by"] = event.updated_by
        if event.parcel_id:
            document["parcel_id"] = to_object_id(event.parcel_id, "parcel id")

        outcome = await gateway.tracking.insert_one(document)
        logger.info("Tracking %s: %s", event.tracking_id, event.status)
        return TrackingRecorded(success=True, inserted_id=outcome.inserted_id)


tracking_service = TrackingService()
