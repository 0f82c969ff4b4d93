"""
ProFast Parcel API — Persistence Gateway (MongoDB)
====================================================

What:  Async MongoDB client, per-collection repositories, id conversion and
       the FastAPI dependency that hands the gateway to route handlers.
How:   One `pymongo.AsyncMongoClient` per process, built in the lifespan and
       stored on `app.state.gateway`. Every repository call is awaited, so a
       slow query suspends only the request that issued it.

Collections:
    parcels    Parcel documents (free-form shipment fields)
    users      User accounts, unique by email
    riders     Rider applications
    payments   Append-only payment log
    tracking   Append-only tracking events

Failure model:
    - The startup ping may fail. The gateway then stays disconnected and
      `get_gateway` retries the ping (one server-selection timeout) on each
      request, answering 503 until MongoDB is reachable again.
    - Driver errors inside a request become DatabaseError (500, generic
      message); the driver detail is logged here.
"""

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from bson import ObjectId
from fastapi import Request
from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError
from pymongo.server_api import ServerApi

from profast.config import Settings
from profast.exceptions import (
    DatabaseError,
    DuplicateRecordError,
    ServiceUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

PARCELS = "parcels"
USERS = "users"
RIDERS = "riders"
PAYMENTS = "payments"
TRACKING = "tracking"

SortSpec = Sequence[Tuple[str, int]]


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

def to_object_id(value: Any, field: str = "id") -> ObjectId:
    """
    Convert an opaque client-supplied identifier into an ObjectId.

    Raises:
        ValidationError: the value is not a 24-character hex string.
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationError(
            message=f"Invalid {field}: '{value}' is not a valid identifier",
            field=field,
        )
    return ObjectId(value)


def serialize_document(value: Any) -> Any:
    """Render ObjectId and datetime values (at any depth) as JSON-safe strings."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_document(item) for item in value]
    return value


# ══════════════════════════════════════════════════════════════════════════
# Write outcomes
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class InsertOutcome:
    acknowledged: bool
    inserted_id: str


@dataclass(frozen=True)
class UpdateOutcome:
    acknowledged: bool
    matched_count: int
    modified_count: int
    upserted_id: Optional[str] = None


@dataclass(frozen=True)
class DeleteOutcome:
    acknowledged: bool
    deleted_count: int


# ══════════════════════════════════════════════════════════════════════════
# Repository
# ══════════════════════════════════════════════════════════════════════════

class Repository:
    """
    Thin async wrapper around one collection.

    Returns plain dicts with `_id` already rendered as a string, and the
    outcome dataclasses above for writes. Every call goes through
    `_driver_errors` so no PyMongoError ever reaches a route.
    """

    def __init__(self, collection: Any, resource: str):
        self.collection = collection
        self.resource = resource

    @contextmanager
    def _driver_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except DuplicateKeyError as exc:
            raise DuplicateRecordError(
                context={"collection": self.resource, "operation": operation, "error": str(exc)},
            ) from exc
        except PyMongoError as exc:
            logger.error("MongoDB %s on %s failed: %s", operation, self.resource, exc)
            raise DatabaseError(
                context={"collection": self.resource, "operation": operation, "error": str(exc)},
            ) from exc

    async def find_many(
        self,
        filter: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
        limit: int = 0,
        projection: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        with self._driver_errors("find"):
            cursor = self.collection.find(filter or {}, projection)
            if sort:
                cursor = cursor.sort(list(sort))
            if limit:
                cursor = cursor.limit(limit)
            documents = await cursor.to_list(length=None)
        return [serialize_document(doc) for doc in documents]

    async def find_one(self, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._driver_errors("find_one"):
            document = await self.collection.find_one(filter)
        return serialize_document(document) if document is not None else None

    async def insert_one(self, document: Dict[str, Any]) -> InsertOutcome:
        # The driver writes `_id` back into the dict it is given
        payload = dict(document)
        with self._driver_errors("insert_one"):
            result = await self.collection.insert_one(payload)
        return InsertOutcome(
            acknowledged=result.acknowledged,
            inserted_id=str(result.inserted_id),
        )

    async def update_one(self, filter: Dict[str, Any], update: Dict[str, Any]) -> UpdateOutcome:
        with self._driver_errors("update_one"):
            result = await self.collection.update_one(filter, update)
        return UpdateOutcome(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_id=str(result.upserted_id) if result.upserted_id is not None else None,
        )

    async def delete_one(self, filter: Dict[str, Any]) -> DeleteOutcome:
        with self._driver_errors("delete_one"):
            result = await self.collection.delete_one(filter)
        return DeleteOutcome(acknowledged=result.acknowledged, deleted_count=result.deleted_count)


# ══════════════════════════════════════════════════════════════════════════
# Gateway
# ══════════════════════════════════════════════════════════════════════════

class MongoGateway:
    """
    Owns the database handle and one Repository per collection.

    Construct with `from_settings()` in production; tests pass any object
    that supports `database[name]` and `await database.command("ping")`.
    """

    def __init__(self, database: Any, client: Optional[Any] = None):
        self.client = client
        self.database = database
        self.connected = False
        self._connect_lock = asyncio.Lock()

        self.parcels = Repository(database[PARCELS], "parcel")
        self.users = Repository(database[USERS], "user")
        self.riders = Repository(database[RIDERS], "rider")
        self.payments = Repository(database[PAYMENTS], "payment")
        self.tracking = Repository(database[TRACKING], "tracking event")

    @classmethod
    def from_settings(cls, settings: Settings) -> "MongoGateway":
        client = AsyncMongoClient(
            settings.mongodb_url,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
            serverSelectionTimeoutMS=settings.db_server_selection_timeout_ms,
            tz_aware=True,
        )
        return cls(client[settings.db_name], client=client)

    async def connect(self) -> bool:
        """
        Ping the deployment and create indexes. Returns the connection state.

        A failed ping is logged, not raised. Concurrent callers share one
        attempt; whoever waited on the lock sees its result.
        """
        async with self._connect_lock:
            if self.connected:
                return True
            return await self._connect()

    async def _connect(self) -> bool:
        try:
            await self.database.command("ping")
        except PyMongoError as exc:
            logger.error("Could not connect to MongoDB: %s", exc)
            self.connected = False
            return False

        self.connected = True
        logger.info("Pinged MongoDB deployment, connection established")
        await self.ensure_indexes()
        return True

    async def ensure_indexes(self) -> None:
        """Best effort: an existing duplicate email must not stop the server."""
        specs = [
            (self.users, "email", True),
            (self.parcels, "created_by", False),
            (self.payments, "email", False),
            (self.riders, "status", False),
        ]
        for repository, field, unique in specs:
            try:
                await repository.collection.create_index([(field, ASCENDING)], unique=unique)
            except PyMongoError as exc:
                logger.warning(
                    "Could not create index on %s.%s: %s", repository.resource, field, exc
                )

    async def ping(self) -> bool:
        """Liveness probe for /health; reconnects a gateway that never came up."""
        if not self.connected:
            return await self.connect()
        try:
            await self.database.command("ping")
            return True
        except PyMongoError as exc:
            logger.warning("MongoDB ping failed: %s", exc)
            return False

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
        self.connected = False


# ── Dependency ────────────────────────────────────────────────────────────
async def get_gateway(request: Request) -> MongoGateway:
    """
    FastAPI dependency returning the process-wide gateway.

    A gateway whose startup ping failed gets one more ping here, so the
    server recovers once MongoDB becomes reachable.

    Raises:
        ServiceUnavailableError: no gateway, or MongoDB is still unreachable.
    """
    gateway: Optional[MongoGateway] = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise ServiceUnavailableError(service="database")
    if not gateway.connected and not await gateway.connect():
        raise ServiceUnavailableError(service="database")
    return gateway
