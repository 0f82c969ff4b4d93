"""
ProFast Parcel API — Shared Response Schemas
==============================================

What:  Write-result, error and health models shared by every router.
How:   Write results keep the driver-style camelCase keys clients already
       consume (`insertedId`, `modifiedCount`, ...). Python code builds them
       with snake_case names; FastAPI serializes by alias.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from profast.database import DeleteOutcome, InsertOutcome, UpdateOutcome


class InsertResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = Field(description="Write acknowledged by the server")
    inserted_id: str = Field(alias="insertedId", description="Id of the new document")

    @classmethod
    def from_outcome(cls, outcome: InsertOutcome) -> "InsertResult":
        return cls(acknowledged=outcome.acknowledged, inserted_id=outcome.inserted_id)


class UpdateResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool
    matched_count: int = Field(alias="matchedCount")
    modified_count: int = Field(alias="modifiedCount")
    upserted_id: Optional[str] = Field(default=None, alias="upsertedId")

    @classmethod
    def from_outcome(cls, outcome: UpdateOutcome) -> "UpdateResult":
        return cls(
            acknowledged=outcome.acknowledged,
            matched_count=outcome.matched_count,
            modified_count=outcome.modified_count,
            upserted_id=outcome.upserted_id,
        )


class DeleteResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool
    deleted_count: int = Field(alias="deletedCount")

    @classmethod
    def from_outcome(cls, outcome: DeleteOutcome) -> "DeleteResult":
        return cls(acknowledged=outcome.acknowledged, deleted_count=outcome.deleted_count)


class ErrorResponse(BaseModel):
    """
    Body of every error response.

    `message` is always present; `details` only for validation errors.
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None)
    request_id: Optional[str] = Field(default=None)


class HealthResponse(BaseModel):
    status: str = Field(description="healthy, degraded or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    identity_provider: str = Field(description="configured or unavailable")
    payment_gateway: str = Field(description="configured or unavailable")
    uptime_seconds: float
