"""
User request/response schemas.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ASSIGNABLE_ROLES = ("admin", "user")
DEFAULT_ROLE = "user"
RIDER_ROLE = "rider"


class UserCreate(BaseModel):
    """
    Signup payload. Only `email` is required; profile fields (name, photo,
    timestamps) are stored as sent. A client-supplied `role` is ignored:
    every account starts as a plain user.
    """

    model_config = ConfigDict(extra="allow")

    email: str = Field(min_length=1, description="Account email, unique per user")

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("email must not be blank")
        return v

    def to_document(self) -> Dict[str, Any]:
        document = self.model_dump(exclude_unset=True)
        document.update(self.model_extra or {})
        document["role"] = DEFAULT_ROLE
        return document


class UserCreated(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    inserted: bool
    inserted_id: Optional[str] = Field(default=None, alias="insertedId")


class RoleUpdate(BaseModel):
    role: str = Field(description="New role: admin or user")


class RoleResponse(BaseModel):
    role: str
