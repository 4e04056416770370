"""
Email Builder Backend — Template Request/Response Schemas
==========================================================

What:  Pydantic models defining the template API contract.
How:   FastAPI validates request bodies against TemplatePayload and
       serializes TemplateResponse with camelCase keys
       (`createdAt`, `updatedAt`) the frontend expects.

Sections are `JsonValue`s: any JSON the frontend sends is stored and
returned untouched, in the same order.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator
from pydantic.alias_generators import to_camel


class TemplatePayload(BaseModel):
    """
    Body of POST /api/email-templates and PUT /api/email-templates/{id}.

    `title` is optional at this layer: the store rejects a missing or empty
    title, which surfaces as the operation's generic 500 error.
    An omitted `sections` is stored as an empty list.
    """
    title: Optional[str] = Field(default=None, description="Template title")
    sections: Optional[List[JsonValue]] = Field(
        default=None,
        description="Ordered section blocks; contents are not inspected",
    )

    model_config = ConfigDict(extra="ignore")


class TemplateResponse(BaseModel):
    """
    Full representation of a stored template.

    Example:
        {
            "id": "0b7e5a9c-4a57-4c51-9a40-3a1f4d6a0f11",
            "title": "Welcome",
            "sections": [{"type": "text", "value": "Hi"}],
            "createdAt": "2024-05-01T09:30:00Z",
            "updatedAt": "2024-05-01T09:30:00Z"
        }
    """
    id: uuid.UUID = Field(description="Template identifier assigned by the store")
    title: str = Field(description="Template title")
    sections: List[JsonValue] = Field(description="Ordered section blocks")
    created_at: datetime = Field(description="Creation time (UTC)")
    updated_at: datetime = Field(description="Last modification time (UTC)")

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """SQLite hands back naive datetimes; every stored value is UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class DeleteResponse(BaseModel):
    message: str = Field(default="Template deleted successfully.")
