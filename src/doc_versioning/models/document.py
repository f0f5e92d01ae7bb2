"""Live document models."""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


class Document(BaseModel):
    """Document with its current live content."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    content: str = ""
    content_version: int = Field(default=1, ge=1)
    created_by: str
    created_by_name: str
    last_modified_by: str | None = None
    last_modified_by_name: str | None = None
    collaborators: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class DocumentUpdate(BaseModel):
    """Document update request."""

    title: str | None = None
    content: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Title must be a non-empty string")
        if len(v) > 200:
            raise ValueError("Title must be less than 200 characters")
        return v
