"""Retention models."""

from pydantic import BaseModel, Field


class RetentionResult(BaseModel):
    """Outcome of a retention pass over one document."""

    document_id: str
    total_versions: int = 0
    candidates: int = 0
    deleted: int = 0
    retained_snapshots: int = 0
    failed: list[str] = Field(default_factory=list)
