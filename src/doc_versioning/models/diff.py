"""Line diff models."""

from enum import Enum

from pydantic import BaseModel

from doc_versioning.models.version import Version


class DiffType(str, Enum):
    """Line operation type."""

    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class DiffLine(BaseModel):
    """A single line operation in a diff."""

    type: DiffType
    content: str
    line_number: int
    old_line_number: int | None = None
    new_line_number: int | None = None


class DiffSummary(BaseModel):
    """Aggregate line counts for a diff."""

    lines_added: int = 0
    lines_removed: int = 0
    lines_modified: int = 0


class VersionComparison(BaseModel):
    """Result of comparing two versions."""

    version1: Version
    version2: Version
    diff: list[DiffLine]
    summary: DiffSummary
