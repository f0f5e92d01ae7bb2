"""Data models for doc-versioning."""

from doc_versioning.models.diff import DiffLine, DiffSummary, DiffType, VersionComparison
from doc_versioning.models.document import Document, DocumentUpdate
from doc_versioning.models.retention import RetentionResult
from doc_versioning.models.version import Version, VersionKind, VersionMetadata

__all__ = [
    # Version models
    "Version",
    "VersionKind",
    "VersionMetadata",
    # Diff models
    "DiffType",
    "DiffLine",
    "DiffSummary",
    "VersionComparison",
    # Document models
    "Document",
    "DocumentUpdate",
    # Retention models
    "RetentionResult",
]
