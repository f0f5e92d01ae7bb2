"""Service layer for business logic."""

from doc_versioning.services.content_hasher import ContentHasher
from doc_versioning.services.diff_engine import (
    DiffEngine,
    DiffStrategy,
    PositionalLineDiff,
    SequenceLineDiff,
)
from doc_versioning.services.document_service import DocumentService
from doc_versioning.services.retention_manager import RetentionManager
from doc_versioning.services.snapshot_policy import SnapshotPolicy
from doc_versioning.services.version_manager import VersionManager

__all__ = [
    "ContentHasher",
    "DiffEngine",
    "DiffStrategy",
    "PositionalLineDiff",
    "SequenceLineDiff",
    "DocumentService",
    "RetentionManager",
    "SnapshotPolicy",
    "VersionManager",
]
