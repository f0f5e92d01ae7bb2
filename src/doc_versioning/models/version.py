"""Document version models."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class VersionKind(str, Enum):
    """Provenance of a version entry."""

    AUTO_SNAPSHOT = "auto_snapshot"
    MANUAL_SNAPSHOT = "manual_snapshot"
    RESTORE_BACKUP = "restore_backup"
    RESTORE_RECORD = "restore_record"

    @property
    def is_snapshot(self) -> bool:
        """Everything except automatic snapshots counts as a snapshot."""
        return self is not VersionKind.AUTO_SNAPSHOT

    @property
    def is_restore_entry(self) -> bool:
        return self in (VersionKind.RESTORE_BACKUP, VersionKind.RESTORE_RECORD)


class Version(BaseModel):
    """Immutable full-content snapshot of a document."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    document_id: str
    version_number: int = Field(ge=1)
    content: str
    content_hash: str
    created_by: str
    created_by_name: str
    changes_summary: str
    kind: VersionKind = VersionKind.AUTO_SNAPSHOT
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_snapshot(self) -> bool:
        return self.kind.is_snapshot


class VersionMetadata(BaseModel):
    """Actor and provenance information for a new version."""

    created_by: str | None = None
    created_by_name: str | None = None
    changes_summary: str | None = None
    is_snapshot: bool = False
    kind: VersionKind | None = None

    def resolve_kind(self) -> VersionKind:
        """Explicit kind wins, otherwise derive it from the snapshot flag."""
        if self.kind is not None:
            return self.kind
        if self.is_snapshot:
            return VersionKind.MANUAL_SNAPSHOT
        return VersionKind.AUTO_SNAPSHOT
