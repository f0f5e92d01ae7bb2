"""Service for creating, reading, comparing and restoring document versions."""

import asyncio
import logging
from typing import Any

from doc_versioning.config import get_settings
from doc_versioning.config.settings import Settings
from doc_versioning.db.repositories.version_repository import VersionRepository
from doc_versioning.exceptions import ConflictError, MismatchError, ValidationError
from doc_versioning.models.diff import VersionComparison
from doc_versioning.models.document import Document, DocumentUpdate
from doc_versioning.models.version import Version, VersionKind, VersionMetadata
from doc_versioning.services.content_hasher import ContentHasher
from doc_versioning.services.diff_engine import DiffEngine
from doc_versioning.services.document_service import DocumentService
from doc_versioning.services.snapshot_policy import SnapshotPolicy
from doc_versioning.utils.locks import KeyedLock

logger = logging.getLogger(__name__)


class VersionManager:
    """Service for managing document versions.

    Writes for one document are serialized in-process with a per-document
    lock; the store's uniqueness constraints cover writers in other
    processes.
    """

    def __init__(
        self,
        repository: VersionRepository,
        document_service: DocumentService,
        diff_engine: DiffEngine | None = None,
        snapshot_policy: SnapshotPolicy | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize version manager.

        Args:
            repository: Version repository
            document_service: Service owning live document content
            diff_engine: Diff engine (default: strategy from settings)
            snapshot_policy: Auto-snapshot policy (default: thresholds from settings)
            settings: Application settings (default: global settings)
        """
        self.repository = repository
        self.document_service = document_service
        self.settings = settings or get_settings()
        self.diff_engine = diff_engine or DiffEngine.from_name(self.settings.diff_strategy)
        self.snapshot_policy = snapshot_policy or SnapshotPolicy.from_settings(self.settings)
        self.hasher = ContentHasher()
        self._locks = KeyedLock()

    async def create_snapshot(
        self,
        document_id: str,
        content: str,
        metadata: VersionMetadata | dict[str, Any] | None = None,
    ) -> Version:
        """Create a version snapshot of a document.

        Identical content for the same document returns the existing version
        without consuming a version number.

        Args:
            document_id: Document ID
            content: Full document content at this version
            metadata: Creator, summary and provenance of the version

        Returns:
            The new version, or the existing one with the same content

        Raises:
            ValidationError: If document ID, content or creator information is missing
        """
        if metadata is None:
            metadata = VersionMetadata()
        elif isinstance(metadata, dict):
            metadata = VersionMetadata(**metadata)

        if not document_id or not content or not metadata.created_by or not metadata.created_by_name:
            raise ValidationError("Document ID, content, and creator information are required")

        return await self._record_version(
            document_id, content, metadata, metadata.resolve_kind(), deduplicate=True
        )

    async def _record_version(
        self,
        document_id: str,
        content: str,
        metadata: VersionMetadata,
        kind: VersionKind,
        deduplicate: bool,
    ) -> Version:
        content_hash = self.hasher.calculate_hash(content)

        async with self._locks.acquire(document_id):
            if deduplicate:
                existing = await self.repository.find_by_hash(document_id, content_hash)
                if existing:
                    logger.debug(
                        f"Content already stored as version {existing.version_number} "
                        f"of document {document_id}"
                    )
                    return existing

            next_version_number = await self.repository.max_version_number(document_id) + 1
            version = Version(
                document_id=document_id,
                version_number=next_version_number,
                content=content,
                content_hash=content_hash,
                created_by=metadata.created_by or "",
                created_by_name=metadata.created_by_name or "",
                changes_summary=metadata.changes_summary or self.settings.default_changes_summary,
                kind=kind,
            )

            try:
                return await self.repository.create(version)
            except ConflictError:
                # Another process stored the same content first
                if not deduplicate:
                    raise
                existing = await self.repository.find_by_hash(document_id, content_hash)
                if existing is None:
                    raise
                return existing

    async def get_version_history(
        self,
        document_id: str,
        limit: int | None = None,
        offset: int = 0,
        snapshots_only: bool = False,
    ) -> list[Version]:
        """Get version history for a document, newest first.

        Args:
            document_id: Document ID
            limit: Maximum versions to return (default 50, capped at 100)
            offset: Versions to skip, for pagination
            snapshots_only: Only return snapshots (manual and restore entries)

        Returns:
            Versions ordered by version number descending

        Raises:
            ValidationError: If document ID is missing or paging is negative
        """
        if not document_id:
            raise ValidationError("Document ID is required")
        if limit is not None and limit < 0:
            raise ValidationError("limit must be >= 0")
        if offset < 0:
            raise ValidationError("offset must be >= 0")

        if not limit:
            limit = self.settings.history_default_limit
        limit = min(limit, self.settings.history_max_limit)

        return await self.repository.list_by_document(
            document_id, limit=limit, offset=offset, snapshots_only=snapshots_only
        )

    async def get_latest_version(self, document_id: str) -> Version | None:
        versions = await self.get_version_history(document_id, limit=1)
        return versions[0] if versions else None

    async def get_version_content(self, version_id: str) -> Version:
        """Get a specific version with its content.

        Raises:
            ValidationError: If version ID is missing
            NotFoundError: If the version does not exist
        """
        if not version_id:
            raise ValidationError("Version ID is required")

        return await self.repository.get(version_id)

    async def compare_versions(self, version_id1: str, version_id2: str) -> VersionComparison:
        """Compare two versions line by line.

        Args:
            version_id1: First (older) version ID
            version_id2: Second (newer) version ID

        Returns:
            Both versions, the diff and its summary

        Raises:
            ValidationError: If either ID is missing
            NotFoundError: If either version does not exist
        """
        if not version_id1 or not version_id2:
            raise ValidationError("Both version IDs are required")

        version1, version2 = await asyncio.gather(
            self.get_version_content(version_id1),
            self.get_version_content(version_id2),
        )

        diff = self.diff_engine.generate_diff(version1.content, version2.content)

        return VersionComparison(
            version1=version1,
            version2=version2,
            diff=diff,
            summary=self.diff_engine.compare_summary(diff),
        )

    async def restore_version(
        self,
        document_id: str,
        version_id: str,
        restored_by: str,
        restored_by_name: str,
    ) -> Document:
        """Restore a document to a previous version.

        Records a backup of the live content, replaces the live content with
        the target version's content, then records the restoration. Both
        entries are always written, even when their content already exists.

        Args:
            document_id: Document ID
            version_id: Version to restore
            restored_by: ID of the user performing the restoration
            restored_by_name: Name of the user performing the restoration

        Returns:
            The updated document

        Raises:
            ValidationError: If any argument is missing
            NotFoundError: If the version or document does not exist
            MismatchError: If the version belongs to another document
        """
        if not document_id or not version_id or not restored_by or not restored_by_name:
            raise ValidationError(
                "Document ID, version ID, and restorer information are required"
            )

        target = await self.get_version_content(version_id)
        if target.document_id != document_id:
            raise MismatchError(
                f"Version {version_id} does not belong to document {document_id}"
            )

        current_document = await self.document_service.get_document(document_id)

        backup = await self._record_version(
            document_id,
            current_document.content,
            VersionMetadata(
                created_by=restored_by,
                created_by_name=restored_by_name,
                changes_summary=f"Backup before restoring to version {target.version_number}",
            ),
            VersionKind.RESTORE_BACKUP,
            deduplicate=False,
        )

        updated_document = await self.document_service.update_document(
            document_id,
            DocumentUpdate(content=target.content),
            restored_by,
            restored_by_name,
        )

        record = await self._record_version(
            document_id,
            target.content,
            VersionMetadata(
                created_by=restored_by,
                created_by_name=restored_by_name,
                changes_summary=(
                    f"Restored to version {target.version_number} ({target.changes_summary})"
                ),
            ),
            VersionKind.RESTORE_RECORD,
            deduplicate=False,
        )

        logger.info(
            f"Restored document {document_id} to version {target.version_number} "
            f"(backup v{backup.version_number}, record v{record.version_number})"
        )
        return updated_document

    async def create_auto_snapshot(
        self,
        document_id: str,
        old_content: str | None,
        new_content: str | None,
        user_id: str,
        user_name: str,
    ) -> Version | None:
        """Create a snapshot if the edit is significant.

        Never raises: failures are logged and reported as None so the
        caller's save path is not interrupted.

        Args:
            document_id: Document ID
            old_content: Content before the edit
            new_content: Content after the edit
            user_id: ID of the user making the change
            user_name: Name of the user making the change

        Returns:
            The snapshot, or None if none was needed or creation failed
        """
        try:
            if not self.snapshot_policy.should_auto_snapshot(old_content, new_content):
                return None

            changes_summary = self.snapshot_policy.summarize(old_content, new_content)

            return await self.create_snapshot(
                document_id,
                new_content or "",
                VersionMetadata(
                    created_by=user_id,
                    created_by_name=user_name,
                    changes_summary=changes_summary,
                    kind=VersionKind.AUTO_SNAPSHOT,
                ),
            )
        except Exception as e:
            logger.error(f"Error creating auto snapshot for document {document_id}: {e}")
            return None
