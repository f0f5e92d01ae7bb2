"""Service for pruning old document versions."""

import logging

from doc_versioning.config import get_settings
from doc_versioning.config.settings import Settings
from doc_versioning.db.repositories.version_repository import VersionRepository
from doc_versioning.exceptions import ValidationError
from doc_versioning.models.retention import RetentionResult
from doc_versioning.models.version import Version

logger = logging.getLogger(__name__)


class RetentionManager:
    """Deletes versions outside the retention window.

    Only deletes; never rewrites a version, so it is safe to run alongside
    snapshot creation and history reads.
    """

    def __init__(self, repository: VersionRepository, settings: Settings | None = None) -> None:
        """Initialize retention manager.

        Args:
            repository: Version repository
            settings: Application settings (default: global settings)
        """
        self.repository = repository
        self.settings = settings or get_settings()

    async def cleanup_old_versions(
        self,
        document_id: str,
        keep_recent_count: int | None = None,
        keep_all_snapshots: bool | None = None,
        keep_restore_entries: bool | None = None,
    ) -> int:
        """Delete old versions, keeping recent ones and protected snapshots.

        Args:
            document_id: Document ID
            keep_recent_count: Number of most recent versions always kept
            keep_all_snapshots: Keep every snapshot outside the window
            keep_restore_entries: Keep restore backups and records outside the window

        Returns:
            Number of versions deleted
        """
        result = await self.plan_cleanup(
            document_id,
            keep_recent_count=keep_recent_count,
            keep_all_snapshots=keep_all_snapshots,
            keep_restore_entries=keep_restore_entries,
        )
        return result.deleted

    async def plan_cleanup(
        self,
        document_id: str,
        keep_recent_count: int | None = None,
        keep_all_snapshots: bool | None = None,
        keep_restore_entries: bool | None = None,
    ) -> RetentionResult:
        """Run retention for one document and report what happened.

        Deletion is best-effort per version: a failure is logged and the
        pass continues.

        Raises:
            ValidationError: If document ID is missing or keep_recent_count is negative
        """
        if not document_id:
            raise ValidationError("Document ID is required")

        if keep_recent_count is None:
            keep_recent_count = self.settings.retention_keep_recent_count
        if keep_all_snapshots is None:
            keep_all_snapshots = self.settings.retention_keep_all_snapshots
        if keep_restore_entries is None:
            keep_restore_entries = self.settings.retention_keep_restore_entries

        if keep_recent_count < 0:
            raise ValidationError("keep_recent_count must be >= 0")

        versions = await self.repository.list_by_document(document_id)
        result = RetentionResult(document_id=document_id, total_versions=len(versions))

        if len(versions) <= keep_recent_count:
            return result

        to_delete: list[Version] = []
        for version in versions[keep_recent_count:]:
            if keep_all_snapshots and version.is_snapshot:
                result.retained_snapshots += 1
                continue
            if keep_restore_entries and version.kind.is_restore_entry:
                result.retained_snapshots += 1
                continue
            to_delete.append(version)

        result.candidates = len(to_delete)

        for version in to_delete:
            try:
                if await self.repository.delete(version.id):
                    result.deleted += 1
            except Exception as e:
                logger.error(f"Error deleting version {version.id}: {e}")
                result.failed.append(version.id)

        if result.deleted:
            logger.info(
                f"Pruned {result.deleted} of {result.total_versions} versions "
                f"of document {document_id}"
            )
        return result

    async def cleanup_all_documents(
        self,
        keep_recent_count: int | None = None,
        keep_all_snapshots: bool | None = None,
        keep_restore_entries: bool | None = None,
    ) -> dict[str, int]:
        """Run retention for every document that has versions.

        Returns:
            Deleted count per document ID (documents with nothing deleted omitted)
        """
        deleted: dict[str, int] = {}
        for document_id in await self.repository.list_document_ids():
            count = await self.cleanup_old_versions(
                document_id,
                keep_recent_count=keep_recent_count,
                keep_all_snapshots=keep_all_snapshots,
                keep_restore_entries=keep_restore_entries,
            )
            if count:
                deleted[document_id] = count
        return deleted
