"""Document versioning MCP tools."""

import logging
from typing import Any

from doc_versioning.exceptions import DocVersioningError
from doc_versioning.models.version import Version, VersionKind, VersionMetadata
from doc_versioning.services.retention_manager import RetentionManager
from doc_versioning.services.version_manager import VersionManager
from doc_versioning.tools import create_error_response

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200


def version_to_dict(version: Version, include_content: bool = True) -> dict[str, Any]:
    """Serialize a version for tool output."""
    data: dict[str, Any] = {
        "id": version.id,
        "document_id": version.document_id,
        "version_number": version.version_number,
        "content_hash": version.content_hash,
        "created_by": version.created_by,
        "created_by_name": version.created_by_name,
        "changes_summary": version.changes_summary,
        "kind": version.kind.value,
        "is_snapshot": version.is_snapshot,
        "created_at": version.created_at.isoformat(),
    }
    if include_content:
        data["content"] = version.content
    else:
        data["content_preview"] = version.content[:PREVIEW_LENGTH] + (
            "..." if len(version.content) > PREVIEW_LENGTH else ""
        )
    return data


async def version_create_snapshot(
    service: VersionManager,
    document_id: str,
    content: str,
    created_by: str,
    created_by_name: str,
    changes_summary: str | None = None,
) -> dict[str, Any]:
    """Create a manual snapshot of a document.

    Args:
        service: Version manager instance
        document_id: Document ID
        content: Content to snapshot
        created_by: Creator user ID
        created_by_name: Creator display name
        changes_summary: Optional description of the changes

    Returns:
        The created (or existing identical) version
    """
    try:
        version = await service.create_snapshot(
            document_id,
            content,
            VersionMetadata(
                created_by=created_by,
                created_by_name=created_by_name,
                changes_summary=changes_summary,
                kind=VersionKind.MANUAL_SNAPSHOT,
            ),
        )
        return version_to_dict(version, include_content=False)
    except DocVersioningError as e:
        return create_error_response(message=str(e), error_type=type(e).__name__)


async def version_history(
    service: VersionManager,
    document_id: str,
    limit: int = 50,
    offset: int = 0,
    snapshots_only: bool = False,
) -> dict[str, Any]:
    """Get version history for a document.

    Args:
        service: Version manager instance
        document_id: Document ID
        limit: Maximum versions to return (capped at 100)
        offset: Versions to skip
        snapshots_only: Only return snapshots

    Returns:
        Version history, newest first
    """
    try:
        versions = await service.get_version_history(
            document_id, limit=limit, offset=offset, snapshots_only=snapshots_only
        )
        return {
            "document_id": document_id,
            "count": len(versions),
            "versions": [version_to_dict(v, include_content=False) for v in versions],
        }
    except DocVersioningError as e:
        return create_error_response(message=str(e), error_type=type(e).__name__)


async def version_get(service: VersionManager, version_id: str) -> dict[str, Any]:
    """Get a specific version with its full content.

    Args:
        service: Version manager instance
        version_id: Version ID

    Returns:
        Version information including content
    """
    try:
        version = await service.get_version_content(version_id)
        return version_to_dict(version)
    except DocVersioningError as e:
        return create_error_response(message=str(e), error_type=type(e).__name__)


async def version_compare(
    service: VersionManager,
    version_id1: str,
    version_id2: str,
) -> dict[str, Any]:
    """Compare two versions line by line.

    Args:
        service: Version manager instance
        version_id1: Older version ID
        version_id2: Newer version ID

    Returns:
        Version headers, line diff and summary counts
    """
    try:
        comparison = await service.compare_versions(version_id1, version_id2)
        return {
            "version1": version_to_dict(comparison.version1, include_content=False),
            "version2": version_to_dict(comparison.version2, include_content=False),
            "diff": [line.model_dump(mode="json") for line in comparison.diff],
            "summary": comparison.summary.model_dump(),
        }
    except DocVersioningError as e:
        return create_error_response(message=str(e), error_type=type(e).__name__)


async def version_restore(
    service: VersionManager,
    document_id: str,
    version_id: str,
    restored_by: str,
    restored_by_name: str,
) -> dict[str, Any]:
    """Restore a document to a previous version.

    Args:
        service: Version manager instance
        document_id: Document ID
        version_id: Version to restore
        restored_by: Restoring user ID
        restored_by_name: Restoring user display name

    Returns:
        Restore result with the document's new content
    """
    try:
        document = await service.restore_version(
            document_id, version_id, restored_by, restored_by_name
        )
        return {
            "document_id": document.id,
            "restored_version_id": version_id,
            "content": document.content,
            "content_version": document.content_version,
            "updated_at": document.updated_at.isoformat(),
        }
    except DocVersioningError as e:
        logger.warning("Restore of %s to %s failed: %s", document_id, version_id, e)
        return create_error_response(message=str(e), error_type=type(e).__name__)


async def version_cleanup(
    service: RetentionManager,
    document_id: str,
    keep_recent_count: int | None = None,
    keep_all_snapshots: bool | None = None,
    keep_restore_entries: bool | None = None,
) -> dict[str, Any]:
    """Prune old versions of a document.

    Args:
        service: Retention manager instance
        document_id: Document ID
        keep_recent_count: Number of most recent versions to keep
        keep_all_snapshots: Keep all snapshots
        keep_restore_entries: Keep restore backups and records

    Returns:
        Retention result
    """
    try:
        result = await service.plan_cleanup(
            document_id,
            keep_recent_count=keep_recent_count,
            keep_all_snapshots=keep_all_snapshots,
            keep_restore_entries=keep_restore_entries,
        )
        return result.model_dump()
    except DocVersioningError as e:
        return create_error_response(message=str(e), error_type=type(e).__name__)
