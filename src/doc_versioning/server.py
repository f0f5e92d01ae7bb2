"""MCP server implementation for doc-versioning."""

import asyncio
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from doc_versioning.config.settings import Settings
from doc_versioning.db.database import Database
from doc_versioning.db.repositories.document_repository import DocumentRepository
from doc_versioning.db.repositories.version_repository import VersionRepository
from doc_versioning.services.document_service import DocumentService
from doc_versioning.services.retention_manager import RetentionManager
from doc_versioning.services.version_manager import VersionManager
from doc_versioning.tools import document_tools, version_tools

# Initialize FastMCP server
mcp = FastMCP("doc-versioning")

# Global service instances (initialized in main)
document_service: DocumentService | None = None
version_manager: VersionManager | None = None
retention_manager: RetentionManager | None = None
db: Database | None = None

# Background tasks
_background_tasks: set[asyncio.Task[None]] = set()


async def initialize_services(settings: Settings) -> None:
    """Initialize all services and database.

    Args:
        settings: Application settings
    """
    global document_service, version_manager, retention_manager, db

    db = Database(settings.database_path)
    await db.connect()
    await db.migrate()

    document_service = DocumentService(DocumentRepository(db))

    version_repo = VersionRepository(db)
    version_manager = VersionManager(version_repo, document_service, settings=settings)
    retention_manager = RetentionManager(version_repo, settings=settings)

    if settings.retention_sweep_enabled:
        start_background_tasks(settings.retention_sweep_interval_seconds)


def start_background_tasks(interval: int) -> None:
    """Start the periodic retention sweep."""
    task = asyncio.create_task(_retention_sweep_task(interval))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


async def stop_background_tasks() -> None:
    """Stop all background tasks gracefully."""
    if not _background_tasks:
        return

    for task in _background_tasks:
        task.cancel()

    try:
        await asyncio.wait_for(
            asyncio.gather(*_background_tasks, return_exceptions=True),
            timeout=5.0,
        )
    except asyncio.TimeoutError:
        logging.warning("Background tasks did not stop within timeout")


async def _retention_sweep_task(interval: int) -> None:
    """Background task pruning old versions of every document."""
    while True:
        try:
            await asyncio.sleep(interval)

            if retention_manager:
                deleted = await retention_manager.cleanup_all_documents()
                if deleted:
                    logging.info(
                        f"Retention sweep pruned {sum(deleted.values())} versions "
                        f"across {len(deleted)} documents"
                    )
        except asyncio.CancelledError:
            logging.info("Retention sweep task cancelled")
            raise
        except Exception as e:
            logging.error(f"Error in retention sweep: {e}")


async def shutdown_services() -> None:
    """Shutdown all services and close database."""
    global db

    await stop_background_tasks()

    if db:
        await db.close()
        db = None


def _require_services() -> tuple[DocumentService, VersionManager, RetentionManager]:
    if not document_service or not version_manager or not retention_manager:
        raise RuntimeError("Services not initialized")
    return document_service, version_manager, retention_manager


# Document Tools
@mcp.tool()
async def document_create(
    title: str,
    content: str,
    created_by: str,
    created_by_name: str,
) -> dict[str, Any]:
    """Create a new document.

    Args:
        title: Document title
        content: Initial content
        created_by: Creator user ID
        created_by_name: Creator display name

    Returns:
        The created document
    """
    documents, _, _ = _require_services()
    return await document_tools.document_create(
        documents, title, content, created_by, created_by_name
    )


@mcp.tool()
async def document_get(document_id: str) -> dict[str, Any]:
    """Get a document with its current content.

    Args:
        document_id: Document ID

    Returns:
        The document
    """
    documents, _, _ = _require_services()
    return await document_tools.document_get(documents, document_id)


@mcp.tool()
async def document_save(
    document_id: str,
    content: str,
    editor_id: str,
    editor_name: str,
) -> dict[str, Any]:
    """Save document content, snapshotting significant changes automatically.

    Args:
        document_id: Document ID
        content: New content
        editor_id: Editing user ID
        editor_name: Editing user display name

    Returns:
        The updated document and the auto-snapshot version number, if any
    """
    documents, versions, _ = _require_services()
    return await document_tools.document_save(
        documents, versions, document_id, content, editor_id, editor_name
    )


# Version Tools
@mcp.tool()
async def version_create_snapshot(
    document_id: str,
    content: str,
    created_by: str,
    created_by_name: str,
    changes_summary: str | None = None,
) -> dict[str, Any]:
    """Create a manual snapshot of a document's content.

    Identical content returns the existing version.

    Args:
        document_id: Document ID
        content: Content to snapshot
        created_by: Creator user ID
        created_by_name: Creator display name
        changes_summary: Optional description of the changes

    Returns:
        The snapshot version
    """
    _, versions, _ = _require_services()
    return await version_tools.version_create_snapshot(
        versions, document_id, content, created_by, created_by_name, changes_summary
    )


@mcp.tool()
async def version_history(
    document_id: str,
    limit: int = 50,
    offset: int = 0,
    snapshots_only: bool = False,
) -> dict[str, Any]:
    """List versions of a document, newest first.

    Args:
        document_id: Document ID
        limit: Maximum versions to return (capped at 100)
        offset: Versions to skip
        snapshots_only: Only return snapshots

    Returns:
        Version history
    """
    _, versions, _ = _require_services()
    return await version_tools.version_history(
        versions, document_id, limit, offset, snapshots_only
    )


@mcp.tool()
async def version_get(version_id: str) -> dict[str, Any]:
    """Get a version with its full content.

    Args:
        version_id: Version ID

    Returns:
        The version
    """
    _, versions, _ = _require_services()
    return await version_tools.version_get(versions, version_id)


@mcp.tool()
async def version_compare(version_id1: str, version_id2: str) -> dict[str, Any]:
    """Compare two versions line by line.

    Args:
        version_id1: Older version ID
        version_id2: Newer version ID

    Returns:
        Line diff and summary counts
    """
    _, versions, _ = _require_services()
    return await version_tools.version_compare(versions, version_id1, version_id2)


@mcp.tool()
async def version_restore(
    document_id: str,
    version_id: str,
    restored_by: str,
    restored_by_name: str,
) -> dict[str, Any]:
    """Restore a document to a previous version, keeping a backup.

    Args:
        document_id: Document ID
        version_id: Version to restore
        restored_by: Restoring user ID
        restored_by_name: Restoring user display name

    Returns:
        Restore result
    """
    _, versions, _ = _require_services()
    return await version_tools.version_restore(
        versions, document_id, version_id, restored_by, restored_by_name
    )


@mcp.tool()
async def version_cleanup(
    document_id: str,
    keep_recent_count: int | None = None,
    keep_all_snapshots: bool | None = None,
    keep_restore_entries: bool | None = None,
) -> dict[str, Any]:
    """Prune old versions of a document.

    Args:
        document_id: Document ID
        keep_recent_count: Number of most recent versions to keep
        keep_all_snapshots: Keep all snapshots
        keep_restore_entries: Keep restore backups and records

    Returns:
        Retention result
    """
    _, _, retention = _require_services()
    return await version_tools.version_cleanup(
        retention, document_id, keep_recent_count, keep_all_snapshots, keep_restore_entries
    )


def create_server() -> FastMCP:
    """Get the configured MCP server instance."""
    return mcp
