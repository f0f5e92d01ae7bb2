"""Document MCP tools."""

from typing import Any

from doc_versioning.exceptions import DocVersioningError
from doc_versioning.models.document import Document, DocumentUpdate
from doc_versioning.services.document_service import DocumentService
from doc_versioning.services.version_manager import VersionManager
from doc_versioning.tools import create_error_response


def document_to_dict(document: Document) -> dict[str, Any]:
    return document.model_dump(mode="json")


async def document_create(
    service: DocumentService,
    title: str,
    content: str,
    created_by: str,
    created_by_name: str,
) -> dict[str, Any]:
    """Create a new document.

    Args:
        service: Document service instance
        title: Document title
        content: Initial content
        created_by: Creator user ID
        created_by_name: Creator display name

    Returns:
        The created document
    """
    try:
        document = await service.create_document(title, content, created_by, created_by_name)
        return document_to_dict(document)
    except DocVersioningError as e:
        return create_error_response(message=str(e), error_type=type(e).__name__)


async def document_get(service: DocumentService, document_id: str) -> dict[str, Any]:
    """Get a document with its live content."""
    try:
        return document_to_dict(await service.get_document(document_id))
    except DocVersioningError as e:
        return create_error_response(message=str(e), error_type=type(e).__name__)


async def document_save(
    service: DocumentService,
    version_manager: VersionManager,
    document_id: str,
    content: str,
    editor_id: str,
    editor_name: str,
) -> dict[str, Any]:
    """Save new content and auto-snapshot significant changes.

    The snapshot is best-effort; a failed snapshot never fails the save.

    Args:
        service: Document service instance
        version_manager: Version manager instance
        document_id: Document ID
        content: New content
        editor_id: Editing user ID
        editor_name: Editing user display name

    Returns:
        The updated document and the auto-snapshot version number, if any
    """
    try:
        current = await service.get_document(document_id)
        document = await service.update_document(
            document_id, DocumentUpdate(content=content), editor_id, editor_name
        )
    except DocVersioningError as e:
        return create_error_response(message=str(e), error_type=type(e).__name__)

    snapshot = await version_manager.create_auto_snapshot(
        document_id, current.content, content, editor_id, editor_name
    )

    return {
        "document": document_to_dict(document),
        "snapshot_version": snapshot.version_number if snapshot else None,
    }
