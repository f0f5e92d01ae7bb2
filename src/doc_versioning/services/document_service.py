"""Service owning live document content."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from doc_versioning.db.repositories.document_repository import DocumentRepository
from doc_versioning.exceptions import NotFoundError, ValidationError
from doc_versioning.models.document import Document, DocumentUpdate

logger = logging.getLogger(__name__)


class DocumentService:
    """Service for reading and updating live documents."""

    def __init__(self, repository: DocumentRepository) -> None:
        """Initialize document service.

        Args:
            repository: Document repository
        """
        self.repository = repository

    async def create_document(
        self,
        title: str,
        content: str,
        created_by: str,
        created_by_name: str,
    ) -> Document:
        """Create a new document.

        Raises:
            ValidationError: If title or creator information is missing
        """
        if not created_by or not created_by_name:
            raise ValidationError("Creator information is required")

        if not title:
            raise ValidationError("Title must be a non-empty string")
        try:
            title = DocumentUpdate(title=title).title
        except PydanticValidationError as e:
            raise ValidationError(e.errors()[0]["msg"]) from e

        document = Document(
            title=title,
            content=content or "",
            created_by=created_by,
            created_by_name=created_by_name,
            last_modified_by=created_by,
            last_modified_by_name=created_by_name,
            collaborators=[created_by],
        )
        return await self.repository.create(document)

    async def get_document(self, document_id: str) -> Document:
        """Get a document by ID.

        Raises:
            ValidationError: If document_id is empty
            NotFoundError: If the document does not exist
        """
        if not document_id:
            raise ValidationError("Document ID is required")

        document = await self.repository.find_by_id(document_id)
        if not document:
            raise NotFoundError(f"Document not found: {document_id}")
        return document

    async def update_document(
        self,
        document_id: str,
        updates: DocumentUpdate | dict[str, Any],
        editor_id: str,
        editor_name: str,
    ) -> Document:
        """Update a document's title and/or content.

        A content change bumps content_version. The editor is recorded as the
        last modifier and added to the collaborators.

        Args:
            document_id: Document ID
            updates: Fields to change
            editor_id: ID of the user making the change
            editor_name: Display name of the user making the change

        Returns:
            The updated document

        Raises:
            ValidationError: If arguments or updates are invalid
            NotFoundError: If the document does not exist
        """
        if not document_id:
            raise ValidationError("Document ID is required")
        if not editor_id or not editor_name:
            raise ValidationError("Updater information is required")

        if isinstance(updates, dict):
            try:
                updates = DocumentUpdate(**updates)
            except PydanticValidationError as e:
                raise ValidationError(e.errors()[0]["msg"]) from e

        current = await self.get_document(document_id)

        fields: dict[str, Any] = {
            "last_modified_by": editor_id,
            "last_modified_by_name": editor_name,
        }
        if updates.title is not None:
            fields["title"] = updates.title
        if updates.content is not None:
            fields["content"] = updates.content
            fields["content_version"] = current.content_version + 1
        if editor_id not in current.collaborators:
            fields["collaborators"] = [*current.collaborators, editor_id]

        updated = await self.repository.update(document_id, fields)
        if not updated:
            raise NotFoundError(f"Document not found: {document_id}")

        logger.debug(f"Updated document {document_id} (content_version={updated.content_version})")
        return updated
