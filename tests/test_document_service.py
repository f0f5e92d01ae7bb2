"""Tests for the document service."""

import pytest

from doc_versioning.exceptions import NotFoundError, ValidationError
from doc_versioning.models.document import DocumentUpdate


class TestDocumentService:
    """Test live document reads and updates."""

    async def test_create_and_get(self, document_service):
        created = await document_service.create_document("  Notes ", "body", "user-1", "Alice")

        document = await document_service.get_document(created.id)

        assert document.title == "Notes"
        assert document.content == "body"
        assert document.content_version == 1
        assert document.collaborators == ["user-1"]

    async def test_create_requires_title(self, document_service):
        with pytest.raises(ValidationError):
            await document_service.create_document("   ", "body", "user-1", "Alice")

    async def test_get_missing(self, document_service):
        with pytest.raises(NotFoundError):
            await document_service.get_document("missing")

    async def test_update_content_bumps_version(self, document_service, document):
        updated = await document_service.update_document(
            document.id, DocumentUpdate(content="new body"), "user-2", "Bob"
        )

        assert updated.content == "new body"
        assert updated.content_version == document.content_version + 1
        assert updated.last_modified_by == "user-2"
        assert updated.last_modified_by_name == "Bob"
        assert updated.collaborators == ["user-1", "user-2"]

    async def test_update_title_only(self, document_service, document):
        updated = await document_service.update_document(
            document.id, {"title": "Renamed"}, "user-1", "Alice"
        )

        assert updated.title == "Renamed"
        assert updated.content == document.content
        assert updated.content_version == document.content_version
        assert updated.collaborators == ["user-1"]

    async def test_update_rejects_long_title(self, document_service, document):
        with pytest.raises(ValidationError):
            await document_service.update_document(
                document.id, {"title": "x" * 201}, "user-1", "Alice"
            )

    async def test_update_requires_editor(self, document_service, document):
        with pytest.raises(ValidationError):
            await document_service.update_document(document.id, {"content": "x"}, "", "")

    async def test_update_missing_document(self, document_service):
        with pytest.raises(NotFoundError):
            await document_service.update_document("missing", {"content": "x"}, "user-1", "Alice")
