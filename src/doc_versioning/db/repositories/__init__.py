"""Repository modules for data access."""

from doc_versioning.db.repositories.document_repository import DocumentRepository
from doc_versioning.db.repositories.version_repository import VersionRepository

__all__ = ["VersionRepository", "DocumentRepository"]
