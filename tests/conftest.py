"""Pytest configuration and fixtures for doc-versioning tests."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from doc_versioning.config.settings import Settings
from doc_versioning.db.database import Database
from doc_versioning.db.repositories.document_repository import DocumentRepository
from doc_versioning.db.repositories.version_repository import VersionRepository
from doc_versioning.models.document import Document
from doc_versioning.services.document_service import DocumentService
from doc_versioning.services.retention_manager import RetentionManager
from doc_versioning.services.version_manager import VersionManager


@pytest.fixture
def test_settings() -> Settings:
    """Test configuration settings."""
    return Settings(
        database_path=":memory:",
        history_default_limit=50,
        history_max_limit=100,
        diff_strategy="positional",
        retention_keep_recent_count=50,
        retention_keep_all_snapshots=True,
        retention_keep_restore_entries=True,
        log_level="INFO",
    )


@pytest_asyncio.fixture
async def memory_db() -> AsyncIterator[Database]:
    """In-memory database for fast tests."""
    db = Database(database_path=":memory:")
    await db.connect()
    await db.migrate()

    yield db

    await db.close()


@pytest_asyncio.fixture
async def version_repository(memory_db: Database) -> VersionRepository:
    """Version repository."""
    return VersionRepository(db=memory_db)


@pytest_asyncio.fixture
async def document_repository(memory_db: Database) -> DocumentRepository:
    """Document repository."""
    return DocumentRepository(db=memory_db)


@pytest_asyncio.fixture
async def document_service(document_repository: DocumentRepository) -> DocumentService:
    """Document service."""
    return DocumentService(repository=document_repository)


@pytest_asyncio.fixture
async def version_manager(
    version_repository: VersionRepository,
    document_service: DocumentService,
    test_settings: Settings,
) -> VersionManager:
    """Version manager."""
    return VersionManager(
        repository=version_repository,
        document_service=document_service,
        settings=test_settings,
    )


@pytest_asyncio.fixture
async def retention_manager(
    version_repository: VersionRepository, test_settings: Settings
) -> RetentionManager:
    """Retention manager."""
    return RetentionManager(repository=version_repository, settings=test_settings)


@pytest_asyncio.fixture
async def document(document_service: DocumentService) -> Document:
    """A live document owned by alice."""
    return await document_service.create_document(
        title="Design notes",
        content="first line\nsecond line",
        created_by="user-1",
        created_by_name="Alice",
    )

