"""Tests for document versioning: snapshots, history, compare, restore."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from doc_versioning.exceptions import (
    MismatchError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from doc_versioning.models.diff import DiffType
from doc_versioning.models.version import Version, VersionKind, VersionMetadata

ALICE = {"created_by": "user-1", "created_by_name": "Alice"}


class TestCreateSnapshot:
    """Test snapshot creation, dedup and numbering."""

    async def test_first_version_is_one(self, version_manager, document):
        version = await version_manager.create_snapshot(document.id, "hello", ALICE)

        assert version.version_number == 1
        assert version.document_id == document.id
        assert version.content == "hello"
        assert version.changes_summary == "Document updated"
        assert version.kind is VersionKind.AUTO_SNAPSHOT
        assert version.is_snapshot is False

    async def test_manual_snapshot_flag(self, version_manager, document):
        version = await version_manager.create_snapshot(
            document.id,
            "hello",
            {**ALICE, "changes_summary": "Checkpoint", "is_snapshot": True},
        )

        assert version.kind is VersionKind.MANUAL_SNAPSHOT
        assert version.is_snapshot is True
        assert version.changes_summary == "Checkpoint"

    async def test_accepts_metadata_model(self, version_manager, document):
        version = await version_manager.create_snapshot(
            document.id,
            "hello",
            VersionMetadata(created_by="user-2", created_by_name="Bob"),
        )

        assert version.created_by == "user-2"
        assert version.created_by_name == "Bob"

    async def test_identical_content_returns_existing(
        self, version_manager, version_repository, document
    ):
        first = await version_manager.create_snapshot(document.id, "same", ALICE)
        second = await version_manager.create_snapshot(
            document.id, "same", {"created_by": "user-2", "created_by_name": "Bob"}
        )

        assert second.id == first.id
        assert second.version_number == first.version_number
        assert second.created_by == "user-1"
        assert await version_repository.count(document.id) == 1

    async def test_dedup_does_not_consume_version_number(self, version_manager, document):
        await version_manager.create_snapshot(document.id, "one", ALICE)
        await version_manager.create_snapshot(document.id, "one", ALICE)
        second = await version_manager.create_snapshot(document.id, "two", ALICE)

        assert second.version_number == 2

    async def test_same_content_different_documents(self, version_manager):
        a = await version_manager.create_snapshot("doc-a", "shared", ALICE)
        b = await version_manager.create_snapshot("doc-b", "shared", ALICE)

        assert a.id != b.id
        assert a.content_hash == b.content_hash
        assert b.version_number == 1

    async def test_version_numbers_increase_without_gaps(self, version_manager, document):
        numbers = []
        for i in range(5):
            version = await version_manager.create_snapshot(document.id, f"content {i}", ALICE)
            numbers.append(version.version_number)

        assert numbers == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize(
        "document_id,content,metadata",
        [
            ("", "content", ALICE),
            ("doc-1", "", ALICE),
            ("doc-1", "content", {"created_by_name": "Alice"}),
            ("doc-1", "content", {"created_by": "user-1"}),
            ("doc-1", "content", None),
        ],
    )
    async def test_missing_required_fields(self, version_manager, document_id, content, metadata):
        with pytest.raises(ValidationError):
            await version_manager.create_snapshot(document_id, content, metadata)

    async def test_concurrent_identical_snapshots_deduplicate(
        self, version_manager, version_repository, document
    ):
        versions = await asyncio.gather(
            *(version_manager.create_snapshot(document.id, "racing", ALICE) for _ in range(5))
        )

        assert len({v.id for v in versions}) == 1
        assert await version_repository.count(document.id) == 1

    async def test_concurrent_distinct_snapshots_get_unique_numbers(
        self, version_manager, document
    ):
        versions = await asyncio.gather(
            *(version_manager.create_snapshot(document.id, f"v{i}", ALICE) for i in range(5))
        )

        assert sorted(v.version_number for v in versions) == [1, 2, 3, 4, 5]

    async def test_failed_write_keeps_other_documents(
        self, version_manager, version_repository, memory_db, monkeypatch
    ):
        original_execute = memory_db.execute

        async def failing_execute(sql, parameters=()):
            if "INSERT INTO document_versions" in sql and "doc-a" in parameters:
                await asyncio.sleep(0.05)
                raise StoreError("disk I/O error")
            return await original_execute(sql, parameters)

        monkeypatch.setattr(memory_db, "execute", failing_execute)

        results = await asyncio.gather(
            version_manager.create_snapshot("doc-a", "x", ALICE),
            version_manager.create_snapshot("doc-b", "y", ALICE),
            return_exceptions=True,
        )

        assert isinstance(results[0], StoreError)
        assert isinstance(results[1], Version)
        assert await version_repository.count("doc-a") == 0
        assert await version_repository.count("doc-b") == 1

    async def test_conflicting_insert_resolves_to_existing(
        self, version_manager, version_repository, document, monkeypatch
    ):
        # Simulates a writer in another process winning the race
        existing = await version_repository.create(
            Version(
                document_id=document.id,
                version_number=1,
                content="contested",
                content_hash=version_manager.hasher.calculate_hash("contested"),
                created_by="user-9",
                created_by_name="Other",
                changes_summary="Document updated",
            )
        )
        monkeypatch.setattr(
            version_repository,
            "find_by_hash",
            AsyncMock(side_effect=[None, existing]),
        )

        version = await version_manager.create_snapshot(document.id, "contested", ALICE)

        assert version.id == existing.id
        assert await version_repository.count(document.id) == 1


class TestVersionHistory:
    """Test version history retrieval."""

    async def test_history_descending(self, version_manager, document):
        for i in range(3):
            await version_manager.create_snapshot(document.id, f"content {i}", ALICE)

        history = await version_manager.get_version_history(document.id)

        assert [v.version_number for v in history] == [3, 2, 1]

    async def test_limit_and_offset(self, version_manager, document):
        for i in range(6):
            await version_manager.create_snapshot(document.id, f"content {i}", ALICE)

        page = await version_manager.get_version_history(document.id, limit=2, offset=1)

        assert [v.version_number for v in page] == [5, 4]

    async def test_limit_is_capped(self, version_repository, document_service, document):
        from doc_versioning.config.settings import Settings
        from doc_versioning.services.version_manager import VersionManager

        manager = VersionManager(
            version_repository,
            document_service,
            settings=Settings(
                database_path=":memory:", history_default_limit=3, history_max_limit=4
            ),
        )
        for i in range(6):
            await manager.create_snapshot(document.id, f"content {i}", ALICE)

        assert len(await manager.get_version_history(document.id)) == 3
        assert len(await manager.get_version_history(document.id, limit=100)) == 4

    async def test_snapshots_only(self, version_manager, document):
        await version_manager.create_snapshot(document.id, "auto", ALICE)
        await version_manager.create_snapshot(
            document.id, "manual", {**ALICE, "is_snapshot": True}
        )

        history = await version_manager.get_version_history(document.id, snapshots_only=True)

        assert [v.content for v in history] == ["manual"]

    async def test_unknown_document_has_empty_history(self, version_manager):
        assert await version_manager.get_version_history("no-such-doc") == []

    async def test_missing_document_id(self, version_manager):
        with pytest.raises(ValidationError):
            await version_manager.get_version_history("")

    async def test_negative_offset(self, version_manager, document):
        with pytest.raises(ValidationError):
            await version_manager.get_version_history(document.id, offset=-1)

    async def test_latest_version(self, version_manager, document):
        assert await version_manager.get_latest_version(document.id) is None

        await version_manager.create_snapshot(document.id, "one", ALICE)
        await version_manager.create_snapshot(document.id, "two", ALICE)

        latest = await version_manager.get_latest_version(document.id)
        assert latest.content == "two"


class TestVersionContent:
    """Test single version retrieval."""

    async def test_get_version_content(self, version_manager, document):
        created = await version_manager.create_snapshot(document.id, "body", ALICE)

        version = await version_manager.get_version_content(created.id)

        assert version == created

    async def test_missing_version(self, version_manager):
        with pytest.raises(NotFoundError):
            await version_manager.get_version_content("missing")

    async def test_empty_version_id(self, version_manager):
        with pytest.raises(ValidationError):
            await version_manager.get_version_content("")


class TestCompareVersions:
    """Test version comparison."""

    async def test_changed_middle_line(self, version_manager, document):
        v1 = await version_manager.create_snapshot(document.id, "a\nb\nc", ALICE)
        v2 = await version_manager.create_snapshot(document.id, "a\nx\nc", ALICE)

        result = await version_manager.compare_versions(v1.id, v2.id)

        assert result.version1.id == v1.id
        assert result.version2.id == v2.id
        assert [(line.type, line.content) for line in result.diff] == [
            (DiffType.UNCHANGED, "a"),
            (DiffType.REMOVED, "b"),
            (DiffType.ADDED, "x"),
            (DiffType.UNCHANGED, "c"),
        ]
        assert result.summary.lines_added == 1
        assert result.summary.lines_removed == 1
        assert result.summary.lines_modified == 0

    async def test_missing_version(self, version_manager, document):
        v1 = await version_manager.create_snapshot(document.id, "a", ALICE)

        with pytest.raises(NotFoundError):
            await version_manager.compare_versions(v1.id, "missing")

    async def test_requires_both_ids(self, version_manager):
        with pytest.raises(ValidationError):
            await version_manager.compare_versions("v1", "")


class TestRestoreVersion:
    """Test restoring a document to a previous version."""

    async def test_restore_creates_two_versions(
        self, version_manager, version_repository, document_service, document
    ):
        v1 = await version_manager.create_snapshot(document.id, document.content, ALICE)
        await document_service.update_document(
            document.id, {"content": "rewritten"}, "user-1", "Alice"
        )
        await version_manager.create_snapshot(document.id, "rewritten", ALICE)
        before = await version_repository.count(document.id)

        restored = await version_manager.restore_version(document.id, v1.id, "user-2", "Bob")

        assert restored.content == document.content
        assert (await document_service.get_document(document.id)).content == document.content
        assert await version_repository.count(document.id) == before + 2

        record, backup = (await version_manager.get_version_history(document.id))[:2]
        assert backup.kind is VersionKind.RESTORE_BACKUP
        assert backup.content == "rewritten"
        assert backup.changes_summary == "Backup before restoring to version 1"
        assert record.kind is VersionKind.RESTORE_RECORD
        assert record.content == document.content
        assert record.changes_summary == "Restored to version 1 (Document updated)"
        assert record.created_by == "user-2"
        assert backup.is_snapshot and record.is_snapshot
        assert record.version_number == backup.version_number + 1

    async def test_restore_records_editor(self, version_manager, document_service, document):
        v1 = await version_manager.create_snapshot(document.id, "old text", ALICE)

        restored = await version_manager.restore_version(document.id, v1.id, "user-2", "Bob")

        assert restored.last_modified_by == "user-2"
        assert "user-2" in restored.collaborators
        assert restored.content_version == document.content_version + 1

    async def test_restore_version_of_other_document(self, version_manager, document):
        foreign = await version_manager.create_snapshot("other-doc", "elsewhere", ALICE)

        with pytest.raises(MismatchError):
            await version_manager.restore_version(document.id, foreign.id, "user-1", "Alice")

    async def test_restore_missing_version(self, version_manager, document):
        with pytest.raises(NotFoundError):
            await version_manager.restore_version(document.id, "missing", "user-1", "Alice")

    async def test_restore_missing_document(self, version_manager, version_repository):
        version = await version_manager.create_snapshot("ghost-doc", "text", ALICE)

        with pytest.raises(NotFoundError):
            await version_manager.restore_version("ghost-doc", version.id, "user-1", "Alice")
        assert await version_repository.count("ghost-doc") == 1

    async def test_restore_requires_restorer(self, version_manager, document):
        with pytest.raises(ValidationError):
            await version_manager.restore_version(document.id, "v", "user-1", "")

    async def test_failed_update_keeps_backup(
        self, version_manager, version_repository, document, monkeypatch
    ):
        v1 = await version_manager.create_snapshot(document.id, "old text", ALICE)
        monkeypatch.setattr(
            version_manager.document_service,
            "update_document",
            AsyncMock(side_effect=StoreError("disk I/O error")),
        )

        with pytest.raises(StoreError):
            await version_manager.restore_version(document.id, v1.id, "user-1", "Alice")

        history = await version_manager.get_version_history(document.id)
        assert len(history) == 2
        assert history[0].kind is VersionKind.RESTORE_BACKUP


class TestAutoSnapshot:
    """Test automatic snapshots on save."""

    async def test_initial_content(self, version_manager, document):
        version = await version_manager.create_auto_snapshot(
            document.id, None, "hello", "user-1", "Alice"
        )

        assert version is not None
        assert version.changes_summary == "Initial content"
        assert version.kind is VersionKind.AUTO_SNAPSHOT

    async def test_small_change_skipped(self, version_manager, version_repository, document):
        version = await version_manager.create_auto_snapshot(
            document.id, "short text here", "short text here!", "user-1", "Alice"
        )

        assert version is None
        assert await version_repository.count(document.id) == 0

    async def test_large_change_summarized(self, version_manager, document):
        old = "line\n" * 10
        new = old + "more\n" * 5

        version = await version_manager.create_auto_snapshot(
            document.id, old, new, "user-1", "Alice"
        )

        assert version.content == new
        assert version.changes_summary == "+5 lines, +25 chars"

    async def test_cleared_content_returns_none(self, version_manager, document):
        # Empty content cannot be snapshotted; the save path is unaffected
        assert (
            await version_manager.create_auto_snapshot(document.id, "text", "", "user-1", "Alice")
            is None
        )

    async def test_store_failure_returns_none(self, version_manager, document, monkeypatch):
        monkeypatch.setattr(
            version_manager.repository,
            "find_by_hash",
            AsyncMock(side_effect=StoreError("database is locked")),
        )

        version = await version_manager.create_auto_snapshot(
            document.id, None, "hello", "user-1", "Alice"
        )

        assert version is None

    async def test_missing_user_returns_none(self, version_manager, document):
        assert (
            await version_manager.create_auto_snapshot(document.id, None, "hello", "", "")
            is None
        )
