"""Version repository for database operations."""

from datetime import datetime
from typing import Any

from doc_versioning.db.database import Database
from doc_versioning.exceptions import NotFoundError
from doc_versioning.models.version import Version, VersionKind


class VersionRepository:
    """Repository for document version records."""

    def __init__(self, db: Database) -> None:
        """Initialize repository.

        Args:
            db: Database instance
        """
        self.db = db

    async def create(self, version: Version) -> Version:
        """Insert a new version row.

        Args:
            version: Version to persist

        Returns:
            The persisted version

        Raises:
            ConflictError: If the version number or snapshot hash is taken
        """
        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO document_versions (
                    id, document_id, version_number, content, content_hash,
                    created_by, created_by_name, changes_summary, kind, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    version.id,
                    version.document_id,
                    version.version_number,
                    version.content,
                    version.content_hash,
                    version.created_by,
                    version.created_by_name,
                    version.changes_summary,
                    version.kind.value,
                    version.created_at.isoformat(),
                ),
            )

        return version

    async def get(self, version_id: str) -> Version:
        """Get a version by ID.

        Raises:
            NotFoundError: If no version has this ID
        """
        version = await self.find_by_id(version_id)
        if version is None:
            raise NotFoundError(f"Version not found: {version_id}")
        return version

    async def find_by_id(self, version_id: str) -> Version | None:
        cursor = await self.db.execute(
            "SELECT * FROM document_versions WHERE id = ?", (version_id,)
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return self._row_to_version(row)

    async def find_by_hash(self, document_id: str, content_hash: str) -> Version | None:
        """Find the earliest version of a document with the given content hash.

        Args:
            document_id: Owning document ID
            content_hash: Content digest

        Returns:
            Matching version or None
        """
        cursor = await self.db.execute(
            """
            SELECT * FROM document_versions
            WHERE document_id = ? AND content_hash = ?
            ORDER BY version_number ASC
            LIMIT 1
            """,
            (document_id, content_hash),
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return self._row_to_version(row)

    async def list_by_document(
        self,
        document_id: str,
        limit: int | None = None,
        offset: int = 0,
        snapshots_only: bool = False,
    ) -> list[Version]:
        """List versions of a document, newest first.

        Args:
            document_id: Owning document ID
            limit: Maximum rows to return (None for all)
            offset: Rows to skip
            snapshots_only: Exclude automatic snapshots

        Returns:
            Versions ordered by version_number descending
        """
        where_clauses = ["document_id = ?"]
        params: list[Any] = [document_id]

        if snapshots_only:
            where_clauses.append("kind != ?")
            params.append(VersionKind.AUTO_SNAPSHOT.value)

        sql = (
            f"SELECT * FROM document_versions WHERE {' AND '.join(where_clauses)} "
            "ORDER BY version_number DESC"
        )

        # SQLite needs a LIMIT clause before OFFSET; -1 means unbounded
        if limit is not None or offset:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit if limit is not None else -1, offset])

        cursor = await self.db.execute(sql, tuple(params))
        rows = await cursor.fetchall()

        return [self._row_to_version(row) for row in rows]

    async def max_version_number(self, document_id: str) -> int:
        """Get the highest version number of a document (0 if none)."""
        cursor = await self.db.execute(
            "SELECT MAX(version_number) FROM document_versions WHERE document_id = ?",
            (document_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row and row[0] is not None else 0

    async def count(self, document_id: str) -> int:
        cursor = await self.db.execute(
            "SELECT COUNT(*) FROM document_versions WHERE document_id = ?",
            (document_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def list_document_ids(self) -> list[str]:
        """List every document ID that has at least one version."""
        cursor = await self.db.execute(
            "SELECT DISTINCT document_id FROM document_versions ORDER BY document_id"
        )
        rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def delete(self, version_id: str) -> bool:
        """Delete a version by ID.

        Returns:
            True if deleted, False if not found
        """
        async with self.db.transaction():
            cursor = await self.db.execute(
                "DELETE FROM document_versions WHERE id = ?", (version_id,)
            )

        return cursor.rowcount > 0

    def _row_to_version(self, row: Any) -> Version:
        """Convert database row to Version object."""
        row_dict = dict(row)

        return Version(
            id=row_dict["id"],
            document_id=row_dict["document_id"],
            version_number=row_dict["version_number"],
            content=row_dict["content"],
            content_hash=row_dict["content_hash"],
            created_by=row_dict["created_by"],
            created_by_name=row_dict["created_by_name"],
            changes_summary=row_dict["changes_summary"],
            kind=VersionKind(row_dict["kind"]),
            created_at=datetime.fromisoformat(row_dict["created_at"]),
        )
