"""Document repository for database operations."""

import json
from datetime import datetime, timezone
from typing import Any

from doc_versioning.db.database import Database
from doc_versioning.models.document import Document


class DocumentRepository:
    """Repository for live document rows."""

    def __init__(self, db: Database) -> None:
        """Initialize repository.

        Args:
            db: Database instance
        """
        self.db = db

    async def create(self, document: Document) -> Document:
        async with self.db.transaction():
            await self.db.execute(
                """
                INSERT INTO documents (
                    id, title, content, content_version, created_by, created_by_name,
                    last_modified_by, last_modified_by_name, collaborators,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    document.id,
                    document.title,
                    document.content,
                    document.content_version,
                    document.created_by,
                    document.created_by_name,
                    document.last_modified_by,
                    document.last_modified_by_name,
                    json.dumps(document.collaborators),
                    document.created_at.isoformat(),
                    document.updated_at.isoformat(),
                ),
            )

        return document

    async def find_by_id(self, document_id: str) -> Document | None:
        """Find document by ID.

        Args:
            document_id: Document ID

        Returns:
            Document object or None if not found
        """
        cursor = await self.db.execute(
            "SELECT * FROM documents WHERE id = ?", (document_id,)
        )
        row = await cursor.fetchone()

        if not row:
            return None

        return self._row_to_document(row)

    async def update(self, document_id: str, updates: dict[str, Any]) -> Document | None:
        """Update document row.

        Args:
            document_id: Document ID
            updates: Fields to update

        Returns:
            Updated document or None if not found
        """
        # Whitelist of allowed columns to prevent SQL injection
        allowed_columns = {
            "title",
            "content",
            "content_version",
            "last_modified_by",
            "last_modified_by_name",
            "collaborators",
        }

        set_clauses = []
        params: list[Any] = []

        for column, value in updates.items():
            if column not in allowed_columns:
                raise ValueError(f"Invalid column: {column}")
            set_clauses.append(f"{column} = ?")
            params.append(json.dumps(value) if column == "collaborators" else value)

        if not set_clauses:
            return await self.find_by_id(document_id)

        set_clauses.append("updated_at = ?")
        params.append(datetime.now(timezone.utc).isoformat())
        params.append(document_id)

        async with self.db.transaction():
            cursor = await self.db.execute(
                f"UPDATE documents SET {', '.join(set_clauses)} WHERE id = ?", tuple(params)
            )

        if cursor.rowcount == 0:
            return None

        return await self.find_by_id(document_id)

    def _row_to_document(self, row: Any) -> Document:
        """Convert database row to Document object."""
        row_dict = dict(row)

        return Document(
            id=row_dict["id"],
            title=row_dict["title"],
            content=row_dict["content"],
            content_version=row_dict["content_version"],
            created_by=row_dict["created_by"],
            created_by_name=row_dict["created_by_name"],
            last_modified_by=row_dict["last_modified_by"],
            last_modified_by_name=row_dict["last_modified_by_name"],
            collaborators=(
                json.loads(row_dict["collaborators"]) if row_dict["collaborators"] else []
            ),
            created_at=datetime.fromisoformat(row_dict["created_at"]),
            updated_at=datetime.fromisoformat(row_dict["updated_at"]),
        )
