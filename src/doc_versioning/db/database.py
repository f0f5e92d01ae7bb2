"""Database connection and migration management."""

import asyncio
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from doc_versioning.exceptions import ConflictError, PermissionDeniedError, StoreError

SCHEMA_VERSION = 1


class Database:
    """Database connection and operations manager."""

    def __init__(self, database_path: str) -> None:
        """Initialize database manager.

        Args:
            database_path: Path to SQLite database file, or ":memory:"
        """
        self.database_path = database_path
        self.conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()
        self._transaction_owner: asyncio.Task[Any] | None = None

    async def connect(self) -> None:
        """Connect to database."""
        if self.database_path != ":memory:":
            # Ensure data directory exists
            Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)

        self.conn = await aiosqlite.connect(self.database_path)
        self.conn.row_factory = aiosqlite.Row

        await self.conn.execute("PRAGMA foreign_keys = ON")

    async def close(self) -> None:
        """Close database connection."""
        if self.conn:
            await self.conn.close()
            self.conn = None

    async def execute(
        self, sql: str, parameters: tuple[Any, ...] | dict[str, Any] = ()
    ) -> aiosqlite.Cursor:
        """Execute a SQL statement.

        Args:
            sql: SQL statement
            parameters: Query parameters

        Returns:
            Database cursor

        Raises:
            ConflictError: If a uniqueness constraint is violated
            PermissionDeniedError: If the database refuses writes
            StoreError: On any other backend failure
        """
        if not self.conn:
            raise RuntimeError("Database not connected")
        try:
            return await self.conn.execute(sql, parameters)
        except sqlite3.IntegrityError as e:
            raise ConflictError(str(e)) from e
        except sqlite3.OperationalError as e:
            if "readonly" in str(e):
                raise PermissionDeniedError(str(e)) from e
            raise StoreError(str(e)) from e
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e

    async def commit(self) -> None:
        """Commit current transaction."""
        if not self.conn:
            raise RuntimeError("Database not connected")
        await self.conn.commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Context manager for database transactions.

        Provides exclusive write access with proper nesting detection.
        Only the task that opened the transaction may nest inside it;
        every other task waits on the write lock.

        Example:
            async with db.transaction():
                await db.execute(...)
        """
        if not self.conn:
            raise RuntimeError("Database not connected")

        current_task = asyncio.current_task()
        if self._transaction_owner is not None and self._transaction_owner is current_task:
            yield
            return

        async with self._write_lock:
            self._transaction_owner = current_task
            try:
                await self.conn.execute("BEGIN")
                try:
                    yield
                    await self.conn.commit()
                except Exception:
                    await self.conn.rollback()
                    raise
            finally:
                self._transaction_owner = None

    async def migrate(self) -> None:
        """Run database migrations."""
        try:
            cursor = await self.execute(
                "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
            )
            row = await cursor.fetchone()
            current_version = row[0] if row else 0
        except StoreError:
            current_version = 0

        if current_version < 1:
            await self._migrate_v1()

    async def _migrate_v1(self) -> None:
        """Initial database schema migration."""
        async with self.transaction():
            await self.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at DATETIME NOT NULL
                )
            """)

            await self.execute("""
                CREATE TABLE IF NOT EXISTS documents (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL DEFAULT '',
                    content_version INTEGER NOT NULL DEFAULT 1,
                    created_by TEXT NOT NULL,
                    created_by_name TEXT NOT NULL,
                    last_modified_by TEXT,
                    last_modified_by_name TEXT,
                    collaborators TEXT DEFAULT '[]',
                    created_at DATETIME NOT NULL,
                    updated_at DATETIME NOT NULL
                )
            """)

            # No foreign key to documents: versions outlive their document row
            await self.execute("""
                CREATE TABLE IF NOT EXISTS document_versions (
                    id TEXT PRIMARY KEY,
                    document_id TEXT NOT NULL,
                    version_number INTEGER NOT NULL,
                    content TEXT NOT NULL,
                    content_hash TEXT NOT NULL,
                    created_by TEXT NOT NULL,
                    created_by_name TEXT NOT NULL,
                    changes_summary TEXT NOT NULL,
                    kind TEXT NOT NULL DEFAULT 'auto_snapshot',
                    created_at DATETIME NOT NULL,
                    UNIQUE (document_id, version_number)
                )
            """)

            await self.execute(
                "CREATE INDEX IF NOT EXISTS idx_versions_document "
                "ON document_versions(document_id, version_number DESC)"
            )
            await self.execute(
                "CREATE INDEX IF NOT EXISTS idx_versions_hash "
                "ON document_versions(document_id, content_hash)"
            )
            # Restore entries repeat content on purpose; only snapshots dedup
            await self.execute(
                "CREATE UNIQUE INDEX IF NOT EXISTS idx_versions_snapshot_hash "
                "ON document_versions(document_id, content_hash) "
                "WHERE kind IN ('auto_snapshot', 'manual_snapshot')"
            )

            await self.execute(
                "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                (SCHEMA_VERSION, datetime.now(timezone.utc).isoformat()),
            )
