"""Application settings management using Pydantic Settings."""

from pathlib import Path
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_db_path() -> str:
    """Get default database path in the working directory."""
    return str(Path.cwd() / "data" / "doc_versioning.db")


class Settings(BaseSettings):
    """Application configuration settings.

    All settings can be configured via environment variables with the
    prefix `DOC_VERSIONING_`. For example, `DOC_VERSIONING_DATABASE_PATH`.
    """

    # Database
    database_path: str = Field(
        default_factory=_get_default_db_path,
        description="SQLite database file path",
    )

    # History
    history_default_limit: int = Field(
        default=50,
        ge=1,
        description="Default number of versions returned by a history query",
    )
    history_max_limit: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Upper bound applied to history query limits",
    )
    default_changes_summary: str = Field(
        default="Document updated",
        min_length=1,
        description="Summary recorded when a snapshot has none",
    )

    # Diff
    diff_strategy: Literal["positional", "sequence"] = Field(
        default="positional",
        description="Line diff algorithm used to compare versions",
    )

    # Auto-snapshot policy
    auto_snapshot_line_ratio: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Fraction of old line count that must change to auto-snapshot",
    )
    auto_snapshot_min_line_change: int = Field(
        default=1,
        ge=0,
        description="Line delta that must be exceeded regardless of ratio",
    )
    auto_snapshot_char_threshold: int = Field(
        default=100,
        ge=0,
        description="Character delta that triggers an auto-snapshot",
    )

    # Retention
    retention_keep_recent_count: int = Field(
        default=50,
        ge=0,
        description="Number of most recent versions always kept",
    )
    retention_keep_all_snapshots: bool = Field(
        default=True,
        description="Never prune manual snapshots and restore entries",
    )
    retention_keep_restore_entries: bool = Field(
        default=True,
        description="Never prune restore backups and restore records",
    )
    retention_sweep_enabled: bool = Field(
        default=False,
        description="Run retention for every document periodically in the server",
    )
    retention_sweep_interval_seconds: int = Field(
        default=3600,
        ge=60,
        description="Retention sweep interval in seconds (minimum 60)",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_prefix="DOC_VERSIONING_", env_file=".env", env_file_encoding="utf-8"
    )

    @model_validator(mode="after")
    def validate_history_limits(self) -> Self:
        """Validate history limit configuration."""
        if self.history_default_limit > self.history_max_limit:
            raise ValueError(
                f"history_default_limit ({self.history_default_limit}) "
                f"must be <= history_max_limit ({self.history_max_limit})"
            )
        return self
