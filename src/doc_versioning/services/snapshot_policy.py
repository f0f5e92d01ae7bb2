"""Heuristics for automatic snapshots."""

from doc_versioning.config.settings import Settings


class SnapshotPolicy:
    """Decides when an edit is significant enough to snapshot, and describes it."""

    def __init__(
        self,
        line_change_ratio: float = 0.1,
        min_line_change: int = 1,
        char_change_threshold: int = 100,
    ) -> None:
        """Initialize snapshot policy.

        Args:
            line_change_ratio: Fraction of the old line count that must change
            min_line_change: Line delta that must be exceeded regardless of ratio
            char_change_threshold: Character delta that triggers a snapshot
        """
        self.line_change_ratio = line_change_ratio
        self.min_line_change = min_line_change
        self.char_change_threshold = char_change_threshold

    @classmethod
    def from_settings(cls, settings: Settings) -> "SnapshotPolicy":
        return cls(
            line_change_ratio=settings.auto_snapshot_line_ratio,
            min_line_change=settings.auto_snapshot_min_line_change,
            char_change_threshold=settings.auto_snapshot_char_threshold,
        )

    def should_auto_snapshot(self, old_content: str | None, new_content: str | None) -> bool:
        """Check whether the change from old to new content warrants a snapshot.

        Initial content and cleared content always qualify.

        Args:
            old_content: Content before the edit
            new_content: Content after the edit

        Returns:
            True if an automatic snapshot should be created
        """
        if not old_content or not new_content:
            return True

        old_line_count = len(old_content.split("\n"))
        new_line_count = len(new_content.split("\n"))

        line_delta = abs(old_line_count - new_line_count)
        char_delta = abs(len(old_content) - len(new_content))

        line_threshold = max(self.min_line_change, old_line_count * self.line_change_ratio)

        return line_delta > line_threshold or char_delta > self.char_change_threshold

    def summarize(self, old_content: str | None, new_content: str | None) -> str:
        """Describe the change from old to new content.

        Returns:
            e.g. "+12 lines, +340 chars", "Initial content" or "Content cleared"
        """
        if not old_content:
            return "Initial content"
        if not new_content:
            return "Content cleared"

        line_delta = len(new_content.split("\n")) - len(old_content.split("\n"))
        char_delta = len(new_content) - len(old_content)

        changes = []
        if line_delta:
            changes.append(f"{line_delta:+d} lines")
        if char_delta:
            changes.append(f"{char_delta:+d} chars")

        return ", ".join(changes) if changes else "Content modified"
