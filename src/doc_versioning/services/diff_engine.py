"""Line-based diffing between version contents."""

import difflib
from abc import ABC, abstractmethod

from doc_versioning.exceptions import ValidationError
from doc_versioning.models.diff import DiffLine, DiffSummary, DiffType


class DiffStrategy(ABC):
    """Abstract base class for line diff algorithms."""

    name: str

    @abstractmethod
    def generate_diff(self, old_content: str, new_content: str) -> list[DiffLine]:
        """Compute ordered line operations turning old content into new.

        Args:
            old_content: Original text
            new_content: Updated text

        Returns:
            Ordered list of line operations
        """
        pass


def _added(content: str, line_number: int, new_line_number: int) -> DiffLine:
    return DiffLine(
        type=DiffType.ADDED,
        content=content,
        line_number=line_number,
        new_line_number=new_line_number,
    )


def _removed(content: str, line_number: int, old_line_number: int) -> DiffLine:
    return DiffLine(
        type=DiffType.REMOVED,
        content=content,
        line_number=line_number,
        old_line_number=old_line_number,
    )


class PositionalLineDiff(DiffStrategy):
    """Compares lines at the same index without realignment.

    An inserted line near the top shows every following line as changed.
    Differing lines become a removed op followed by an added op.
    """

    name = "positional"

    def generate_diff(self, old_content: str, new_content: str) -> list[DiffLine]:
        old_lines = old_content.split("\n")
        new_lines = new_content.split("\n")

        diff: list[DiffLine] = []
        for i in range(max(len(old_lines), len(new_lines))):
            line_number = i + 1

            if i >= len(old_lines):
                diff.append(_added(new_lines[i], line_number, line_number))
            elif i >= len(new_lines):
                diff.append(_removed(old_lines[i], line_number, line_number))
            elif old_lines[i] != new_lines[i]:
                diff.append(_removed(old_lines[i], line_number, line_number))
                diff.append(_added(new_lines[i], line_number, line_number))
            else:
                diff.append(
                    DiffLine(
                        type=DiffType.UNCHANGED,
                        content=old_lines[i],
                        line_number=line_number,
                        old_line_number=line_number,
                        new_line_number=line_number,
                    )
                )

        return diff


class SequenceLineDiff(DiffStrategy):
    """Realigning diff built on difflib.SequenceMatcher."""

    name = "sequence"

    def generate_diff(self, old_content: str, new_content: str) -> list[DiffLine]:
        old_lines = old_content.split("\n")
        new_lines = new_content.split("\n")
        matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)

        diff: list[DiffLine] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                for offset in range(i2 - i1):
                    diff.append(
                        DiffLine(
                            type=DiffType.UNCHANGED,
                            content=old_lines[i1 + offset],
                            line_number=j1 + offset + 1,
                            old_line_number=i1 + offset + 1,
                            new_line_number=j1 + offset + 1,
                        )
                    )
                continue

            # "replace" is emitted as its removals followed by its additions
            for i in range(i1, i2):
                diff.append(_removed(old_lines[i], i + 1, i + 1))
            for j in range(j1, j2):
                diff.append(_added(new_lines[j], j + 1, j + 1))

        return diff


_STRATEGIES: dict[str, type[DiffStrategy]] = {
    PositionalLineDiff.name: PositionalLineDiff,
    SequenceLineDiff.name: SequenceLineDiff,
}


class DiffEngine:
    """Diffs version contents with a pluggable strategy."""

    def __init__(self, strategy: DiffStrategy | None = None) -> None:
        """Initialize diff engine.

        Args:
            strategy: Diff algorithm (default: PositionalLineDiff)
        """
        self.strategy = strategy or PositionalLineDiff()

    @classmethod
    def from_name(cls, name: str) -> "DiffEngine":
        """Build an engine from a configured strategy name.

        Raises:
            ValidationError: If the name is unknown
        """
        try:
            strategy_cls = _STRATEGIES[name]
        except KeyError:
            raise ValidationError(
                f"Unknown diff strategy: {name}. Must be one of: {', '.join(_STRATEGIES)}"
            ) from None
        return cls(strategy_cls())

    def generate_diff(self, old_content: str, new_content: str) -> list[DiffLine]:
        return self.strategy.generate_diff(old_content, new_content)

    @staticmethod
    def compare_summary(diff: list[DiffLine]) -> DiffSummary:
        """Count line operations in a diff.

        lines_modified stays 0: strategies report a changed line as a
        removed/added pair.
        """
        return DiffSummary(
            lines_added=sum(1 for line in diff if line.type is DiffType.ADDED),
            lines_removed=sum(1 for line in diff if line.type is DiffType.REMOVED),
            lines_modified=0,
        )
