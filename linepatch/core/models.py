"""
Core data models for line-level patching.

This module defines the transient structures produced for a single
reformat run:
- Diff blocks (regions of divergence between two line sequences)
- Diff pieces (tagged lines forming the edit script)
- Patch operations (the buffer edits actually applied)

All models are created fresh per invocation and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional, Union


# =============================================================================
# Enumerations
# =============================================================================

class ChangeType(Enum):
    """Type of a line in the edit script."""
    UNCHANGED = auto()  # Line exists in both texts, identical
    DELETED = auto()    # Line exists only in the old text
    INSERTED = auto()   # Line exists only in the new text


# =============================================================================
# Diff Models
# =============================================================================

@dataclass(frozen=True)
class DiffBlock:
    """
    A contiguous region of divergence between two line sequences.

    Starts are 0-indexed positions in the old (delete) and new (insert)
    line sequences.
    """
    delete_start: int
    delete_count: int
    insert_start: int
    insert_count: int

    def __post_init__(self) -> None:
        if self.delete_count <= 0 and self.insert_count <= 0:
            raise ValueError("DiffBlock must delete or insert at least one line")
        if min(self.delete_start, self.delete_count,
               self.insert_start, self.insert_count) < 0:
            raise ValueError("DiffBlock positions and counts must be non-negative")

    @property
    def delete_end(self) -> int:
        return self.delete_start + self.delete_count

    @property
    def insert_end(self) -> int:
        return self.insert_start + self.insert_count


@dataclass(frozen=True)
class DiffPiece:
    """
    A single line tagged with its change type.

    `terminator` is the line terminator that follows the line in the
    text the piece belongs to (new text for unchanged/inserted pieces,
    old text for deleted ones). It is empty for the last line of a text.
    Unchanged pieces also carry the old text's terminator, which can
    differ in style.
    """
    change_type: ChangeType
    text: str
    new_line_number: Optional[int] = None   # 1-indexed, unchanged/inserted only
    old_line_number: Optional[int] = None   # 1-indexed, unchanged/deleted only
    terminator: str = ""
    old_terminator: str = ""

    @property
    def is_change(self) -> bool:
        return self.change_type is not ChangeType.UNCHANGED

    @property
    def prefix(self) -> str:
        """Get the diff prefix character."""
        prefixes = {
            ChangeType.UNCHANGED: ' ',
            ChangeType.DELETED: '-',
            ChangeType.INSERTED: '+',
        }
        return prefixes[self.change_type]

    def __str__(self) -> str:
        return f"{self.prefix}{self.text}"


@dataclass
class DiffStatistics:
    """Counts of pieces by change type."""
    unchanged_lines: int = 0
    inserted_lines: int = 0
    deleted_lines: int = 0

    @property
    def total_changes(self) -> int:
        return self.inserted_lines + self.deleted_lines

    def __str__(self) -> str:
        return f"+{self.inserted_lines} -{self.deleted_lines} ={self.unchanged_lines}"


@dataclass
class DiffModel:
    """
    Ordered edit script between two texts.

    The pieces cover the full reconstruction of both texts.
    """
    pieces: list[DiffPiece]
    blocks: list[DiffBlock]
    statistics: DiffStatistics = field(default_factory=DiffStatistics)

    @property
    def has_differences(self) -> bool:
        return len(self.blocks) > 0

    def iter_changes(self) -> Iterator[DiffPiece]:
        """Iterate over only the changed pieces."""
        for piece in self.pieces:
            if piece.is_change:
                yield piece

    def new_text(self) -> str:
        """Rebuild the new text from unchanged and inserted pieces."""
        return ''.join(
            piece.text + piece.terminator
            for piece in self.pieces
            if piece.change_type is not ChangeType.DELETED
        )

    def old_text(self) -> str:
        """Rebuild the old text from unchanged and deleted pieces."""
        parts = []
        for piece in self.pieces:
            if piece.change_type is ChangeType.UNCHANGED:
                parts.append(piece.text + piece.old_terminator)
            elif piece.change_type is ChangeType.DELETED:
                parts.append(piece.text + piece.terminator)
        return ''.join(parts)


# =============================================================================
# Patch Models
# =============================================================================

@dataclass(frozen=True)
class DeleteOperation:
    """Delete `length` characters at `start` of the live buffer."""
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class InsertOperation:
    """Insert `text` at `start` of the live buffer."""
    start: int
    text: str


PatchOperation = Union[DeleteOperation, InsertOperation]


@dataclass
class PatchResult:
    """
    Outcome of applying an edit script to a buffer.

    Operations are listed in application order; each offset refers to
    the buffer as it was when that operation ran.
    """
    operations: list[PatchOperation] = field(default_factory=list)
    edit_count: int = 0

    @property
    def deletions(self) -> list[DeleteOperation]:
        return [op for op in self.operations if isinstance(op, DeleteOperation)]

    @property
    def insertions(self) -> list[InsertOperation]:
        return [op for op in self.operations if isinstance(op, InsertOperation)]

    @property
    def changed(self) -> bool:
        return bool(self.operations)
