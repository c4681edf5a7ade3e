"""
Capability interfaces for live text buffers.

A buffer exposes:
- Its current text
- Atomic edit scopes (delete/insert applied together on commit)
- Undo transactions grouping several edits into one user-facing step
- A caret that can be moved and scrolled into view

Hosts (an in-memory model, a Qt document, ...) implement these so the
patch engine never depends on a particular editor.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from linepatch.core.models import DeleteOperation, InsertOperation, PatchOperation


class TextEdit:
    """
    An atomic edit scope on a buffer.

    Offsets passed to `delete` and `insert` refer to the buffer as it was
    when the edit was created. Nothing changes until `apply` is called;
    used as a context manager, the edit is applied on a clean exit and
    discarded if the block raises.
    """

    def __init__(self, buffer: 'TextBuffer'):
        self._buffer = buffer
        self._length = buffer.length
        self._operations: list[tuple[int, PatchOperation]] = []
        self._closed = False

    @property
    def has_changes(self) -> bool:
        return bool(self._operations)

    def delete(self, start: int, length: int) -> None:
        """Delete `length` characters starting at `start`."""
        self._check_open()
        if length < 0 or start < 0 or start + length > self._length:
            raise ValueError(
                f"Delete range [{start}, {start + length}) outside buffer of length {self._length}"
            )
        if length == 0:
            return
        for _, op in self._operations:
            if isinstance(op, DeleteOperation) and start < op.end and op.start < start + length:
                raise ValueError("Overlapping deletions in one edit")
        self._operations.append((len(self._operations), DeleteOperation(start, length)))

    def insert(self, start: int, text: str) -> None:
        """Insert `text` at `start`."""
        self._check_open()
        if start < 0 or start > self._length:
            raise ValueError(f"Insert position {start} outside buffer of length {self._length}")
        if not text:
            return
        self._operations.append((len(self._operations), InsertOperation(start, text)))

    def apply(self) -> None:
        """Commit all recorded operations to the buffer."""
        self._check_open()
        self._closed = True
        if self._operations:
            self._buffer._apply_operations(self._ordered())

    def cancel(self) -> None:
        """Discard the recorded operations."""
        self._closed = True
        self._operations.clear()

    def _ordered(self) -> list[PatchOperation]:
        """
        Operations in application order: descending position, so each one
        still sees the offsets it was recorded against. At the same position
        a deletion runs before insertions, and insertions run in reverse so
        the first one recorded ends up first in the text.
        """
        def key(item: tuple[int, PatchOperation]) -> tuple[int, int, int]:
            seq, op = item
            if isinstance(op, DeleteOperation):
                return (-op.start, 0, 0)
            return (-op.start, 1, -seq)

        return [op for _, op in sorted(self._operations, key=key)]

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Edit has already been applied or cancelled")

    def __enter__(self) -> 'TextEdit':
        return self

    def __exit__(self, exc_type, exc_value, exc_tb) -> None:
        if self._closed:
            return
        if exc_type is None:
            self.apply()
        else:
            self.cancel()


class TextBuffer(ABC):
    """Live, mutable text buffer."""

    @abstractmethod
    def get_text(self) -> str:
        """Return the full current text."""
        pass

    @property
    def length(self) -> int:
        return len(self.get_text())

    def create_edit(self) -> TextEdit:
        """Open a new atomic edit scope."""
        return TextEdit(self)

    @contextmanager
    def undo_transaction(self, name: str) -> Iterator[Any]:
        """
        Group every edit applied inside the block into one undo step.

        The transaction is completed even when the block raises, so the
        edits that did succeed can still be undone in one step.
        """
        token = self._begin_transaction(name)
        try:
            yield token
        finally:
            self._complete_transaction(token)

    def coerce_text(self, text: str) -> str:
        """
        Convert incoming text to the form the buffer stores.

        Buffers that keep a single newline convention override this so
        diffs are computed against text with the same offsets.
        """
        return text

    @abstractmethod
    def _apply_operations(self, operations: list[PatchOperation]) -> None:
        """Apply already-ordered operations of one edit."""
        pass

    @abstractmethod
    def _begin_transaction(self, name: str) -> Any:
        pass

    @abstractmethod
    def _complete_transaction(self, token: Any) -> None:
        pass


class Caret(ABC):
    """Caret (insertion point) of a view on a buffer."""

    @abstractmethod
    def get_offset(self) -> int:
        pass

    @abstractmethod
    def set_offset(self, offset: int) -> None:
        pass

    @abstractmethod
    def ensure_visible(self, offset: Optional[int] = None) -> None:
        """Scroll so the line containing `offset` (default: the caret) is shown."""
        pass
