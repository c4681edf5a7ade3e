"""
In-memory text buffer with undo history.

Used by the command-line host and as a reference implementation of
the buffer interfaces.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from linepatch.buffers.base import Caret, TextBuffer
from linepatch.core.models import DeleteOperation, InsertOperation, PatchOperation


@dataclass
class UndoTransaction:
    """A named group of applied operations that undo as one step."""
    name: str
    # (operation, text removed by it) in application order
    records: list[tuple[PatchOperation, str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.records


class InMemoryTextBuffer(TextBuffer):
    """
    Text buffer backed by a Python string.

    Edits applied outside a transaction each become their own undo step.
    """

    def __init__(self, text: str = ""):
        self._text = text
        self._undo_stack: list[UndoTransaction] = []
        self._redo_stack: list[UndoTransaction] = []
        self._open: list[UndoTransaction] = []
        self._version = 0
        self._observers: list[Callable[[PatchOperation], None]] = []
        self.applied_operations: list[PatchOperation] = []

    def get_text(self) -> str:
        return self._text

    @property
    def length(self) -> int:
        return len(self._text)

    @property
    def version(self) -> int:
        """Incremented on every applied operation."""
        return self._version

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    @property
    def undo_history(self) -> list[str]:
        """Names of the undoable transactions, oldest first."""
        return [transaction.name for transaction in self._undo_stack]

    def set_text(self, text: str) -> None:
        """Replace the content and clear the undo history."""
        self._text = text
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._version += 1

    def add_observer(self, callback: Callable[[PatchOperation], None]) -> None:
        """Add a callback notified after each applied operation."""
        self._observers.append(callback)

    def remove_observer(self, callback: Callable[[PatchOperation], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def undo(self) -> bool:
        """Revert the most recent transaction."""
        if not self._undo_stack:
            return False
        transaction = self._undo_stack.pop()
        for op, removed in reversed(transaction.records):
            if isinstance(op, DeleteOperation):
                self._text = self._text[:op.start] + removed + self._text[op.start:]
            else:
                self._text = self._text[:op.start] + self._text[op.start + len(op.text):]
        self._version += 1
        self._redo_stack.append(transaction)
        return True

    def redo(self) -> bool:
        """Re-apply the most recently undone transaction."""
        if not self._redo_stack:
            return False
        transaction = self._redo_stack.pop()
        for op, _ in transaction.records:
            self._splice(op)
        self._version += 1
        self._undo_stack.append(transaction)
        return True

    def _apply_operations(self, operations: list[PatchOperation]) -> None:
        standalone = not self._open
        transaction = self._open[-1] if self._open else UndoTransaction("Edit")

        for op in operations:
            removed = self._splice(op)
            transaction.records.append((op, removed))
            self.applied_operations.append(op)
            self._version += 1
            self._notify_observers(op)

        self._redo_stack.clear()
        if standalone:
            self._undo_stack.append(transaction)

    def _splice(self, op: PatchOperation) -> str:
        if isinstance(op, DeleteOperation):
            removed = self._text[op.start:op.end]
            self._text = self._text[:op.start] + self._text[op.end:]
            return removed
        self._text = self._text[:op.start] + op.text + self._text[op.start:]
        return ""

    def _begin_transaction(self, name: str) -> UndoTransaction:
        transaction = UndoTransaction(name)
        self._open.append(transaction)
        return transaction

    def _complete_transaction(self, token: UndoTransaction) -> None:
        self._open.remove(token)
        if token.is_empty:
            return
        if self._open:
            # Nested transactions fold into the enclosing one
            self._open[-1].records.extend(token.records)
        else:
            self._undo_stack.append(token)

    def _notify_observers(self, op: PatchOperation) -> None:
        for callback in self._observers:
            try:
                callback(op)
            except Exception as e:
                logging.warning(f"InMemoryTextBuffer - Observer failed: {e}")


class InMemoryCaret(Caret):
    """Caret over an InMemoryTextBuffer."""

    def __init__(self, buffer: InMemoryTextBuffer, offset: int = 0):
        self._buffer = buffer
        self._offset = 0
        self.visible_offset: Optional[int] = None
        self.set_offset(offset)

    def get_offset(self) -> int:
        return self._offset

    def set_offset(self, offset: int) -> None:
        if not 0 <= offset <= self._buffer.length:
            raise ValueError(f"Caret offset {offset} outside buffer of length {self._buffer.length}")
        self._offset = offset

    def ensure_visible(self, offset: Optional[int] = None) -> None:
        self.visible_offset = self._offset if offset is None else offset
