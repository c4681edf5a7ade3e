"""
Applies a line edit script to a live buffer.

Each deleted or inserted line becomes its own small buffer edit instead
of one whole-buffer replacement, so annotations anchored to untouched
regions (bookmarks, breakpoints, highlights) survive and the visible
change stays minimal. Offsets are computed incrementally against the
buffer as it is after the previous edit.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from linepatch.buffers.base import TextBuffer
from linepatch.core.errors import BufferDesyncError
from linepatch.core.models import (
    ChangeType,
    DeleteOperation,
    DiffModel,
    InsertOperation,
    PatchOperation,
    PatchResult,
)
from linepatch.core.patch.cursor import EditCursor


OperationObserver = Callable[[PatchOperation], None]


class PatchApplier:
    """
    Walks the pieces of a DiffModel and edits the buffer.

    - Unchanged: both offsets advance over the line, no edit. When the
      new text uses a different terminator style for the line, only the
      terminator is replaced.
    - Deleted: the line and its terminator are removed. When the final
      piece deletes the last line of the original, the terminator before
      it is removed too so no empty trailing line is left behind.
    - Inserted: the line is inserted with its terminator, except for the
      final piece, which gets none.
    """

    def __init__(self, default_newline: str = '\n'):
        if default_newline not in ('\n', '\r\n', '\r'):
            raise ValueError(f"Unsupported newline: {default_newline!r}")
        self.default_newline = default_newline

    def apply(
        self,
        buffer: TextBuffer,
        old_text: str,
        model: DiffModel,
        verify_snapshot: bool = True,
        observer: Optional[OperationObserver] = None
    ) -> PatchResult:
        """
        Apply `model` to `buffer`, which must currently hold `old_text`.

        Args:
            buffer: Live buffer to edit
            old_text: Snapshot the model was computed from
            model: Edit script
            verify_snapshot: Compare the buffer with the snapshot first
            observer: Called with every applied operation, in order

        Returns:
            PatchResult listing the applied operations

        Raises:
            BufferDesyncError: If the buffer no longer holds `old_text`
            ValueError: If the model was not computed from `old_text`
        """
        if verify_snapshot:
            current = buffer.get_text()
            if current != old_text:
                raise BufferDesyncError(len(old_text), len(current))

        if model.old_text() != old_text:
            raise ValueError("Edit script was not computed from the given text")

        result = PatchResult()
        cursor = EditCursor(old_text)
        pieces = model.pieces
        last_index = len(pieces) - 1

        # Terminator currently in the buffer after the last line of the new text written so far
        written_terminator = ""
        # Terminator owed in front of lines appended after the original's unterminated last line
        pending_terminator = ""

        for index, piece in enumerate(pieces):
            is_final = index == last_index

            if piece.change_type is ChangeType.UNCHANGED:
                at_end = cursor.advance()
                old_terminator = cursor.terminator

                if at_end:
                    pending_terminator = piece.terminator
                    written_terminator = ""
                elif piece.terminator and piece.terminator != old_terminator:
                    position = cursor.write_offset - len(old_terminator)
                    self._commit(buffer, result, observer, [
                        DeleteOperation(position, len(old_terminator)),
                        InsertOperation(position, piece.terminator),
                    ])
                    cursor.write_offset += len(piece.terminator) - len(old_terminator)
                    written_terminator = piece.terminator
                else:
                    written_terminator = old_terminator

            elif piece.change_type is ChangeType.DELETED:
                start = cursor.write_offset
                at_end = cursor.advance()
                end = cursor.write_offset

                if at_end and is_final:
                    start -= len(written_terminator)
                    written_terminator = ""

                self._commit(buffer, result, observer, [
                    DeleteOperation(start, end - start),
                ])
                cursor.write_offset = start

            else:
                if pending_terminator:
                    text = pending_terminator + piece.text
                    pending_terminator = piece.terminator
                    written_terminator = ""
                elif is_final:
                    text = piece.text
                    written_terminator = ""
                else:
                    written_terminator = piece.terminator or self.default_newline
                    text = piece.text + written_terminator

                self._commit(buffer, result, observer, [
                    InsertOperation(cursor.write_offset, text),
                ])
                cursor.write_offset += len(text)

        logging.debug(
            f"PatchApplier - {result.edit_count} edits "
            f"({len(result.deletions)} deletions, {len(result.insertions)} insertions)"
        )
        return result

    def _commit(
        self,
        buffer: TextBuffer,
        result: PatchResult,
        observer: Optional[OperationObserver],
        operations: list[PatchOperation]
    ) -> None:
        """Apply operations as one atomic buffer edit, skipping empty ones."""
        operations = [
            op for op in operations
            if (op.length if isinstance(op, DeleteOperation) else len(op.text)) > 0
        ]
        if not operations:
            return

        with buffer.create_edit() as edit:
            for op in operations:
                if isinstance(op, DeleteOperation):
                    edit.delete(op.start, op.length)
                else:
                    edit.insert(op.start, op.text)

        result.edit_count += 1
        for op in operations:
            result.operations.append(op)
            if observer is not None:
                observer(op)
