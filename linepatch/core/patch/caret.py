"""
Caret repositioning after a patch run.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Optional

from linepatch.buffers.base import Caret
from linepatch.core.models import DeleteOperation, PatchOperation


class CaretMode(Enum):
    """How the caret offset is carried across a patch run."""
    CLAMP = auto()  # Keep the old offset, clamped to the new length
    TRACK = auto()  # Shift the offset through every applied operation


class CaretRelocator:
    """
    Captures the caret before edits and restores it afterwards.

    In CLAMP mode the captured offset is simply clamped to the new buffer
    length. Most reformatting changes are line-local, so the caret rarely
    drifts far. TRACK mode follows each operation instead.
    """

    def __init__(self, caret: Optional[Caret], mode: CaretMode = CaretMode.CLAMP):
        self.caret = caret
        self.mode = mode
        self.offset: Optional[int] = None

    def capture(self, offset: Optional[int] = None) -> Optional[int]:
        """Remember `offset`, or the caret's current offset."""
        if offset is None and self.caret is not None:
            offset = self.caret.get_offset()
        self.offset = offset
        return offset

    def on_operation(self, op: PatchOperation) -> None:
        """Observer for applied operations (TRACK mode only)."""
        if self.mode is not CaretMode.TRACK or self.offset is None:
            return

        if isinstance(op, DeleteOperation):
            if self.offset >= op.end:
                self.offset -= op.length
            elif self.offset > op.start:
                self.offset = op.start
        elif self.offset > op.start:
            self.offset += len(op.text)

    def restore(self, buffer_length: int) -> Optional[int]:
        """
        Move the caret to the clamped offset and scroll it into view.

        Returns:
            The offset the caret was moved to, or None if nothing was captured
        """
        if self.offset is None:
            return None

        offset = max(0, min(self.offset, buffer_length))
        if self.caret is not None:
            self.caret.set_offset(offset)
            self.caret.ensure_visible(offset)
        return offset
