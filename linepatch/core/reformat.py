"""
Orchestration of a reformat run: diff, patch, caret.

The Reformatter ties the pure diff engine to a live buffer. It never
decides when formatting happens and never reports status to a user;
hosts do that.
"""

from __future__ import annotations

import logging
from typing import Optional

from linepatch.buffers.base import Caret, TextBuffer
from linepatch.core.diff.diff_model import build_diff_model
from linepatch.core.diff.line_diff import LineDiffOptions
from linepatch.core.errors import FormatterNotReadyError, InvalidInputError
from linepatch.core.models import PatchResult
from linepatch.core.patch.applier import PatchApplier
from linepatch.core.patch.caret import CaretRelocator
from linepatch.services.formatter import Formatter
from linepatch.services.settings import PatchSettings


class Reformatter:
    """
    Applies reformatted text to a buffer as minimal line edits.

    One run is a single undo transaction named after
    `PatchSettings.undo_name`.
    """

    def __init__(
        self,
        formatter: Optional[Formatter] = None,
        settings: Optional[PatchSettings] = None
    ):
        self.formatter = formatter
        self.settings = settings or PatchSettings()
        self.last_result: Optional[PatchResult] = None

    def apply(
        self,
        buffer: TextBuffer,
        caret: Optional[Caret],
        old_text: str,
        new_text: str,
        caret_offset: Optional[int] = None
    ) -> bool:
        """
        Patch `buffer` from `old_text` to `new_text`.

        Args:
            buffer: Live buffer, expected to hold `old_text`
            caret: Caret to relocate afterwards (may be None)
            old_text: Snapshot the formatter was given
            new_text: Formatter output
            caret_offset: Caret offset captured with the snapshot; read
                from `caret` when omitted

        Returns:
            False when there is nothing to do, True once the edits are applied

        Raises:
            InvalidInputError: If either text is None
            BufferDesyncError: If the buffer changed since the snapshot
        """
        if old_text is None:
            raise InvalidInputError("old_text")
        if new_text is None:
            raise InvalidInputError("new_text")

        self.last_result = None
        if not new_text or new_text == old_text:
            return False

        new_text = buffer.coerce_text(new_text)
        if new_text == old_text:
            return False

        relocator = CaretRelocator(caret, self.settings.caret_mode)
        relocator.capture(caret_offset)

        model = build_diff_model(
            old_text, new_text, LineDiffOptions(algorithm=self.settings.algorithm)
        )
        applier = PatchApplier(self.settings.default_newline.sequence)

        with buffer.undo_transaction(self.settings.undo_name):
            self.last_result = applier.apply(
                buffer,
                old_text,
                model,
                verify_snapshot=self.settings.verify_snapshot,
                observer=relocator.on_operation,
            )

        relocator.restore(buffer.length)
        logging.info(f"Reformatter - Applied {model.statistics}")
        return True

    def reformat(self, buffer: TextBuffer, caret: Optional[Caret] = None) -> bool:
        """
        Run the formatter on the buffer's text and apply its output.

        Raises:
            FormatterNotReadyError: If no formatter is set or it is not ready
            FormatterError: If formatting fails; the buffer is untouched
        """
        if self.formatter is None or not self.formatter.is_ready():
            raise FormatterNotReadyError("Formatter is not ready")

        old_text = buffer.get_text()
        caret_offset = caret.get_offset() if caret is not None else None
        new_text = self.formatter.format(old_text)
        return self.apply(buffer, caret, old_text, new_text, caret_offset)


def apply_formatted_text(
    buffer: TextBuffer,
    old_text: str,
    new_text: str,
    caret: Optional[Caret] = None,
    settings: Optional[PatchSettings] = None
) -> bool:
    """Convenience wrapper around Reformatter.apply."""
    return Reformatter(settings=settings).apply(buffer, caret, old_text, new_text)
