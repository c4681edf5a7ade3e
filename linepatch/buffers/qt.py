"""
Qt adapters: QTextDocument as a TextBuffer, QPlainTextEdit as a Caret.

Qt positions count UTF-16 code units while Python strings count code
points, so every offset crossing the boundary is converted.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtGui import QTextCursor, QTextDocument
from PyQt6.QtWidgets import QPlainTextEdit

from linepatch.buffers.base import Caret, TextBuffer
from linepatch.core.models import DeleteOperation, PatchOperation


PARAGRAPH_SEPARATOR = '\u2029'


def utf16_length(text: str) -> int:
    """Length of `text` in UTF-16 code units."""
    return len(text) + sum(1 for ch in text if ord(ch) > 0xFFFF)


def to_utf16_offset(text: str, offset: int) -> int:
    """Convert a code point offset into `text` to a Qt position."""
    return utf16_length(text[:offset])


def from_utf16_offset(text: str, position: int) -> int:
    """Convert a Qt position in `text` to a code point offset."""
    units = 0
    for index, ch in enumerate(text):
        if units >= position:
            return index
        units += 2 if ord(ch) > 0xFFFF else 1
    return len(text)


class QtTextBuffer(TextBuffer):
    """
    TextBuffer over a QTextDocument.

    The document stores a single paragraph separator, so "\\r\\n" and "\\r"
    are converted to "\\n" by `coerce_text`. Undo transactions are Qt
    edit blocks; the document's undo stack then holds one step per run.
    """

    def __init__(self, document: QTextDocument):
        self.document = document

    def get_text(self) -> str:
        # toPlainText would also turn non-breaking spaces into spaces
        return self.document.toRawText().replace(PARAGRAPH_SEPARATOR, '\n')

    def coerce_text(self, text: str) -> str:
        return text.replace('\r\n', '\n').replace('\r', '\n')

    def _apply_operations(self, operations: list[PatchOperation]) -> None:
        # Operations arrive in descending position order, so the text in
        # front of each one is still the text it was recorded against.
        text = self.get_text()
        cursor = QTextCursor(self.document)
        cursor.beginEditBlock()
        try:
            for op in operations:
                start = to_utf16_offset(text, op.start)
                if isinstance(op, DeleteOperation):
                    cursor.setPosition(start)
                    cursor.setPosition(
                        start + utf16_length(text[op.start:op.end]),
                        QTextCursor.MoveMode.KeepAnchor
                    )
                    cursor.removeSelectedText()
                else:
                    cursor.setPosition(start)
                    cursor.insertText(op.text)
        finally:
            cursor.endEditBlock()

    def _begin_transaction(self, name: str) -> QTextCursor:
        logging.debug(f"QtTextBuffer - Begin edit block '{name}'")
        cursor = QTextCursor(self.document)
        cursor.beginEditBlock()
        return cursor

    def _complete_transaction(self, token: QTextCursor) -> None:
        token.endEditBlock()


class QtCaret(Caret):
    """Caret of a QPlainTextEdit."""

    def __init__(self, editor: QPlainTextEdit):
        self.editor = editor

    def _text(self) -> str:
        return self.editor.document().toRawText().replace(PARAGRAPH_SEPARATOR, '\n')

    def get_offset(self) -> int:
        return from_utf16_offset(self._text(), self.editor.textCursor().position())

    def set_offset(self, offset: int) -> None:
        cursor = self.editor.textCursor()
        cursor.setPosition(to_utf16_offset(self._text(), offset))
        self.editor.setTextCursor(cursor)

    def ensure_visible(self, offset: Optional[int] = None) -> None:
        if offset is not None and offset != self.get_offset():
            self.set_offset(offset)
        self.editor.ensureCursorVisible()
