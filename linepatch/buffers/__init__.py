"""
Live text buffers the patch engine edits.

The Qt adapters live in linepatch.buffers.qt and are imported from
there so the core stays usable without a display.
"""

from linepatch.buffers.base import Caret, TextBuffer, TextEdit
from linepatch.buffers.memory import InMemoryCaret, InMemoryTextBuffer, UndoTransaction

__all__ = [
    'Caret',
    'TextBuffer',
    'TextEdit',
    'InMemoryCaret',
    'InMemoryTextBuffer',
    'UndoTransaction',
]
