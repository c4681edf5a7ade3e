"""
Patch module: applying line edit scripts to live buffers.
"""

from linepatch.core.patch.cursor import EditCursor
from linepatch.core.patch.applier import PatchApplier
from linepatch.core.patch.caret import CaretMode, CaretRelocator

__all__ = [
    'EditCursor',
    'PatchApplier',
    'CaretMode',
    'CaretRelocator',
]
