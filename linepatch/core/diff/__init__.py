"""
Diff module for line-level comparison.

Provides:
- Line splitting that keeps each line's terminator
- Minimal line diff blocks (Myers) or difflib-based blocks
- Expansion of blocks into an ordered piece sequence
"""

from linepatch.core.diff.line_diff import (
    LineDiffer,
    LineDiffOptions,
    LineDiffResult,
    DiffAlgorithm,
    diff_texts,
    split_lines,
)
from linepatch.core.diff.diff_model import (
    DiffModelBuilder,
    build_diff_model,
)

__all__ = [
    # Line diff
    'LineDiffer',
    'LineDiffOptions',
    'LineDiffResult',
    'DiffAlgorithm',
    'diff_texts',
    'split_lines',
    # Piece model
    'DiffModelBuilder',
    'build_diff_model',
]
