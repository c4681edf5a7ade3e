"""
Expansion of diff blocks into an ordered sequence of tagged pieces.
"""

from __future__ import annotations

from typing import Optional

from linepatch.core.diff.line_diff import LineDiffer, LineDiffOptions, LineDiffResult
from linepatch.core.models import ChangeType, DiffModel, DiffPiece, DiffStatistics


class DiffModelBuilder:
    """
    Builds the piece sequence for a line diff.

    Within a block, deleted and inserted lines are paired up and
    interleaved (each deleted line directly followed by its replacement)
    so that replacements stay adjacent in the piece stream. Lines beyond
    the paired count trail as plain deletions or insertions.
    """

    def build(self, diff: LineDiffResult) -> DiffModel:
        pieces: list[DiffPiece] = []
        old_pos = 0
        new_pos = 0

        for block in diff.blocks:
            while new_pos < block.insert_start:
                pieces.append(self._unchanged(diff, old_pos, new_pos))
                old_pos += 1
                new_pos += 1

            paired = min(block.delete_count, block.insert_count)
            for i in range(paired):
                pieces.append(self._deleted(diff, block.delete_start + i))
                pieces.append(self._inserted(diff, block.insert_start + i))

            for i in range(paired, block.delete_count):
                pieces.append(self._deleted(diff, block.delete_start + i))
            for i in range(paired, block.insert_count):
                pieces.append(self._inserted(diff, block.insert_start + i))

            old_pos = block.delete_end
            new_pos = block.insert_end

        while new_pos < len(diff.new_lines):
            pieces.append(self._unchanged(diff, old_pos, new_pos))
            old_pos += 1
            new_pos += 1

        return DiffModel(
            pieces=pieces,
            blocks=list(diff.blocks),
            statistics=self._statistics(pieces),
        )

    @staticmethod
    def _unchanged(diff: LineDiffResult, old_index: int, new_index: int) -> DiffPiece:
        return DiffPiece(
            change_type=ChangeType.UNCHANGED,
            text=diff.new_lines[new_index],
            new_line_number=new_index + 1,
            old_line_number=old_index + 1,
            terminator=diff.new_terminators[new_index],
            old_terminator=diff.old_terminators[old_index],
        )

    @staticmethod
    def _deleted(diff: LineDiffResult, old_index: int) -> DiffPiece:
        return DiffPiece(
            change_type=ChangeType.DELETED,
            text=diff.old_lines[old_index],
            old_line_number=old_index + 1,
            terminator=diff.old_terminators[old_index],
        )

    @staticmethod
    def _inserted(diff: LineDiffResult, new_index: int) -> DiffPiece:
        return DiffPiece(
            change_type=ChangeType.INSERTED,
            text=diff.new_lines[new_index],
            new_line_number=new_index + 1,
            terminator=diff.new_terminators[new_index],
        )

    @staticmethod
    def _statistics(pieces: list[DiffPiece]) -> DiffStatistics:
        stats = DiffStatistics()
        for piece in pieces:
            if piece.change_type is ChangeType.UNCHANGED:
                stats.unchanged_lines += 1
            elif piece.change_type is ChangeType.INSERTED:
                stats.inserted_lines += 1
            else:
                stats.deleted_lines += 1
        return stats


def build_diff_model(
    old_text: str,
    new_text: str,
    options: Optional[LineDiffOptions] = None
) -> DiffModel:
    """Diff two texts and expand the result into pieces."""
    diff = LineDiffer(options).diff(old_text, new_text)
    return DiffModelBuilder().build(diff)
