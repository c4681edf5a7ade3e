"""
Line diff engine.

Splits two texts into line sequences and computes the blocks where
they diverge. Lines are compared with exact character equality:
no whitespace, case or line-ending normalization is applied, since
the resulting offsets are applied to the unnormalized buffer text.

Algorithms:
- Myers O((N+M)D) shortest edit script (default, minimal)
- difflib SequenceMatcher (heuristic, not always minimal)
"""

from __future__ import annotations

import difflib
import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Sequence

from linepatch.core.errors import InvalidInputError
from linepatch.core.models import DiffBlock


_LINE_BREAK = re.compile(r'\r\n|\r|\n')


class DiffAlgorithm(Enum):
    """Available line diff algorithms."""
    MYERS = auto()             # Minimal edit script
    SEQUENCE_MATCHER = auto()  # difflib heuristic, faster on large noisy inputs


@dataclass
class LineDiffOptions:
    """Options for line comparison."""
    algorithm: DiffAlgorithm = DiffAlgorithm.MYERS


@dataclass
class LineDiffResult:
    """Line sequences of both texts plus the blocks where they diverge."""
    old_lines: list[str]
    new_lines: list[str]
    old_terminators: list[str]
    new_terminators: list[str]
    blocks: list[DiffBlock] = field(default_factory=list)

    @property
    def is_identical(self) -> bool:
        return not self.blocks


def split_lines(text: str) -> tuple[list[str], list[str]]:
    """
    Split text into lines and the terminators that follow them.

    `\\r\\n` counts as a single boundary. A text with k terminators has
    k + 1 lines, so "a\\nb\\n" yields ["a", "b", ""] and "" yields [""].
    The last terminator is always "".

    Returns:
        Tuple of (lines, terminators), both the same length
    """
    lines: list[str] = []
    terminators: list[str] = []
    pos = 0

    for match in _LINE_BREAK.finditer(text):
        lines.append(text[pos:match.start()])
        terminators.append(match.group())
        pos = match.end()

    lines.append(text[pos:])
    terminators.append('')
    return lines, terminators


class LineDiffer:
    """
    Engine for computing line diff blocks between two texts.

    Stateless apart from its options; safe to reuse.
    """

    def __init__(self, options: Optional[LineDiffOptions] = None):
        self.options = options or LineDiffOptions()

    def diff(self, old_text: str, new_text: str) -> LineDiffResult:
        """
        Compare two texts line by line.

        Args:
            old_text: Original text
            new_text: Modified text

        Returns:
            LineDiffResult with ordered, non-overlapping blocks

        Raises:
            InvalidInputError: If either text is None
        """
        if old_text is None:
            raise InvalidInputError("old_text")
        if new_text is None:
            raise InvalidInputError("new_text")

        old_lines, old_terminators = split_lines(old_text)
        new_lines, new_terminators = split_lines(new_text)

        blocks = self.diff_lines(old_lines, new_lines)
        logging.debug(
            f"LineDiffer - {len(old_lines)} -> {len(new_lines)} lines, "
            f"{len(blocks)} blocks ({self.options.algorithm.name})"
        )

        return LineDiffResult(
            old_lines=old_lines,
            new_lines=new_lines,
            old_terminators=old_terminators,
            new_terminators=new_terminators,
            blocks=blocks,
        )

    def diff_lines(
        self,
        old_lines: Sequence[str],
        new_lines: Sequence[str]
    ) -> list[DiffBlock]:
        """Compute diff blocks between two line sequences."""
        if self.options.algorithm == DiffAlgorithm.SEQUENCE_MATCHER:
            return self._sequence_matcher_blocks(old_lines, new_lines)
        return self._myers_blocks(old_lines, new_lines)

    def _myers_blocks(
        self,
        old_lines: Sequence[str],
        new_lines: Sequence[str]
    ) -> list[DiffBlock]:
        """Myers diff over the region left after trimming common ends."""
        a, b = self._encode(old_lines, new_lines)

        # Common prefix and suffix never take part in an edit
        prefix = 0
        limit = min(len(a), len(b))
        while prefix < limit and a[prefix] == b[prefix]:
            prefix += 1

        suffix = 0
        while (suffix < limit - prefix
               and a[len(a) - 1 - suffix] == b[len(b) - 1 - suffix]):
            suffix += 1

        a = a[prefix:len(a) - suffix]
        b = b[prefix:len(b) - suffix]

        matches = self._myers_matches(a, b)
        return self._blocks_from_matches(matches, len(a), len(b), prefix)

    def _myers_matches(self, a: list[int], b: list[int]) -> list[tuple[int, int]]:
        """
        Find matched (old, new) index pairs on a shortest edit path.

        The V array of each round is kept (only the diagonals the next
        backtracking step can read) so the path can be recovered.
        """
        n, m = len(a), len(b)
        if n == 0 or m == 0:
            return []

        max_d = n + m
        offset = max_d + 1
        v = [0] * (2 * max_d + 3)
        trace: list[list[int]] = []

        for d in range(max_d + 1):
            # Diagonals -d-1 .. d+1, stored at index k + d + 1
            trace.append(v[offset - d - 1:offset + d + 2])

            for k in range(-d, d + 1, 2):
                if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                    x = v[offset + k + 1]
                else:
                    x = v[offset + k - 1] + 1
                y = x - k

                while x < n and y < m and a[x] == b[y]:
                    x += 1
                    y += 1

                v[offset + k] = x

                if x >= n and y >= m:
                    return self._backtrack(trace, n, m)

        return []

    def _backtrack(
        self,
        trace: list[list[int]],
        n: int,
        m: int
    ) -> list[tuple[int, int]]:
        """Walk the recorded rounds back from (n, m) collecting snakes."""
        matches: list[tuple[int, int]] = []
        x, y = n, m

        for d in range(len(trace) - 1, -1, -1):
            v = trace[d]
            k = x - y

            if k == -d or (k != d and v[k - 1 + d + 1] < v[k + 1 + d + 1]):
                prev_k = k + 1
            else:
                prev_k = k - 1

            prev_x = v[prev_k + d + 1]
            prev_y = prev_x - prev_k

            while x > prev_x and y > prev_y:
                x -= 1
                y -= 1
                matches.append((x, y))

            x, y = prev_x, prev_y

        matches.reverse()
        return matches

    def _blocks_from_matches(
        self,
        matches: list[tuple[int, int]],
        n: int,
        m: int,
        offset: int
    ) -> list[DiffBlock]:
        """Turn the gaps between matched pairs into diff blocks."""
        blocks = []
        i = j = 0

        for match_i, match_j in matches + [(n, m)]:
            if match_i > i or match_j > j:
                blocks.append(DiffBlock(
                    delete_start=offset + i,
                    delete_count=match_i - i,
                    insert_start=offset + j,
                    insert_count=match_j - j,
                ))
            i, j = match_i + 1, match_j + 1

        return blocks

    def _sequence_matcher_blocks(
        self,
        old_lines: Sequence[str],
        new_lines: Sequence[str]
    ) -> list[DiffBlock]:
        """Blocks from difflib opcodes."""
        matcher = difflib.SequenceMatcher(
            None, list(old_lines), list(new_lines), autojunk=False
        )
        return [
            DiffBlock(i1, i2 - i1, j1, j2 - j1)
            for tag, i1, i2, j1, j2 in matcher.get_opcodes()
            if tag != 'equal'
        ]

    @staticmethod
    def _encode(
        old_lines: Sequence[str],
        new_lines: Sequence[str]
    ) -> tuple[list[int], list[int]]:
        """Map each distinct line to an integer id."""
        table: dict[str, int] = {}
        a = [table.setdefault(line, len(table)) for line in old_lines]
        b = [table.setdefault(line, len(table)) for line in new_lines]
        return a, b


def diff_texts(
    old_text: str,
    new_text: str,
    options: Optional[LineDiffOptions] = None
) -> LineDiffResult:
    """Convenience wrapper around LineDiffer.diff."""
    return LineDiffer(options).diff(old_text, new_text)
