"""
Scan/write cursor pair used while patching a buffer.
"""

from __future__ import annotations


class EditCursor:
    """
    Tracks two offsets while walking the edit script:

    - `scan_offset` into the untouched original text
    - `write_offset` into the live buffer

    Both start at 0 and move together over unchanged text; the write
    offset is shifted independently by the patcher as it deletes and
    inserts.
    """

    __slots__ = ('_text', 'scan_offset', 'write_offset', 'line', 'terminator')

    def __init__(self, text: str):
        self._text = text
        self.scan_offset = 0
        self.write_offset = 0
        self.line = ""
        self.terminator = ""

    @property
    def at_end(self) -> bool:
        return self.scan_offset >= len(self._text)

    def advance(self) -> bool:
        """
        Move both offsets to the start of the next line.

        A line ends at `\\n`, at `\\r\\n`, or at a `\\r` not followed by
        `\\n`. The line and the terminator stepped over are kept in
        `line` and `terminator`.

        Returns:
            True if end of input was reached without a terminator
        """
        text = self._text
        start = self.scan_offset
        length = len(text)
        pos = start

        while pos < length and text[pos] not in '\r\n':
            pos += 1
        self.line = text[start:pos]

        if pos == length:
            self.terminator = ""
        elif text[pos] == '\r' and pos + 1 < length and text[pos + 1] == '\n':
            self.terminator = '\r\n'
        else:
            self.terminator = text[pos]

        end = pos + len(self.terminator)
        self.scan_offset = end
        self.write_offset += end - start
        return not self.terminator

    def __repr__(self) -> str:
        return f"EditCursor(scan={self.scan_offset}, write={self.write_offset})"
