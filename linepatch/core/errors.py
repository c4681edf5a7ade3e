"""
Exceptions raised by the diff and patch engine.
"""

from __future__ import annotations


class LinePatchError(Exception):
    """Base class for all linepatch errors."""
    pass


class InvalidInputError(LinePatchError, ValueError):
    """Raised when a required text argument is missing."""

    def __init__(self, argument: str):
        super().__init__(f"{argument} must not be None")
        self.argument = argument


class BufferDesyncError(LinePatchError):
    """
    Raised when the live buffer no longer matches the snapshot
    that was diffed.

    Offsets computed from the diff are only valid against the exact
    snapshot text, so patching is refused before any edit is made.
    """

    def __init__(self, expected_length: int, actual_length: int):
        super().__init__(
            f"Buffer changed since snapshot "
            f"(snapshot {expected_length} chars, buffer {actual_length} chars)"
        )
        self.expected_length = expected_length
        self.actual_length = actual_length


class FormatterError(LinePatchError):
    """Raised when the external formatter fails."""
    pass


class FormatterNotReadyError(FormatterError):
    """Raised when formatting is requested before the formatter is ready."""
    pass
