"""
File I/O for the command-line host.

Files are read and written as exact text: line terminators are never
translated, so offsets computed on the loaded text match the file.
Encoding and byte order marks are detected on read and reproduced on
write.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import chardet


# Byte order marks and the codecs that read them
_BYTE_ORDER_MARKS = (
    (b'\xef\xbb\xbf', 'utf-8-sig'),
    (b'\xff\xfe', 'utf-16-le'),
    (b'\xfe\xff', 'utf-16-be'),
)


@dataclass
class FileContent:
    """Decoded file text and what is needed to write it back."""
    content: str
    encoding: str
    bom: bool


@dataclass
class ReadResult:
    """Outcome of FileIOService.read_file."""
    success: bool
    content: Optional[FileContent] = None
    error: Optional[str] = None


@dataclass
class WriteResult:
    """Outcome of FileIOService.write_file."""
    success: bool
    bytes_written: int = 0
    error: Optional[str] = None


class FileIOService:
    """Reads and writes text files without newline translation."""

    def __init__(
        self,
        default_encoding: str = 'utf-8',
        fallback_encoding: str = 'latin-1',
        binary_check_size: int = 8192,
        max_size: int = 50 * 1024 * 1024
    ):
        self.default_encoding = default_encoding
        self.fallback_encoding = fallback_encoding
        self.binary_check_size = binary_check_size
        self.max_size = max_size

    def read_file(self, path: Path | str, encoding: Optional[str] = None) -> ReadResult:
        """
        Load a text file.

        Args:
            path: File to read
            encoding: Encoding to use instead of detecting one

        Returns:
            ReadResult holding the text or the reason it could not be read
        """
        path = Path(path)

        if not path.is_file():
            reason = "Not a file" if path.exists() else "File not found"
            return ReadResult(success=False, error=f"{reason}: {path}")

        try:
            raw = path.read_bytes()
        except PermissionError:
            return ReadResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return ReadResult(success=False, error=f"OS error: {e}")

        if len(raw) > self.max_size:
            return ReadResult(
                success=False,
                error=f"File too large ({len(raw) / 1024 / 1024:.2f} MB, "
                      f"limit {self.max_size / 1024 / 1024:.2f} MB)"
            )

        bom_encoding = self._bom_encoding(raw)
        if bom_encoding is None and b'\x00' in raw[:self.binary_check_size]:
            return ReadResult(success=False, error=f"Binary file: {path}")

        chosen = bom_encoding or encoding or self._detect_encoding(raw)
        try:
            text = raw.decode(chosen)
        except (UnicodeDecodeError, LookupError):
            logging.warning(
                f"FileIOService - {path} is not valid {chosen}, "
                f"reading as {self.fallback_encoding}"
            )
            chosen = self.fallback_encoding
            text = raw.decode(chosen, errors='replace')

        # utf-8-sig strips its mark while decoding, the UTF-16 codecs do not
        if bom_encoding and text.startswith('\ufeff'):
            text = text[1:]

        return ReadResult(
            success=True,
            content=FileContent(
                content=text,
                encoding=chosen,
                bom=bom_encoding is not None,
            )
        )

    def write_file(
        self,
        path: Path | str,
        content: str,
        encoding: str = 'utf-8',
        create_backup: bool = False,
        bom: bool = False
    ) -> WriteResult:
        """
        Replace a file's content atomically.

        The text is encoded as given; no terminators are added or changed.

        Args:
            path: File to write
            content: Text to store
            encoding: Encoding to use
            create_backup: Copy the existing file to "<name>.bak" first
            bom: Start the file with a byte order mark (utf-8-sig adds its own)

        Returns:
            WriteResult with the number of bytes written
        """
        path = Path(path)

        if bom and encoding.lower() != 'utf-8-sig':
            content = '\ufeff' + content
        data = content.encode(encoding)

        try:
            if create_backup and path.exists():
                shutil.copy2(path, path.with_name(path.name + '.bak'))

            path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, 'wb') as f:
                    f.write(data)
                if path.exists():
                    shutil.copymode(path, temp_name)
                os.replace(temp_name, path)
            except Exception:
                if os.path.exists(temp_name):
                    os.unlink(temp_name)
                raise

        except PermissionError:
            return WriteResult(success=False, error=f"Permission denied: {path}")
        except OSError as e:
            return WriteResult(success=False, error=f"OS error: {e}")

        return WriteResult(success=True, bytes_written=len(data))

    @staticmethod
    def _bom_encoding(raw: bytes) -> Optional[str]:
        for mark, encoding in _BYTE_ORDER_MARKS:
            if raw.startswith(mark):
                return encoding
        return None

    def _detect_encoding(self, raw: bytes) -> str:
        """Guess the encoding of BOM-less bytes."""
        try:
            raw.decode(self.default_encoding)
            return self.default_encoding
        except UnicodeDecodeError:
            pass

        guess = chardet.detect(raw)
        name = (guess.get('encoding') or '').lower()
        if not name or guess.get('confidence', 0) <= 0.7:
            return self.default_encoding
        return 'utf-8' if name == 'ascii' else name
