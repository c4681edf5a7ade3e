"""
Formatter services that produce reformatted text.

The formatter itself is an external collaborator; these classes only
run it and hand back its output:
- CommandFormatter pipes the text through an external process
- CallableFormatter wraps an in-process function
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Sequence

from linepatch.core.errors import FormatterError, FormatterNotReadyError
from linepatch.services.settings import FormatterSettings


class Formatter(ABC):
    """Produces a reformatted version of a text."""

    @abstractmethod
    def is_ready(self) -> bool:
        """Check whether `format` can run now."""
        pass

    @abstractmethod
    def format(self, text: str) -> str:
        """
        Return the reformatted text.

        May block; callers on a UI thread run it in a worker.

        Raises:
            FormatterError: If formatting fails
        """
        pass

    def cancel(self) -> None:
        """Abort a running `format` call if the formatter supports it."""
        pass


class CommandFormatter(Formatter):
    """
    Runs an external formatter command.

    The text is written to the process's stdin as encoded bytes and the
    result read back from stdout, so line terminators pass through
    untranslated. "{path}" in the command is replaced by `path`.
    """

    def __init__(
        self,
        command: Sequence[str],
        path: Optional[Path | str] = None,
        timeout: float = 30.0,
        working_dir: Optional[Path | str] = None,
        encoding: str = 'utf-8'
    ):
        self.command = list(command)
        self.path = Path(path) if path else None
        self.timeout = timeout
        self.working_dir = Path(working_dir) if working_dir else None
        self.encoding = encoding
        self._process: Optional[subprocess.Popen] = None
        self._lock = threading.Lock()
        self._cancelled = False

    @classmethod
    def from_settings(
        cls,
        settings: FormatterSettings,
        path: Optional[Path | str] = None
    ) -> 'CommandFormatter':
        return cls(
            command=settings.command,
            path=path,
            timeout=settings.timeout,
            working_dir=settings.working_dir or None,
            encoding=settings.encoding,
        )

    @property
    def arguments(self) -> list[str]:
        """Command line with placeholders filled in."""
        path = str(self.path) if self.path else ""
        return [arg.replace('{path}', path) for arg in self.command]

    def is_ready(self) -> bool:
        return bool(self.command) and shutil.which(self.command[0]) is not None

    def format(self, text: str) -> str:
        if not self.is_ready():
            raise FormatterNotReadyError(
                f"Formatter command not available: {self.command[0] if self.command else '(none)'}"
            )

        args = self.arguments
        logging.debug(f"CommandFormatter - Running {args}")

        with self._lock:
            self._cancelled = False
            try:
                self._process = subprocess.Popen(
                    args,
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    cwd=str(self.working_dir) if self.working_dir else None,
                )
            except OSError as e:
                raise FormatterError(f"Failed to start formatter: {e}") from e
            process = self._process

        try:
            stdout, stderr = process.communicate(
                text.encode(self.encoding), timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            process.kill()
            process.communicate()
            raise FormatterError(f"Formatter timed out after {self.timeout}s") from e
        finally:
            with self._lock:
                self._process = None

        if self._cancelled:
            raise FormatterError("Formatter was cancelled")

        if process.returncode != 0:
            message = stderr.decode(self.encoding, errors='replace').strip()
            raise FormatterError(
                f"Formatter exited with code {process.returncode}: {message}"
            )

        try:
            return stdout.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise FormatterError(f"Formatter output is not valid {self.encoding}: {e}") from e

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            if self._process is not None and self._process.poll() is None:
                self._process.terminate()


class CallableFormatter(Formatter):
    """Formatter backed by a Python callable."""

    def __init__(self, func: Callable[[str], str], ready: bool = True):
        self.func = func
        self.ready = ready

    def is_ready(self) -> bool:
        return self.ready

    def format(self, text: str) -> str:
        if not self.ready:
            raise FormatterNotReadyError("Formatter is not ready")
        try:
            return self.func(text)
        except FormatterError:
            raise
        except Exception as e:
            raise FormatterError(f"{type(e).__name__}: {e}") from e
