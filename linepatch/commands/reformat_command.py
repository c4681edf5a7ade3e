"""
Reformat command for Qt hosts.

Formatting runs on a worker thread; the buffer is only edited on the
UI thread once the formatter's output arrives.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from linepatch.buffers.base import Caret, TextBuffer
from linepatch.core.errors import BufferDesyncError, FormatterNotReadyError, LinePatchError
from linepatch.core.reformat import Reformatter
from linepatch.services.formatter import Formatter
from linepatch.services.settings import PatchSettings
from linepatch.workers.base_worker import WorkerThread
from linepatch.workers.format_worker import FormatWorker


class ReformatCommand(QObject):
    """
    Formats a buffer in the background and patches it in place.

    Signals:
        started: A run began
        finished(bool): The run completed; True if the buffer changed
        failed(str, str): The run failed (error_type, message); the
            buffer was not modified by the failing attempt
        cancelled: The run was cancelled; the buffer is untouched
    """

    started = pyqtSignal()
    finished = pyqtSignal(bool)
    failed = pyqtSignal(str, str)
    cancelled = pyqtSignal()

    def __init__(
        self,
        buffer: TextBuffer,
        caret: Optional[Caret],
        formatter: Formatter,
        settings: Optional[PatchSettings] = None,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.buffer = buffer
        self.caret = caret
        self.formatter = formatter
        self.settings = settings or PatchSettings()
        self.reformatter = Reformatter(formatter, self.settings)

        self._thread: Optional[WorkerThread] = None
        # Threads that were told to quit but have not stopped yet
        self._retired: list[WorkerThread] = []
        self._busy = False
        self._attempt = 0
        self._snapshot = ""
        self._caret_offset: Optional[int] = None

    @property
    def is_busy(self) -> bool:
        """True while a run is in progress."""
        return self._busy

    def execute(self) -> bool:
        """
        Start a reformat run.

        Returns:
            True if a run was started
        """
        if self._busy:
            logging.warning("ReformatCommand - Already running, request ignored")
            return False

        if not self.formatter.is_ready():
            error = FormatterNotReadyError("Formatter is not ready")
            self.failed.emit(type(error).__name__, str(error))
            return False

        self._busy = True
        self._attempt = 0
        self.started.emit()
        self._start_worker()
        return True

    def cancel(self) -> None:
        """Cancel the running formatter, if any."""
        if self._thread is not None:
            self._thread.cancel()

    def wait(self, msecs: int = 30000) -> bool:
        """Block until all worker threads have stopped."""
        threads = self._retired + ([self._thread] if self._thread else [])
        return all(thread.wait(msecs) for thread in threads)

    def apply_formatted(
        self,
        old_text: str,
        new_text: str,
        caret_offset: Optional[int] = None
    ) -> bool:
        """Apply formatter output computed from `old_text` to the buffer."""
        return self.reformatter.apply(self.buffer, self.caret, old_text, new_text, caret_offset)

    def _start_worker(self) -> None:
        self._snapshot = self.buffer.get_text()
        self._caret_offset = self.caret.get_offset() if self.caret is not None else None

        worker = FormatWorker(self.formatter, self._snapshot)
        thread = WorkerThread(worker)
        worker.signals.finished.connect(self._on_formatted)
        worker.signals.error.connect(self._on_error)
        worker.signals.cancelled.connect(self._on_cancelled)
        thread.finished.connect(self._on_thread_finished)

        self._thread = thread
        thread.start()

    def _retire_thread(self) -> None:
        if self._thread is not None:
            self._retired.append(self._thread)
            self._thread = None

    @pyqtSlot(object)
    def _on_formatted(self, new_text: str) -> None:
        self._retire_thread()

        try:
            changed = self.apply_formatted(self._snapshot, new_text, self._caret_offset)
        except BufferDesyncError as e:
            if self._attempt < self.settings.desync_retries:
                self._attempt += 1
                logging.info(
                    f"ReformatCommand - Buffer changed during formatting, "
                    f"retrying ({self._attempt}/{self.settings.desync_retries})"
                )
                self._start_worker()
                return
            self._fail(type(e).__name__, str(e))
            return
        except (LinePatchError, ValueError) as e:
            logging.error(f"ReformatCommand - Failed to apply formatted text: {e}")
            self._fail(type(e).__name__, str(e))
            return
        except Exception as e:
            logging.error(f"ReformatCommand - Buffer rejected formatted text: {e}", exc_info=True)
            self._fail(type(e).__name__, str(e))
            return

        self._busy = False
        self.finished.emit(changed)

    @pyqtSlot(str, str)
    def _on_error(self, error_type: str, message: str) -> None:
        self._retire_thread()
        logging.error(f"ReformatCommand - Formatter failed: {error_type}: {message}")
        self._fail(error_type, message)

    @pyqtSlot()
    def _on_cancelled(self) -> None:
        self._retire_thread()
        self._busy = False
        self.cancelled.emit()

    @pyqtSlot()
    def _on_thread_finished(self) -> None:
        self._retired = [thread for thread in self._retired if not thread.isFinished()]

    def _fail(self, error_type: str, message: str) -> None:
        self._busy = False
        self.failed.emit(error_type, message)
