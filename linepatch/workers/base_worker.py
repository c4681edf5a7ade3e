"""
Base worker classes for background operations.

A worker wraps one blocking call (running a formatter) so it can run
off the UI thread. Outcomes are reported only through Qt signals.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Any, Optional

from PyQt6.QtCore import QObject, QThread, Qt, pyqtSignal, pyqtSlot, QMutex, QMutexLocker


class WorkerState(Enum):
    """Lifecycle of a worker."""
    PENDING = auto()
    RUNNING = auto()
    CANCELLING = auto()  # Cancel requested, call still running
    CANCELLED = auto()
    COMPLETED = auto()
    FAILED = auto()

    @property
    def is_finished(self) -> bool:
        return self in (WorkerState.CANCELLED, WorkerState.COMPLETED, WorkerState.FAILED)


class WorkerSignals(QObject):
    """
    Signals emitted by a worker.

    Exactly one of finished, error or cancelled follows started.
    """
    started = pyqtSignal()

    status = pyqtSignal(str)

    # Result of do_work
    finished = pyqtSignal(object)

    # (exception class name, message)
    error = pyqtSignal(str, str)

    cancelled = pyqtSignal()

    # WorkerState
    state_changed = pyqtSignal(object)


class CancelledException(Exception):
    """Raised inside do_work to abandon a cancelled run."""
    pass


class WorkerMeta(type(QObject), type(ABC)):
    pass


class BaseWorker(QObject, ABC, metaclass=WorkerMeta):
    """
    Base class for workers that run in a QThread.

    Subclasses implement `do_work`; `run` is the thread entry point.
    """

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self._mutex = QMutex()
        self._state = WorkerState.PENDING
        self._cancelled = False
        self._result: Any = None
        self._error: Optional[tuple[str, str]] = None

    @property
    def state(self) -> WorkerState:
        with QMutexLocker(self._mutex):
            return self._state

    @state.setter
    def state(self, value: WorkerState) -> None:
        with QMutexLocker(self._mutex):
            self._state = value
        self.signals.state_changed.emit(value)

    @property
    def is_cancelled(self) -> bool:
        with QMutexLocker(self._mutex):
            return self._cancelled

    @property
    def result(self) -> Any:
        """Return value of do_work once COMPLETED."""
        return self._result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        """(error_type, message) once FAILED."""
        return self._error

    def cancel(self) -> None:
        """Request cancellation; takes effect when do_work returns or checks."""
        with QMutexLocker(self._mutex):
            self._cancelled = True
            if self._state == WorkerState.RUNNING:
                self._state = WorkerState.CANCELLING
        self.signals.state_changed.emit(WorkerState.CANCELLING)

    @pyqtSlot()
    def run(self) -> None:
        """Thread entry point: run do_work and emit its outcome."""
        self.state = WorkerState.RUNNING
        self.signals.started.emit()

        try:
            result = self.do_work()
        except CancelledException:
            self._finish_cancelled()
            return
        except Exception as e:
            # A call aborted by cancel() usually fails; report it as cancelled
            if self.is_cancelled:
                self._finish_cancelled()
                return
            self._error = (type(e).__name__, str(e))
            self.state = WorkerState.FAILED
            self.signals.error.emit(*self._error)
            return

        if self.is_cancelled:
            self._finish_cancelled()
            return

        self._result = result
        self.state = WorkerState.COMPLETED
        self.signals.finished.emit(result)

    def _finish_cancelled(self) -> None:
        self.state = WorkerState.CANCELLED
        self.signals.cancelled.emit()

    @abstractmethod
    def do_work(self) -> Any:
        """Perform the blocking call and return its result."""
        pass

    def report_status(self, message: str) -> None:
        self.signals.status.emit(message)

    def check_cancelled(self) -> bool:
        """Raise CancelledException if cancellation was requested."""
        if self.is_cancelled:
            raise CancelledException("Operation cancelled")
        return False


class CancellableWorker(BaseWorker):
    """
    Worker whose blocking call can be interrupted from another thread.

    Subclasses override `interrupt` to abort the call; `cancel`
    invokes it after flagging cancellation.
    """

    def cancel(self) -> None:
        super().cancel()
        self.interrupt()

    def interrupt(self) -> None:
        pass


class WorkerThread(QThread):
    """
    QThread owning one worker.

    Usage:
        thread = WorkerThread(worker)
        worker.signals.finished.connect(on_result)
        thread.start()
    """

    def __init__(self, worker: BaseWorker, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.worker = worker
        self.worker.moveToThread(self)

        self.started.connect(self.worker.run)
        # Called on the worker thread so wait() needs no event loop
        for signal in (worker.signals.finished, worker.signals.error, worker.signals.cancelled):
            signal.connect(self.quit, Qt.ConnectionType.DirectConnection)

    def cancel(self) -> None:
        self.worker.cancel()

    @property
    def result(self) -> Any:
        return self.worker.result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        return self.worker.error
