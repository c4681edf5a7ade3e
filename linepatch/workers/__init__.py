"""
Background workers for non-blocking operations.

All workers use Qt signals for thread-safe communication
with the UI thread.
"""

from linepatch.workers.base_worker import (
    BaseWorker,
    WorkerSignals,
    WorkerState,
    CancellableWorker,
    CancelledException,
    WorkerThread,
)
from linepatch.workers.format_worker import FormatWorker

__all__ = [
    # Base
    'BaseWorker',
    'WorkerSignals',
    'WorkerState',
    'CancellableWorker',
    'CancelledException',
    'WorkerThread',
    # Formatting
    'FormatWorker',
]
