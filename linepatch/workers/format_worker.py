"""
Worker that runs a formatter off the UI thread.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QObject

from linepatch.services.formatter import Formatter
from linepatch.workers.base_worker import CancellableWorker


class FormatWorker(CancellableWorker):
    """
    Worker for formatting a text snapshot.

    The result is the formatter's output; the buffer is never touched here.
    """

    def __init__(
        self,
        formatter: Formatter,
        text: str,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent=parent)
        self.formatter = formatter
        self.text = text

    def do_work(self) -> str:
        """Format the snapshot."""
        self.check_cancelled()
        self.report_status("Formatting...")

        result = self.formatter.format(self.text)
        logging.debug(f"FormatWorker - Formatter returned {len(result)} characters")

        self.check_cancelled()
        return result

    def interrupt(self) -> None:
        self.formatter.cancel()
