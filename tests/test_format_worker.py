"""Tests for the background formatting worker."""

from linepatch.services.formatter import CallableFormatter, Formatter
from linepatch.workers import FormatWorker, WorkerState, WorkerThread


def collect(worker):
    events = {"finished": [], "error": [], "cancelled": []}
    worker.signals.finished.connect(events["finished"].append)
    worker.signals.error.connect(lambda kind, message: events["error"].append((kind, message)))
    worker.signals.cancelled.connect(lambda: events["cancelled"].append(True))
    return events


def test_run_emits_formatted_text(qapp):
    worker = FormatWorker(CallableFormatter(str.upper), "abc\n")
    events = collect(worker)

    worker.run()

    assert events["finished"] == ["ABC\n"]
    assert events["error"] == []
    assert worker.state is WorkerState.COMPLETED
    assert worker.result == "ABC\n"


def test_run_reports_formatter_errors(qapp):
    def broken(text):
        raise RuntimeError("bad input")

    worker = FormatWorker(CallableFormatter(broken), "abc")
    events = collect(worker)

    worker.run()

    assert events["finished"] == []
    assert events["error"] == [("FormatterError", "RuntimeError: bad input")]
    assert worker.state is WorkerState.FAILED
    assert worker.error == ("FormatterError", "RuntimeError: bad input")


def test_cancel_before_run(qapp):
    worker = FormatWorker(CallableFormatter(str.upper), "abc")
    events = collect(worker)

    worker.cancel()
    worker.run()

    assert events["cancelled"] == [True]
    assert events["finished"] == []
    assert worker.state is WorkerState.CANCELLED
    assert worker.state.is_finished


def test_cancel_interrupts_formatter(qapp):
    class Recording(Formatter):
        cancelled = False

        def is_ready(self):
            return True

        def format(self, text):
            return text

        def cancel(self):
            self.cancelled = True

    formatter = Recording()
    FormatWorker(formatter, "abc").cancel()
    assert formatter.cancelled


def test_worker_thread_runs_worker(qapp):
    worker = FormatWorker(CallableFormatter(lambda text: text + "!"), "hi")
    thread = WorkerThread(worker)

    thread.start()
    assert thread.wait(5000)
    qapp.processEvents()

    assert thread.result == "hi!"
    assert thread.error is None
