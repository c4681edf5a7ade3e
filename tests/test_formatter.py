"""Tests for the formatter services."""

import sys
import threading
import time

import pytest

from linepatch.core.errors import FormatterError, FormatterNotReadyError
from linepatch.services.formatter import CallableFormatter, CommandFormatter
from linepatch.services.settings import FormatterSettings


UPPER = "import sys; sys.stdout.buffer.write(sys.stdin.buffer.read().upper())"


def python_formatter(script, **kwargs):
    return CommandFormatter([sys.executable, "-c", script], **kwargs)


def test_command_output_is_returned_verbatim():
    formatter = python_formatter(UPPER)
    assert formatter.is_ready()
    assert formatter.format("a\r\nb\rc\n") == "A\r\nB\rC\n"


def test_command_non_zero_exit_raises():
    formatter = python_formatter("import sys; sys.stderr.write('syntax error'); sys.exit(3)")
    with pytest.raises(FormatterError) as excinfo:
        formatter.format("x")
    assert "code 3" in str(excinfo.value)
    assert "syntax error" in str(excinfo.value)


def test_command_timeout_raises():
    formatter = python_formatter("import time; time.sleep(10)", timeout=0.5)
    with pytest.raises(FormatterError, match="timed out"):
        formatter.format("x")


def test_command_can_be_cancelled():
    formatter = python_formatter("import time; time.sleep(10)", timeout=20)
    errors = []

    def run():
        try:
            formatter.format("x")
        except FormatterError as e:
            errors.append(e)

    thread = threading.Thread(target=run)
    thread.start()
    deadline = time.monotonic() + 5
    while formatter._process is None and time.monotonic() < deadline:
        time.sleep(0.01)
    formatter.cancel()
    thread.join(10)

    assert not thread.is_alive()
    assert len(errors) == 1


def test_missing_command_is_not_ready():
    formatter = CommandFormatter(["linepatch-no-such-formatter-binary"])
    assert not formatter.is_ready()
    with pytest.raises(FormatterNotReadyError):
        formatter.format("x")


def test_empty_command_is_not_ready():
    assert not CommandFormatter([]).is_ready()


def test_path_placeholder_is_substituted(tmp_path):
    target = tmp_path / "main.c"
    formatter = CommandFormatter(["fmt", "--assume-filename={path}"], path=target)
    assert formatter.arguments == ["fmt", f"--assume-filename={target}"]


def test_from_settings():
    settings = FormatterSettings(command=["fmt", "-"], timeout=5.0, encoding="latin-1")
    formatter = CommandFormatter.from_settings(settings, path="a.txt")
    assert formatter.command == ["fmt", "-"]
    assert formatter.timeout == 5.0
    assert formatter.encoding == "latin-1"
    assert formatter.working_dir is None


def test_callable_formatter_wraps_errors():
    def broken(text):
        raise KeyError("missing")

    with pytest.raises(FormatterError, match="KeyError"):
        CallableFormatter(broken).format("x")


def test_callable_formatter_not_ready():
    with pytest.raises(FormatterNotReadyError):
        CallableFormatter(str.upper, ready=False).format("x")
