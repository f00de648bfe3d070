"""
Tests for the crash handler. Process termination is mocked; one test runs a
real child process to check it reports and then dies.
"""
import io
import os
import signal
import subprocess
import sys
from pathlib import Path

import pytest
from unittest.mock import patch, call
import importlib

# The runtime package re-exports the crash() function under the same name as
# the submodule, so load the module itself explicitly.
crash = importlib.import_module("shiba_demangle.runtime.crash")

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


@pytest.fixture(autouse=True)
def _reset_handling():
    crash._handling = False
    yield
    crash._handling = False


class TestCrash:

    def test_prints_then_aborts(self):
        out = io.StringIO()
        with patch.object(crash, "print_stacktrace") as trace, patch("os.abort") as abort:
            crash.crash(out)
            trace.assert_called_once_with(out)
            abort.assert_called_once()

    def test_aborts_even_if_report_fails(self):
        with patch.object(crash, "print_stacktrace", side_effect=RuntimeError("broken")), \
                patch("os.abort") as abort:
            with pytest.raises(RuntimeError):
                crash.crash()
            abort.assert_called_once()

    def test_fatal_error_message(self):
        out = io.StringIO()
        with patch.object(crash, "print_stacktrace"), patch("os.abort") as abort:
            crash.fatal_error("malloc failed", out)
            assert out.getvalue() == "fatal error: malloc failed\n"
            abort.assert_called_once()


class TestHandleSignal:

    def test_reports_signal_name(self, capsys):
        with patch.object(crash, "print_stacktrace") as trace, patch("os.abort") as abort:
            crash.handle_signal(signal.SIGSEGV, None)
            trace.assert_called_once()
            abort.assert_called_once()
        assert signal.strsignal(signal.SIGSEGV) in capsys.readouterr().err

    def test_second_entry_exits_immediately(self):
        crash._handling = True
        with patch.object(crash, "print_stacktrace") as trace, \
                patch("os.abort") as abort, patch("os._exit") as exit_:
            crash.handle_signal(signal.SIGILL, None)
            exit_.assert_called_once_with(128 + signal.SIGILL)
            trace.assert_not_called()
            abort.assert_not_called()


class TestInstall:

    def test_registers_fatal_signals(self):
        with patch("signal.signal") as register:
            crash.install_crash_handler()
        register.assert_has_calls([
            call(signal.SIGSEGV, crash.handle_signal),
            call(signal.SIGILL, crash.handle_signal),
        ])

    def test_native_faults_use_faulthandler(self):
        out = io.StringIO()
        with patch("signal.signal") as register, patch("faulthandler.enable") as enable:
            crash.install_crash_handler(native_faults=True, file=out)
        enable.assert_called_once_with(file=out)
        register.assert_not_called()

    def test_reset_restores_defaults(self):
        with patch("signal.signal") as register:
            crash.reset_crash_handler()
        register.assert_has_calls([
            call(signal.SIGSEGV, signal.SIG_DFL),
            call(signal.SIGILL, signal.SIG_DFL),
        ])


@pytest.mark.skipif(os.name != "posix", reason="needs POSIX signals")
def test_child_process_reports_and_terminates():
    script = (
        "import os, signal, time\n"
        "from shiba_demangle.runtime import install_crash_handler\n"
        "install_crash_handler()\n"
        "os.kill(os.getpid(), signal.SIGSEGV)\n"
        "time.sleep(5)\n"
        "print('resumed')\n"
    )
    env = dict(os.environ, PYTHONPATH=str(SRC_DIR))
    result = subprocess.run(
        [sys.executable, "-c", script], capture_output=True, text=True, env=env, timeout=30
    )
    assert result.returncode != 0
    assert "Current stack trace:" in result.stderr
    assert "resumed" not in result.stdout
