"""
Crash reporting for processes that host Shiba code.

Whatever path gets here reports first and then terminates; nothing in this
module returns control to the faulting code. The report runs ordinary Python
(it allocates and may import), so it is best effort: a process whose heap is
already corrupted may die before the trace is complete.
"""
import faulthandler
import os
import signal
import sys
from typing import Optional, TextIO

from .backtrace import print_stacktrace

FATAL_SIGNALS = (signal.SIGSEGV, signal.SIGILL)

_handling = False


def crash(file: Optional[TextIO] = None) -> None:
    """Print the stack trace and abort the process."""
    try:
        print_stacktrace(file)
    finally:
        os.abort()


def fatal_error(message: str, file: Optional[TextIO] = None) -> None:
    out = file if file is not None else sys.stderr
    out.write(f"fatal error: {message}\n")
    crash(out)


def handle_signal(signum: int, frame=None) -> None:
    global _handling
    if _handling:
        # Faulted while reporting; give up on the report
        os._exit(128 + signum)
    _handling = True

    sys.stderr.write(f"{signal.strsignal(signum) or f'signal {signum}'}\n")
    crash(sys.stderr)


def install_crash_handler(native_faults: bool = False, file: Optional[TextIO] = None) -> None:
    """
    Report SIGSEGV and SIGILL before the process dies.

    Python-level handlers run only once the signal reaches the interpreter
    loop, which covers signals sent with `os.kill` or `signal.raise_signal`.
    A hardware fault inside native code never gets there, so with
    `native_faults` the interpreter's own `faulthandler` takes these signals
    instead; it dumps the Python stack and terminates.
    """
    if native_faults:
        faulthandler.enable(file=file if file is not None else sys.stderr)
        return

    for signum in FATAL_SIGNALS:
        signal.signal(signum, handle_signal)


def reset_crash_handler() -> None:
    global _handling
    _handling = False
    if faulthandler.is_enabled():
        faulthandler.disable()
    for signum in FATAL_SIGNALS:
        signal.signal(signum, signal.SIG_DFL)
