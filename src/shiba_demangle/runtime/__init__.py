from .native import SymbolInfo, native_backtrace, native_resolve
from .backtrace import MAX_STACK_DEPTH, Frame, collect_frames, format_stacktrace, print_stacktrace
from .crash import crash, fatal_error, handle_signal, install_crash_handler, reset_crash_handler
