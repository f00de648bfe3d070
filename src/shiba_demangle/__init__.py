"""
Demangler for symbols produced by the Shiba compiler, plus the stack-trace
renderer that uses it.
"""
from .parsing import (
    DeclKind,
    DemangledSymbol,
    DemangleError,
    ErrorKind,
    demangle,
    demangle_stream,
    parse,
    render_symbol,
)
from .runtime import install_crash_handler, print_stacktrace

__all__ = [
    "parse",
    "demangle",
    "demangle_stream",
    "render_symbol",
    "print_stacktrace",
    "install_crash_handler",
    "DeclKind",
    "DemangledSymbol",
    "DemangleError",
    "ErrorKind",
]
