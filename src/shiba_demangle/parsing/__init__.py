from .errors import (
    DemangleError,
    ErrorKind,
    MalformedIntegerError,
    TruncatedError,
    UnknownTypeMarkerError,
    UnrecognizedFormatError,
    UnsupportedError,
)
from .demangler import SENTINEL, DeclKind, DemangledSymbol, Demangler, demangle, is_mangled, parse
from .mapper import SymbolMatch, scan_symbols, demangle_line, demangle_text, demangle_stream, demangle_generic
from .cxxabi import cxa_demangle
from typing import Callable, Optional

GenericDemangler = Callable[[str], Optional[str]]


def render_symbol(symbol: str, generic: Optional[GenericDemangler] = cxa_demangle,
                  allow_sign: bool = False) -> str:
    """
    Fallback chain used for diagnostics:
    Shiba decoder -> generic C++ demangler -> the raw symbol.
    """
    text = demangle(symbol, allow_sign=allow_sign)
    if text is not None:
        return text
    if generic is not None:
        text = generic(symbol)
        if text:
            return text
    return symbol
