"""
In-process C++ ABI demangling through `__cxa_demangle`.

This is the generic fallback used by the stack-trace renderer. It avoids
spawning `c++filt` so it can run while the process is going down.
"""
from ctypes import CDLL, POINTER, byref, c_char_p, c_int, c_size_t, c_void_p, string_at
from ctypes.util import find_library
from typing import Any, Optional

_CANDIDATE_LIBRARIES = ("stdc++", "c++")

_cxa_demangle: Any = None
_free: Any = None
_loaded = False


def _load_library(name: str) -> Optional[CDLL]:
    path = find_library(name)
    if not path:
        return None
    try:
        return CDLL(path)
    except OSError:
        return None


def _bind() -> None:
    """Look up `__cxa_demangle` and `free` once per process."""
    global _cxa_demangle, _free, _loaded
    if _loaded:
        return
    _loaded = True

    for name in _CANDIDATE_LIBRARIES:
        lib = _load_library(name)
        func = getattr(lib, "__cxa_demangle", None) if lib is not None else None
        if func is not None:
            func.argtypes = [c_char_p, c_char_p, POINTER(c_size_t), POINTER(c_int)]
            func.restype = c_void_p
            _cxa_demangle = func
            break

    libc = _load_library("c")
    if libc is not None:
        _free = libc.free
        _free.argtypes = [c_void_p]
        _free.restype = None


def is_available() -> bool:
    _bind()
    return _cxa_demangle is not None and _free is not None


def cxa_demangle(symbol: str) -> Optional[str]:
    """
    Demangle an Itanium C++ ABI symbol.
    Returns None when the runtime library is missing, the name is not valid,
    or the library fails to allocate the result.
    """
    if not is_available():
        return None

    status = c_int()
    result = _cxa_demangle(symbol.encode("utf-8", "surrogateescape"), None, None, byref(status))
    if result:
        try:
            return string_at(result).decode("utf-8", "replace")
        finally:
            _free(result)

    # -1: allocation failure, -2: not a valid mangled name, -3: invalid argument
    return None
