"""
ctypes bindings for the C library's stack unwinder and symbol lookup.

`backtrace()` comes from execinfo (glibc, macOS libSystem) and `dladdr()`
from the dynamic loader. On platforms without them the unwinder returns an
empty stack and the resolver finds nothing.
"""
import ctypes
import platform
from dataclasses import dataclass
from typing import List, Optional


class DlInfo(ctypes.Structure):
    _fields_ = [
        ("dli_fname", ctypes.c_char_p),
        ("dli_fbase", ctypes.c_void_p),
        ("dli_sname", ctypes.c_char_p),
        ("dli_saddr", ctypes.c_void_p),
    ]


@dataclass(frozen=True)
class SymbolInfo:
    module_path: str
    symbol_name: str
    symbol_address: int


_libc = None


def _get_libc():
    global _libc
    if _libc is None:
        if platform.system() == "Windows":
            raise OSError("execinfo/dladdr are not available on Windows")
        # Handle of the running process: sees libc and the dynamic loader
        libc = ctypes.CDLL(None)

        backtrace = getattr(libc, "backtrace", None)
        if backtrace is not None:
            backtrace.argtypes = [ctypes.POINTER(ctypes.c_void_p), ctypes.c_int]
            backtrace.restype = ctypes.c_int

        dladdr = getattr(libc, "dladdr", None)
        if dladdr is not None:
            dladdr.argtypes = [ctypes.c_void_p, ctypes.POINTER(DlInfo)]
            dladdr.restype = ctypes.c_int

        _libc = libc
    return _libc


def native_backtrace(max_depth: int) -> List[int]:
    """Return up to `max_depth` return addresses, newest frame first."""
    if max_depth <= 0:
        return []
    backtrace = getattr(_get_libc(), "backtrace", None)
    if backtrace is None:
        return []

    buffer = (ctypes.c_void_p * max_depth)()
    count = backtrace(buffer, max_depth)
    return [buffer[i] or 0 for i in range(count)]


def native_resolve(address: int) -> Optional[SymbolInfo]:
    """
    Find the loaded module and the nearest preceding exported symbol for
    `address`. Returns None when either one is unknown.
    """
    dladdr = getattr(_get_libc(), "dladdr", None)
    if dladdr is None:
        return None

    info = DlInfo()
    if dladdr(ctypes.c_void_p(address), ctypes.byref(info)) == 0:
        return None
    if not info.dli_fname or not info.dli_sname or info.dli_saddr is None:
        return None

    return SymbolInfo(
        module_path=info.dli_fname.decode("utf-8", "surrogateescape"),
        symbol_name=info.dli_sname.decode("utf-8", "surrogateescape"),
        symbol_address=info.dli_saddr,
    )
