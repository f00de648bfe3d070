"""
Stack-trace renderer.

Turns the return addresses of the current call stack into readable frames:

    0    libdemo.so                         0x00007f3a1c2011a0 Foo.bar(_ x: Int) + 42

Frames whose module or symbol cannot be resolved are skipped. The index
column keeps the frame's position in the unwound stack, so a gap shows where
a frame was dropped.
"""
import os
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, TextIO

from ..parsing import GenericDemangler, cxa_demangle, render_symbol
from .native import SymbolInfo, native_backtrace, native_resolve

MAX_STACK_DEPTH = 256
HEADER = "Current stack trace:"

Unwinder = Callable[[int], Sequence[int]]
Resolver = Callable[[int], Optional[SymbolInfo]]


@dataclass(frozen=True)
class Frame:
    index: int
    module: str
    symbol_address: int
    name: str
    offset: int

    def format(self) -> str:
        return f"{self.index:<4d} {self.module:<34s} 0x{self.symbol_address:016x} {self.name} + {self.offset}"


def collect_frames(
    unwinder: Unwinder = native_backtrace,
    resolver: Resolver = native_resolve,
    generic: Optional[GenericDemangler] = cxa_demangle,
    max_depth: int = MAX_STACK_DEPTH,
    allow_sign: bool = False,
) -> List[Frame]:
    frames = []
    for index, address in enumerate(list(unwinder(max_depth))[:max_depth]):
        info = resolver(address)
        if info is None:
            continue
        frames.append(Frame(
            index=index,
            module=os.path.basename(info.module_path),
            symbol_address=info.symbol_address,
            name=render_symbol(info.symbol_name, generic=generic, allow_sign=allow_sign),
            offset=address - info.symbol_address,
        ))
    return frames


def format_stacktrace(frames: List[Frame]) -> str:
    lines = [HEADER]
    lines.extend(frame.format() for frame in frames)
    return "\n".join(lines) + "\n"


def print_stacktrace(file: Optional[TextIO] = None, **kwargs) -> None:
    """
    Render the current call stack to `file` (stderr by default).
    Keyword arguments are passed on to `collect_frames`.
    """
    out = file if file is not None else sys.stderr
    out.write(format_stacktrace(collect_frames(**kwargs)))
    out.flush()
