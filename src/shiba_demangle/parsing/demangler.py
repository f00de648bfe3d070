"""
Recursive-descent decoder for Shiba mangled symbols.

Grammar (after the `_W` sentinel):
    T <type>                                   type
    C ...                                      closure (unsupported)
    F D <type>                                 deinitializer
    F M <type> <ident> <args> _ [R <type>] [C] method
    F I <type> <args> _ [R <type>] [C]         initializer
    F <ident> <args> _ [R <type>] [C]          free function

    <ident> = <decimal-length><raw-chars>
    <arg>   = [S | E <ident>] <ident> <type>
    <type>  = P <count> T <type-continuation>
            | F <type>* R <type>
            | t <type>* T
            | s <scalar-code>
            | <ident>
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .errors import (
    DemangleError,
    MalformedIntegerError,
    TruncatedError,
    UnknownTypeMarkerError,
    UnrecognizedFormatError,
    UnsupportedError,
)

SENTINEL = "_W"

# Bounds on what a real symbol can carry; anything deeper is rejected
MAX_TYPE_DEPTH = 64
MAX_POINTER_DEPTH = 64

RE_UNSIGNED = re.compile(r"[0-9]+")
# Mirrors the standard string-to-integer conversion: whitespace, sign, digits
RE_SIGNED = re.compile(r"\s*[+-]?[0-9]+")

SCALAR_TYPES = {
    "I": "Int",
    "f": "Float",
    "d": "Double",
    "F": "Float80",
    "b": "Bool",
    "v": "Void",
}


class DeclKind(str, Enum):
    TYPE = "type"
    FUNCTION = "function"
    METHOD = "method"
    INITIALIZER = "initializer"
    DEINITIALIZER = "deinitializer"
    CLOSURE = "closure"


@dataclass(frozen=True)
class DemangledSymbol:
    mangled: str
    kind: DeclKind
    text: str

    def __str__(self) -> str:
        return self.text


class Demangler:
    """
    Single-use parser over one mangled symbol.

    The cursor only moves forward. Readers return the rendered fragment for
    what they consumed and raise a `DemangleError` on the first problem, so a
    failed decode never yields partial text.
    """

    def __init__(self, symbol: str, allow_sign: bool = False):
        self.symbol = symbol
        self.pos = 0
        self.allow_sign = allow_sign
        self.depth = 0

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    @property
    def remaining(self) -> str:
        return self.symbol[self.pos:]

    def at_end(self) -> bool:
        return self.pos >= len(self.symbol)

    def peek(self) -> str:
        """Next character, or "" when the input is exhausted."""
        return self.symbol[self.pos:self.pos + 1]

    def advance(self, count: int = 1) -> None:
        self.pos += count

    def consume(self, char: str) -> bool:
        if self.peek() == char:
            self.pos += 1
            return True
        return False

    def require_more(self, what: str) -> None:
        if self.at_end():
            raise self._error(TruncatedError, f"expected {what}, reached end of symbol")

    def expect(self, char: str, what: str) -> None:
        self.require_more(what)
        if not self.consume(char):
            raise self._error(UnrecognizedFormatError, f"expected `{char}` {what}, got `{self.peek()}`")

    def _error(self, cls, message: str) -> DemangleError:
        return cls(message, symbol=self.symbol, position=self.pos)

    # ------------------------------------------------------------------
    # Leaf readers
    # ------------------------------------------------------------------

    def _match_number(self) -> Optional[re.Match]:
        pattern = RE_SIGNED if self.allow_sign else RE_UNSIGNED
        return pattern.match(self.symbol, self.pos)

    def read_number(self) -> int:
        """Read a decimal integer; the cursor is untouched on failure."""
        match = self._match_number()
        if not match:
            raise self._error(MalformedIntegerError, f"expected a number, got `{self.peek()}`")
        try:
            value = int(match.group())
        except ValueError:
            # Past the interpreter's digit limit for int()
            raise self._error(MalformedIntegerError, f"number `{match.group()[:16]}...` is too long") from None
        self.pos = match.end()
        return value

    def read_optional_number(self) -> Optional[int]:
        if not self._match_number():
            return None
        return self.read_number()

    def read_identifier(self) -> str:
        length = self.read_number()
        if length < 0 or len(self.symbol) - self.pos < length:
            raise self._error(
                TruncatedError,
                f"identifier of length {length} exceeds the {len(self.symbol) - self.pos} remaining chars",
            )
        name = self.symbol[self.pos:self.pos + length]
        self.advance(length)
        return name

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def read_type(self) -> str:
        if self.depth >= MAX_TYPE_DEPTH:
            raise self._error(UnrecognizedFormatError, f"types nested deeper than {MAX_TYPE_DEPTH} levels")
        self.depth += 1
        try:
            return self._read_type()
        finally:
            self.depth -= 1

    def _read_type(self) -> str:
        self.require_more("a type")
        pointers = ""
        if self.consume("P"):
            count = self.read_number()
            if count < 0:
                raise self._error(MalformedIntegerError, f"negative pointer depth {count}")
            if count > MAX_POINTER_DEPTH:
                raise self._error(MalformedIntegerError, f"pointer depth {count} exceeds {MAX_POINTER_DEPTH}")
            pointers = "*" * count
            self.expect("T", "after pointer depth")
            # TODO: confirm whether a pointer should wrap an independent sub-type;
            # the marker currently decorates whatever type follows it.
            self.require_more("a pointee type")

        marker = self.peek()
        if marker == "F":
            self.advance()
            params = self._read_type_list("R")
            return f"{pointers}({', '.join(params)}) -> {self.read_type()}"
        if marker == "t":
            self.advance()
            fields = self._read_type_list("T")
            return f"{pointers}({', '.join(fields)})"
        if marker == "s":
            self.advance()
            return pointers + self.read_scalar()
        return pointers + self.read_identifier()

    def _read_type_list(self, terminator: str) -> List[str]:
        types = []
        while self.peek() != terminator:
            self.require_more(f"a type or `{terminator}`")
            types.append(self.read_type())
        self.advance()
        return types

    def read_scalar(self) -> str:
        self.require_more("a scalar type code")
        code = self.peek()
        if code == "i":
            self.advance()
            width = self.read_optional_number()
            return "Int" if width is None else f"Int{width}"
        if code not in SCALAR_TYPES:
            raise self._error(UnknownTypeMarkerError, f"unknown scalar type code `{code}`")
        self.advance()
        return SCALAR_TYPES[code]

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def read_argument(self) -> str:
        anonymous = False
        external = "_"
        if self.consume("S"):
            anonymous = True
        elif self.consume("E"):
            external = self.read_identifier()

        internal = self.read_identifier()
        arg_type = self.read_type()
        if anonymous:
            return f"{internal}: {arg_type}"
        return f"{external} {internal}: {arg_type}"

    def read_function(self) -> DemangledSymbol:
        self.require_more("a function kind")
        if self.consume("D"):
            return self._result(DeclKind.DEINITIALIZER, f"{self.read_type()}.deinit")

        if self.consume("M"):
            kind = DeclKind.METHOD
            owner = self.read_type()
            name = f"{owner}.{self.read_identifier()}"
        elif self.consume("I"):
            kind = DeclKind.INITIALIZER
            name = f"{self.read_type()}.init"
        else:
            kind = DeclKind.FUNCTION
            name = self.read_identifier()

        args = []
        while self.peek() != "_":
            self.require_more("an argument or `_`")
            args.append(self.read_argument())
        self.advance()

        text = f"{name}({', '.join(args)})"
        if self.consume("R"):
            text += f" -> {self.read_type()}"
        if self.consume("C"):
            text += " (closure #1)"
        return self._result(kind, text)

    def _result(self, kind: DeclKind, text: str) -> DemangledSymbol:
        return DemangledSymbol(mangled=self.symbol, kind=kind, text=text)

    def parse(self) -> DemangledSymbol:
        try:
            return self._parse()
        except RecursionError:
            # A crash handler can call in with little stack left
            raise self._error(UnrecognizedFormatError, "ran out of stack while decoding") from None

    def _parse(self) -> DemangledSymbol:
        if not self.symbol.startswith(SENTINEL):
            raise self._error(UnrecognizedFormatError, f"missing `{SENTINEL}` prefix")
        self.advance(len(SENTINEL))
        self.require_more("a declaration kind")

        marker = self.peek()
        self.advance()
        if marker == "T":
            result = self._result(DeclKind.TYPE, self.read_type())
        elif marker == "F":
            result = self.read_function()
        elif marker == "C":
            raise self._error(UnsupportedError, "closure symbols cannot be demangled")
        else:
            self.pos -= 1
            raise self._error(UnrecognizedFormatError, f"unknown declaration kind `{marker}`")

        if not self.at_end():
            raise self._error(UnrecognizedFormatError, f"unexpected trailing text `{self.remaining}`")
        return result


def parse(symbol: str, allow_sign: bool = False) -> DemangledSymbol:
    """
    Decode `symbol`, raising a `DemangleError` subclass on failure.
    """
    return Demangler(symbol, allow_sign=allow_sign).parse()


def demangle(symbol: str, allow_sign: bool = False) -> Optional[str]:
    """
    Decode `symbol` into its readable form, or return None if it is not a
    well-formed Shiba symbol.
    """
    try:
        return parse(symbol, allow_sign=allow_sign).text
    except DemangleError:
        return None


def is_mangled(symbol: str) -> bool:
    return symbol.startswith(SENTINEL)
