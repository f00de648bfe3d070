"""
Failure taxonomy for the Shiba demangler.

Every failure aborts the whole decode. Callers that only want a best-effort
rendering should use `demangle()`, which turns these into `None`.
"""
from enum import Enum
from typing import ClassVar, Optional


class ErrorKind(str, Enum):
    MALFORMED_INTEGER = "malformed_integer"
    TRUNCATED = "truncated"
    UNKNOWN_TYPE_MARKER = "unknown_type_marker"
    UNRECOGNIZED_FORMAT = "unrecognized_format"
    UNSUPPORTED = "unsupported"


class DemangleError(ValueError):
    """Base class for every decode failure."""

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, symbol: Optional[str] = None, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.symbol = symbol
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at offset {self.position})"


class MalformedIntegerError(DemangleError):
    kind = ErrorKind.MALFORMED_INTEGER


class TruncatedError(DemangleError):
    kind = ErrorKind.TRUNCATED


class UnknownTypeMarkerError(DemangleError):
    kind = ErrorKind.UNKNOWN_TYPE_MARKER


class UnrecognizedFormatError(DemangleError):
    kind = ErrorKind.UNRECOGNIZED_FORMAT


class UnsupportedError(DemangleError):
    """Closure declarations are a permanent limitation, not a transient error."""

    kind = ErrorKind.UNSUPPORTED
