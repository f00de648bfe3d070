import re
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from .demangler import parse
from .errors import DemangleError, ErrorKind

# A Shiba symbol candidate inside free text (crash logs, nm output, assembly)
SYMBOL_PATTERN = re.compile(r"_W\w+")


@dataclass
class SymbolMatch:
    start: int
    end: int
    mangled: str
    demangled: Optional[str] = None
    error: Optional[ErrorKind] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.demangled is not None

    @property
    def rendered(self) -> str:
        return self.demangled if self.demangled is not None else self.mangled


def scan_symbols(line: str, allow_sign: bool = False) -> List[SymbolMatch]:
    """Find every `_W...` candidate in `line` and try to decode it."""
    matches = []
    for m in SYMBOL_PATTERN.finditer(line):
        found = SymbolMatch(start=m.start(), end=m.end(), mangled=m.group())
        try:
            found.demangled = parse(found.mangled, allow_sign=allow_sign).text
        except DemangleError as e:
            found.error = e.kind
            found.reason = str(e)
        matches.append(found)
    return matches


def demangle_line(line: str, allow_sign: bool = False) -> str:
    """Replace every decodable symbol in `line`; leave the others verbatim."""
    out = []
    last = 0
    for found in scan_symbols(line, allow_sign=allow_sign):
        out.append(line[last:found.start])
        out.append(found.rendered)
        last = found.end
    out.append(line[last:])
    return "".join(out)


def demangle_text(text: str, allow_sign: bool = False) -> str:
    return "\n".join(demangle_line(line, allow_sign=allow_sign) for line in text.split("\n"))


def demangle_stream(content: str, generic: bool = False, cxxfilt: str = "c++filt",
                    allow_sign: bool = False) -> str:
    """
    Demangles every Shiba symbol in `content`. With `generic`, the result is
    then piped through c++filt so C/C++ frames from the runtime read too.
    """
    content = demangle_text(content, allow_sign=allow_sign)
    if not generic:
        return content

    if not shutil.which(cxxfilt):
        return content + f"\n# [WARN] {cxxfilt} not found, C++ symbols mangled."

    try:
        process = subprocess.Popen(
            [cxxfilt],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True
        )

        stdout, stderr = process.communicate(input=content)

        if process.returncode != 0:
            return content  # Fallback on error

        return stdout

    except Exception as e:
        return f"# Error demangling: {e}\n{content}"


def demangle_generic(symbol: str, cxxfilt: str = "c++filt") -> Optional[str]:
    """
    Demangle a single C++ symbol through c++filt.
    Returns None if the tool is missing, fails, or leaves the name unchanged.
    """
    if not shutil.which(cxxfilt):
        return None

    try:
        result = subprocess.run(
            [cxxfilt, symbol], capture_output=True, text=True, check=False
        )
    except OSError:
        return None

    demangled = result.stdout.strip()
    if result.returncode != 0 or not demangled or demangled == symbol:
        return None
    return demangled
