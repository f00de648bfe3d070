import re
from typing import List

from rich.text import Text

from ..parsing.mapper import SymbolMatch

ADDRESSES = re.compile(r"\b0x[0-9a-fA-F]+\b")

STYLE_DECODED = "bold green"
STYLE_FAILED = "bold red"
STYLE_ADDRESS = "cyan"
STYLE_COMMENT = "dim grey"


def highlight_line(line: str, symbols: List[SymbolMatch]) -> Text:
    """
    Render one raw line with its symbols replaced by their decoded form.

    Decoded symbols are green, `_W...` candidates that failed to decode stay
    verbatim in red, hex addresses are cyan, and `#` comment lines are dim.
    """
    stripped = line.lstrip()
    if stripped.startswith("#"):
        return Text(line, style=STYLE_COMMENT)

    text = Text()
    last = 0
    for found in symbols:
        _append_plain(text, line[last:found.start])
        text.append(found.rendered, style=STYLE_DECODED if found.ok else STYLE_FAILED)
        last = found.end
    _append_plain(text, line[last:])
    return text


def _append_plain(text: Text, chunk: str) -> None:
    """Append untouched text, colouring hex addresses."""
    pos = 0
    for m in ADDRESSES.finditer(chunk):
        text.append(chunk[pos:m.start()])
        text.append(m.group(), style=STYLE_ADDRESS)
        pos = m.end()
    text.append(chunk[pos:])


def describe_symbol(found: SymbolMatch) -> Text:
    """One detail-panel row: mangled name, then its decoding or failure kind."""
    row = Text()
    row.append(found.mangled, style="bold")
    row.append(" → ", style="dim")
    if found.ok:
        row.append(found.demangled, style=STYLE_DECODED)
    else:
        row.append(found.error.value if found.error else "failed", style=STYLE_FAILED)
        if found.reason:
            row.append(f"  {found.reason}", style="dim italic")
    return row
