"""
Symbol Detail Panel
===================
Bottom panel listing every `_W...` symbol on the line under the cursor,
with its decoded form or the reason it could not be decoded.
"""

from __future__ import annotations

from typing import Dict, List

from rich.text import Text
from textual.widgets import Static

from ..parsing.mapper import SymbolMatch
from ..utils.highlighter import describe_symbol


class SymbolDetailPanel(Static):

    DEFAULT_CSS = """
    SymbolDetailPanel {
        height: 6;
        dock: bottom;
        background: #252526;
        border-top: solid #3c3c3c;
        padding: 0 1;
    }
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._symbols: Dict[int, List[SymbolMatch]] = {}
        self._current_line: int | None = None

    # ── Public API ──────────────────────────────────────────

    def update_context(self, symbols: Dict[int, List[SymbolMatch]]) -> None:
        """Called whenever the engine produces new state."""
        self._symbols = symbols

    def show_for_line(self, line_idx: int) -> None:
        self._current_line = line_idx
        found = self._symbols.get(line_idx)
        if not found:
            self._render_empty()
            return
        self._render_symbols(found)

    # ── Internal rendering ──────────────────────────────────

    def _render_symbols(self, found: List[SymbolMatch]) -> None:
        body = Text()
        body.append(f"line {self._current_line + 1}\n", style="bold yellow")
        for i, symbol in enumerate(found):
            body.append_text(describe_symbol(symbol))
            if i < len(found) - 1:
                body.append("\n")
        self.update(body)

    def _render_empty(self) -> None:
        t = Text()
        t.append("Shiba ", style="bold cyan")
        t.append("│ ", style="dim")
        t.append("(no mangled symbols on this line)", style="dim italic")
        self.update(t)
