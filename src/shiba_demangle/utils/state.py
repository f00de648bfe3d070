from dataclasses import dataclass, field
from typing import Dict, List, Optional
from ..parsing.mapper import SymbolMatch

@dataclass
class ViewerState:
    """
    Everything the symbol viewer shows for one file.
    """
    source_path: str = ""
    raw_lines: List[str] = field(default_factory=list)
    demangled_lines: List[str] = field(default_factory=list)

    # line index -> symbols found on that line
    symbols: Dict[int, List[SymbolMatch]] = field(default_factory=dict)

    error: str = ""
    last_update: float = 0.0

    @property
    def has_errors(self) -> bool:
        return bool(self.error)

    @property
    def decoded_count(self) -> int:
        return sum(1 for found in self.all_symbols() if found.ok)

    @property
    def failed_count(self) -> int:
        return sum(1 for found in self.all_symbols() if not found.ok)

    def all_symbols(self) -> List[SymbolMatch]:
        return [found for idx in sorted(self.symbols) for found in self.symbols[idx]]

    def symbols_for_line(self, idx: int) -> List[SymbolMatch]:
        return self.symbols.get(idx, [])

    def get_raw_line(self, idx: int) -> Optional[str]:
        if 0 <= idx < len(self.raw_lines):
            return self.raw_lines[idx]
        return None

    def update_lines(self, raw: List[str], demangled: List[str], symbols: Dict[int, List[SymbolMatch]]):
        self.raw_lines = raw
        self.demangled_lines = demangled
        self.symbols = symbols
        self.error = ""
