from textual.app import App, ComposeResult
from textual.widgets import Footer, Static, TextArea
from textual.containers import VerticalScroll, Vertical
from textual.binding import Binding
from textual.message import Message
from textual.css.query import NoMatches
from rich.text import Text
from ..engine import DemangleEngine
from ..utils.config import ConfigManager
from ..utils.state import ViewerState
from ..utils.highlighter import highlight_line
from .symbol_panel import SymbolDetailPanel

# User Palette
C_BG = "#EBEEEE"
C_TEXT = "#191A1A"
C_ACCENT1 = "#45d3ee" # Cyan
C_ACCENT2 = "#9FBFC5" # Muted Blue
C_ACCENT4 = "#fecd91" # Orange

class TextLine(Static): pass
class LineScroll(VerticalScroll): BINDINGS = []

class SymbolViewerApp(App):
    """Live view of a text file with its Shiba symbols demangled."""

    CSS = f"""
    Screen {{
        background: {C_BG};
        color: {C_TEXT};
    }}

    #main-layout {{ height: 1fr; width: 100%; }}

    #lines-outer {{
        height: 1fr;
        width: 100%;
        border: solid {C_ACCENT2};
        background: {C_BG};
        margin: 1 1;
    }}

    #lines {{ height: 1fr; width: 1fr; }}

    #error-view {{ color: #a80000; display: none; margin: 1 2; }}

    TextLine {{ width: 100%; height: 1; }}
    TextLine.has-symbols {{ background: #e3f2f4; }}
    TextLine.cursor {{ background: {C_ACCENT2}; }}

    Footer {{ background: {C_TEXT}; color: {C_ACCENT1}; }}
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("r", "refresh", "Reload", show=True),
        Binding("up", "cursor_up", "Up", show=False, priority=True),
        Binding("down", "cursor_down", "Down", show=False, priority=True),
        Binding("k", "cursor_up", show=False, priority=True),
        Binding("j", "cursor_down", show=False, priority=True),
    ]

    class StateUpdated(Message):
        def __init__(self, state: ViewerState) -> None:
            super().__init__()
            self.state = state

    def __init__(self, source_file: str, config: ConfigManager | None = None):
        super().__init__()
        self.engine = DemangleEngine(source_file, config)
        # Watchdog calls back on its own thread; hop onto the event loop
        self.engine.on_update_callback = lambda state: self.post_message(self.StateUpdated(state))
        self._cursor = 0
        self._generation = 0
        self._state = ViewerState()

    def compose(self) -> ComposeResult:
        with Vertical(id="main-layout"):
            yield TextArea(id="error-view", read_only=True)
            yield Vertical(LineScroll(id="lines"), id="lines-outer")
        yield SymbolDetailPanel(id="symbol-detail")
        yield Footer()

    def on_mount(self) -> None:
        self.title = self.engine.state.source_path
        self.engine.start()

    def on_unmount(self) -> None:
        self.engine.stop()

    def _render_line(self, idx: int) -> Text:
        raw = self._state.get_raw_line(idx)
        if raw is None:
            return Text("")
        row = Text()
        if idx == self._cursor:
            row.append("▶ ", style=f"bold {C_ACCENT4}")
        else:
            row.append("  ")
        row.append_text(highlight_line(raw, self._state.symbols_for_line(idx)))
        return row

    def _populate_lines(self) -> None:
        scroll = self.query_one("#lines", LineScroll)
        scroll.query(TextLine).remove()
        self._generation += 1
        widgets = []
        for i in range(len(self._state.raw_lines)):
            widget = TextLine(self._render_line(i), id=f"line-{self._generation}-{i}")
            if self._state.symbols_for_line(i):
                widget.add_class("has-symbols")
            if i == self._cursor:
                widget.add_class("cursor")
            widgets.append(widget)
        if widgets:
            scroll.mount(*widgets)

    def _move_cursor(self, new: int) -> None:
        if new < 0 or new >= len(self._state.raw_lines):
            return
        old, self._cursor = self._cursor, new
        for idx in (old, new):
            try:
                widget = self.query_one(f"#line-{self._generation}-{idx}", TextLine)
            except NoMatches:
                continue
            widget.set_class(idx == new, "cursor")
            widget.update(self._render_line(idx))
            if idx == new:
                widget.scroll_visible()
        self._sync_detail()

    def action_cursor_up(self) -> None: self._move_cursor(self._cursor - 1)
    def action_cursor_down(self) -> None: self._move_cursor(self._cursor + 1)

    def action_refresh(self) -> None:
        self.engine.refresh()

    def on_symbol_viewer_app_state_updated(self, message: StateUpdated) -> None:
        state = message.state
        self._state = state
        error_view, outer = self.query_one("#error-view", TextArea), self.query_one("#lines-outer")
        if state.has_errors:
            outer.display, error_view.display = False, True
            error_view.text = state.error
            return

        outer.display, error_view.display = True, False
        self._cursor = min(self._cursor, max(len(state.raw_lines) - 1, 0))
        self._populate_lines()
        self.sub_title = f"{state.decoded_count} decoded, {state.failed_count} failed"
        self.query_one("#symbol-detail", SymbolDetailPanel).update_context(state.symbols)
        self._sync_detail()

    def _sync_detail(self) -> None:
        self.query_one("#symbol-detail", SymbolDetailPanel).show_for_line(self._cursor)

def run_tui(source_file: str, config: ConfigManager | None = None):
    app = SymbolViewerApp(source_file, config)
    app.run()
