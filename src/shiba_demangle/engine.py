from dataclasses import replace
from typing import Callable, Optional
from .parsing import scan_symbols, demangle_line
from .utils.config import ConfigManager
from .utils.state import ViewerState
from .utils.watcher import FileWatcher
import time

class DemangleEngine:
    def __init__(self, source_file: str, config: Optional[ConfigManager] = None):
        self.config = config if config else ConfigManager()
        self.state = ViewerState(source_path=source_file)
        self.watcher = FileWatcher()
        self.on_update_callback: Optional[Callable[[ViewerState], None]] = None
        self.log_file = self.config.get("log_file", "/tmp/shiba_demangle.log")
        self.allow_sign = bool(self.config.get("allow_signed_integers", False))

    def _log(self, msg: str):
        with open(self.log_file, "a") as f:
            f.write(f"[{time.time()}] {msg}\n")

    def start(self):
        self.refresh()
        self.watcher.start_watching(self.state.source_path, self._on_file_saved)

    def stop(self):
        self.watcher.stop_watching()

    def _on_file_saved(self, path: str):
        self.refresh()

    def refresh(self):
        """
        Re-read the source file into a new ViewerState.
        The previous state is never mutated, so a reader on another thread
        always sees one consistent snapshot.
        """
        self._log(f"Refreshing {self.state.source_path}")
        try:
            with open(self.state.source_path, "r", errors="replace") as f:
                raw_lines = f.read().splitlines()

            symbols = {}
            demangled = []
            for idx, line in enumerate(raw_lines):
                found = scan_symbols(line, allow_sign=self.allow_sign)
                if found:
                    symbols[idx] = found
                demangled.append(demangle_line(line, allow_sign=self.allow_sign))

            state = ViewerState(source_path=self.state.source_path)
            state.update_lines(raw_lines, demangled, symbols)
            state.last_update = time.time()
            self._log(f"Decoded {state.decoded_count} symbols, {state.failed_count} failed")

        except OSError as e:
            self._log(f"Refresh Error: {str(e)}")
            state = replace(self.state, error=f"Could not read {self.state.source_path}: {e}")

        self.state = state
        if self.on_update_callback:
            self.on_update_callback(state)
