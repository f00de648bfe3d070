import json
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_CONFIG: Dict[str, Any] = {
    "max_stack_depth": 256,
    "allow_signed_integers": False,
    "generic_demangler": "cxxabi",  # or "c++filt"
    "cxxfilt": "c++filt",
    "log_file": "/tmp/shiba_demangle.log",
}


class ConfigManager:
    """
    Reads ~/.shiba-demangle/config.json and merges it over DEFAULT_CONFIG.
    """
    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir if config_dir else Path.home() / ".shiba-demangle"
        self.config_file = self.config_dir / "config.json"
        self.config = self.load_config()

    def load_config(self) -> Dict[str, Any]:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        config = DEFAULT_CONFIG.copy()
        if not self.config_file.exists():
            return config

        try:
            with open(self.config_file, "r") as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError):
            # Corrupt or unreadable file: keep the defaults
            return config

        if isinstance(user_config, dict):
            config.update(user_config)
        return config

    def save_config(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self.config, f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.config[key] = value
        self.save_config()
