import json
from pathlib import Path
from typing import Any, Dict, Optional

from ghostsay.core.errors import InvalidConfigError

DEFAULTS: Dict[str, Any] = {
    "server": {
        "host": "127.0.0.1",
        "port": 57630,
        "startup_timeout_seconds": 5.0,
        "shutdown_timeout_seconds": 3.0,
        "log_level": "warning",
    },
    "speech": {
        "executable": "/usr/bin/say",
    },
    "settings": {
        "path": "~/.ghostsay/settings.json",
    },
    "logging": {
        "directory": "logs/terminal",
    },
}


class Config:
    """Process-wide configuration loaded from config.json at the project root."""
    data: Dict[str, Any] = {}

    @staticmethod
    def get_project_root() -> Path:
        # src/ghostsay/utils/config.py -> project root
        return Path(__file__).parent.parent.parent.parent

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Dict[str, Any]:
        """
        Reads config.json and merges it over the defaults.
        A missing file is not an error; the defaults are used as-is.
        Raises InvalidConfigError if the file is not a JSON object.
        """
        config_path = Path(path) if path else cls.get_project_root() / "config.json"

        merged = {section: dict(values) for section, values in DEFAULTS.items()}
        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    user_data = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidConfigError(f"Malformed config file {config_path}: {e}") from e
            if not isinstance(user_data, dict):
                raise InvalidConfigError(f"Config file {config_path} must contain a JSON object")
            for section, values in user_data.items():
                if isinstance(values, dict) and section in merged:
                    merged[section].update(values)
                else:
                    merged[section] = values

        cls.data = merged
        return cls.data

    @classmethod
    def section(cls, name: str) -> Dict[str, Any]:
        if not cls.data:
            cls.load()
        return cls.data.get(name, {})
