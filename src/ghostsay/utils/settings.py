import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Optional, Union

from ghostsay.core.errors import InvalidConfigError
from ghostsay.core.server_config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    ServerConfig,
    validate_host,
    validate_port,
)
from ghostsay.utils.config import Config

PORT_KEY = "port"
SELECTED_IP_KEY = "selected_ip"


class SettingsStore:
    """
    Persists the operator's chosen port and bind address between runs.
    Values are validated on the way in; the file is only written by save().
    """
    def __init__(self, path: Optional[Union[str, Path]] = None):
        if path is None:
            path = Config.section("settings").get("path", "~/.ghostsay/settings.json")
        self.path = Path(path).expanduser()
        self._lock = Lock()
        self._values: Dict[str, Any] = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logging.warning(f"Ignoring unreadable settings file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get_port(self) -> int:
        with self._lock:
            value = self._values.get(PORT_KEY)
        try:
            return validate_port(value)
        except InvalidConfigError:
            return self._configured("port", DEFAULT_PORT, validate_port)

    def get_selected_ip(self) -> str:
        with self._lock:
            value = self._values.get(SELECTED_IP_KEY)
        try:
            return validate_host(value)
        except InvalidConfigError:
            return self._configured("host", DEFAULT_HOST, validate_host)

    @staticmethod
    def _configured(key: str, default, validate):
        """Fallback for an unsaved setting: config.json's server section, then the built-in default."""
        value = Config.section("server").get(key, default)
        try:
            return validate(value)
        except InvalidConfigError:
            logging.warning(f"Ignoring invalid server.{key} in config.json: {value!r}")
            return default

    def set_port(self, value) -> None:
        port = validate_port(value)
        with self._lock:
            self._values[PORT_KEY] = port

    def set_selected_ip(self, value: str) -> None:
        host = validate_host(value)
        with self._lock:
            self._values[SELECTED_IP_KEY] = host

    def server_config(self) -> ServerConfig:
        return ServerConfig.create(self.get_selected_ip(), self.get_port())

    def save(self) -> None:
        with self._lock:
            data = dict(self._values)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logging.info(f"Settings saved to {self.path}")
