import json
import sys
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

import pytest
from pydantic import ValidationError

from ghostsay.core.errors import InvalidConfigError, PortInUseError
from ghostsay.core.server_config import ServerConfig
from ghostsay.core.state_manager import ServerState, StateManager
from ghostsay.utils.config import Config
from ghostsay.utils.settings import SettingsStore


def test_defaults_when_unset(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    assert store.get_port() == 57630
    assert store.get_selected_ip() == "127.0.0.1"
    assert store.server_config() == ServerConfig.create("127.0.0.1", 57630)


def test_values_survive_save_and_reload(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = SettingsStore(path)
    store.set_port(8123)
    store.set_selected_ip("192.168.1.20")
    store.save()

    reloaded = SettingsStore(path)
    assert reloaded.get_port() == 8123
    assert reloaded.get_selected_ip() == "192.168.1.20"
    assert json.loads(path.read_text()) == {"port": 8123, "selected_ip": "192.168.1.20"}


def test_set_port_accepts_numeric_strings(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    store.set_port("9000")
    assert store.get_port() == 9000


def test_out_of_range_port_is_rejected(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    for bad in (0, 80, 1023, 65536, "abc", "", None, 8080.5, True):
        with pytest.raises(InvalidConfigError):
            store.set_port(bad)
    assert store.get_port() == 57630


def test_invalid_ip_is_rejected(tmp_path):
    store = SettingsStore(tmp_path / "settings.json")
    for bad in ("localhost", "999.1.1.1", "", "1.2.3"):
        with pytest.raises(InvalidConfigError):
            store.set_selected_ip(bad)
    assert store.get_selected_ip() == "127.0.0.1"


def test_bad_file_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"port": 22, "selected_ip": "not-an-ip"}))
    store = SettingsStore(path)
    assert store.get_port() == 57630
    assert store.get_selected_ip() == "127.0.0.1"


def test_corrupt_file_is_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert SettingsStore(path).get_port() == 57630


def test_server_config_bounds():
    assert ServerConfig.create("127.0.0.1", 1024).port == 1024
    assert ServerConfig.create("127.0.0.1", 65535).port == 65535
    assert ServerConfig.create("::1", 8080).url == "http://[::1]:8080"
    for port in (1023, 65536, -1):
        with pytest.raises(InvalidConfigError):
            ServerConfig.create("127.0.0.1", port)
    with pytest.raises(InvalidConfigError):
        ServerConfig.create("example.com", 8080)


def test_server_config_rejects_bad_port_on_direct_construction():
    with pytest.raises(ValidationError):
        ServerConfig(host="127.0.0.1", port=80)
    with pytest.raises(ValidationError):
        ServerConfig(host="not-an-ip", port=8080)


def test_state_manager_transitions():
    state = StateManager()
    assert state.get_state() == ServerState.STOPPED

    # FAILED needs a reason
    assert state.transition_to(ServerState.FAILED) is False
    assert state.get_state() == ServerState.STOPPED

    error = PortInUseError("127.0.0.1", 8080, "Address already in use")
    assert state.transition_to(ServerState.FAILED, error) is True
    assert state.get_failure() is error
    assert error.user_message == "Port 8080 is already in use. Try a different port in Settings."

    state.transition_to(ServerState.RUNNING)
    assert state.is_running()
    assert state.get_failure() is None


def test_config_load_merges_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"server": {"port": 9999}, "extra": {"x": 1}}))
    try:
        data = Config.load(path)
        assert data["server"]["port"] == 9999
        assert data["server"]["host"] == "127.0.0.1"
        assert data["speech"]["executable"] == "/usr/bin/say"
        assert data["extra"] == {"x": 1}
    finally:
        Config.load()


def test_config_load_without_file(tmp_path):
    try:
        data = Config.load(tmp_path / "missing.json")
        assert data["server"]["port"] == 57630
    finally:
        Config.load()


def test_config_load_rejects_malformed_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{\"server\": ")
    try:
        with pytest.raises(InvalidConfigError):
            Config.load(path)
        path.write_text("[1, 2, 3]")
        with pytest.raises(InvalidConfigError):
            Config.load(path)
    finally:
        Config.load()


def test_unsaved_settings_come_from_config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"server": {"host": "192.168.1.20", "port": 8400}}))
    try:
        Config.load(path)
        store = SettingsStore(tmp_path / "settings.json")
        assert store.get_port() == 8400
        assert store.get_selected_ip() == "192.168.1.20"
    finally:
        Config.load()
