import argparse
import signal
import sys
import threading
from typing import List, Optional

from ghostsay.core.errors import InvalidConfigError
from ghostsay.core.server_config import ServerConfig
from ghostsay.implementations.tts.say_command_output import SayCommandOutput
from ghostsay.network.interfaces import find_interface, list_interfaces
from ghostsay.server.lifecycle import ServerManager
from ghostsay.utils.config import Config
from ghostsay.utils.logger import setup_logging
from ghostsay.utils.settings import SettingsStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghostsay",
        description="Speak text on this machine over HTTP: GET /say?text=Hello",
    )
    parser.add_argument("--host", help="IP address to bind (default: saved setting or 127.0.0.1)")
    parser.add_argument("--port", help="Port to listen on, 1024-65535 (default: saved setting or 57630)")
    parser.add_argument("--save", action="store_true", help="Remember --host/--port for future runs")
    parser.add_argument("--list-interfaces", action="store_true", help="Show bindable addresses and exit")
    parser.add_argument("--config", help="Path to config.json")
    return parser


def print_interfaces() -> None:
    for descriptor in list_interfaces():
        print(f"{descriptor.ip:<16} {descriptor.description}")


def resolve_config(args: argparse.Namespace, settings: SettingsStore) -> ServerConfig:
    """Command line wins over saved settings; --save writes the result back."""
    if args.host is not None:
        settings.set_selected_ip(args.host)
    if args.port is not None:
        settings.set_port(args.port)
    if args.save:
        settings.save()
    return settings.server_config()


def install_stop_signals(stop_event: threading.Event) -> None:
    """SIGTERM (launchd, systemd, kill) ends the wait loop so the server is stopped cleanly."""
    def _on_signal(signum, frame):
        print(f"\nReceived signal {signum}, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGTERM, _on_signal)


def wait_for_shutdown(stop_event: Optional[threading.Event] = None) -> None:
    stop_event = stop_event or threading.Event()
    try:
        while not stop_event.wait(0.5):
            pass
    except KeyboardInterrupt:
        print("\nShutting down...")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        Config.load(args.config)
    except InvalidConfigError as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return 2

    if args.list_interfaces:
        print_interfaces()
        return 0

    setup_logging()
    settings = SettingsStore()
    try:
        config = resolve_config(args, settings)
    except InvalidConfigError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    descriptor = find_interface(config.host)
    if descriptor is not None and descriptor.is_public:
        print(f"⚠️  Warning: {config.host} is publicly accessible from the internet")

    manager = ServerManager(SayCommandOutput(), config)
    if not manager.start():
        print(f"❌ {manager.last_error_message}", file=sys.stderr)
        return 1

    print(f"🚀 GhostSay listening on {manager.base_url}")
    print(f"   Try: {manager.base_url}/say?text=Hello")
    stop_event = threading.Event()
    install_stop_signals(stop_event)
    try:
        wait_for_shutdown(stop_event)
    finally:
        manager.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
