import asyncio
import errno
import ipaddress
import logging
import socket
import sys
import threading
import time
from typing import Optional

import uvicorn

from ghostsay.core.errors import BindError, PortInUseError, ServerRunningError
from ghostsay.core.server_config import ServerConfig
from ghostsay.core.state_manager import ServerState, StateManager
from ghostsay.interfaces.speech_output import ISpeechOutput
from ghostsay.server.app import create_app
from ghostsay.utils.config import Config

_WINDOWS_ADDR_IN_USE = 10048


def _is_address_in_use(error: OSError) -> bool:
    return error.errno == errno.EADDRINUSE or getattr(error, "winerror", None) == _WINDOWS_ADDR_IN_USE


class ServerManager:
    """
    Owns the listening socket and the uvicorn server that serves /say.

    Construct one and hand it to whatever needs to start, stop or observe the
    service. start(), stop() and restart() are serialized by one lock. The
    state only becomes RUNNING after the socket is bound, listening and
    uvicorn has finished starting up.
    """
    def __init__(
        self,
        speech_output: ISpeechOutput,
        config: Optional[ServerConfig] = None,
        state_manager: Optional[StateManager] = None,
    ):
        server_settings = Config.section("server")
        self._config = config or ServerConfig.create(
            server_settings.get("host", "127.0.0.1"),
            server_settings.get("port", 57630),
        )
        self._state = state_manager or StateManager()
        self._app = create_app(speech_output)
        self._startup_timeout = float(server_settings.get("startup_timeout_seconds", 5.0))
        self._shutdown_timeout = float(server_settings.get("shutdown_timeout_seconds", 3.0))
        self._log_level = server_settings.get("log_level", "warning")

        self._lifecycle_lock = threading.Lock()
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._socket: Optional[socket.socket] = None

    # Read-only view for the operator surface

    @property
    def state(self) -> ServerState:
        return self._state.get_state()

    @property
    def is_running(self) -> bool:
        return self._state.is_running()

    @property
    def config(self) -> ServerConfig:
        return self._config

    @property
    def last_error(self) -> Optional[BindError]:
        return self._state.get_failure()

    @property
    def last_error_message(self) -> Optional[str]:
        error = self.last_error
        return error.user_message if error else None

    @property
    def base_url(self) -> str:
        return self._config.url

    # Lifecycle

    def start(self, config: Optional[ServerConfig] = None) -> bool:
        """
        Bind and serve. Returns True when the server is running.

        Already running: nothing happens and True is returned. On a bind
        failure the state becomes FAILED, last_error holds the BindError
        (PortInUseError when the port is taken) and False is returned.
        """
        with self._lifecycle_lock:
            return self._start_locked(config)

    def stop(self) -> None:
        """Stop serving and release the port. Does nothing if nothing is listening."""
        with self._lifecycle_lock:
            self._stop_locked()

    def restart(self, config: Optional[ServerConfig] = None) -> bool:
        """Stop, swap in the new config (if any), then start again."""
        with self._lifecycle_lock:
            self._stop_locked()
            if config is not None:
                self._config = config
            return self._start_locked(None)

    def update_config(self, config: ServerConfig) -> None:
        """Replace the config. Only allowed while stopped; use restart() otherwise."""
        with self._lifecycle_lock:
            if self._server is not None:
                raise ServerRunningError("Stop the server before changing its address or port")
            self._config = config

    def _start_locked(self, config: Optional[ServerConfig]) -> bool:
        if self._server is not None:
            if config is not None and config != self._config:
                logging.warning("Server already running; ignoring new config until restart")
            return True

        if config is not None:
            self._config = config
        host, port = self._config.host, self._config.port

        self._state.transition_to(ServerState.STARTING)
        logging.info(f"Starting GhostSay server on {host}:{port}")

        try:
            sock = self._bind(host, port)
        except BindError as e:
            logging.error(f"Failed to start server: {e.cause or e.reason}")
            self._state.transition_to(ServerState.FAILED, e)
            return False

        server = uvicorn.Server(uvicorn.Config(
            self._app,
            log_level=self._log_level,
            lifespan="off",
            timeout_graceful_shutdown=int(self._shutdown_timeout) or None,
        ))
        thread = threading.Thread(
            target=self._serve,
            args=(server, sock),
            daemon=True,
            name="GhostSayServerThread",
        )
        thread.start()

        if not self._wait_for_startup(server, thread):
            server.should_exit = True
            thread.join(timeout=self._shutdown_timeout)
            sock.close()
            error = BindError(host, port, "server did not finish starting up")
            logging.error(error.user_message)
            self._state.transition_to(ServerState.FAILED, error)
            return False

        self._server, self._thread, self._socket = server, thread, sock
        self._state.transition_to(ServerState.RUNNING)
        logging.info(f"GhostSay server listening on {self._config.url}")
        return True

    def _stop_locked(self) -> None:
        if self._server is None:
            return

        server, thread, sock = self._server, self._thread, self._socket
        server.should_exit = True
        thread.join(timeout=self._shutdown_timeout)
        if thread.is_alive():
            # In-flight speech processes are left to finish on their own.
            logging.warning("Server did not drain in time; forcing exit")
            server.force_exit = True
            thread.join(timeout=self._shutdown_timeout)
        sock.close()

        self._server = self._thread = self._socket = None
        self._state.transition_to(ServerState.STOPPED)
        logging.info("GhostSay server stopped")

    def _bind(self, host: str, port: int) -> socket.socket:
        family = socket.AF_INET6 if ipaddress.ip_address(host).version == 6 else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            if sys.platform != "win32":
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(128)
        except OSError as e:
            sock.close()
            if _is_address_in_use(e):
                raise PortInUseError(host, port, e.strerror or str(e), e) from e
            raise BindError(host, port, e.strerror or str(e), e) from e
        return sock

    def _wait_for_startup(self, server: uvicorn.Server, thread: threading.Thread) -> bool:
        deadline = time.monotonic() + self._startup_timeout
        while time.monotonic() < deadline:
            if server.started:
                return True
            if not thread.is_alive():
                return False
            time.sleep(0.01)
        return server.started

    @staticmethod
    def _serve(server: uvicorn.Server, sock: socket.socket) -> None:
        try:
            asyncio.run(server.serve(sockets=[sock]))
        except Exception as e:
            logging.error(f"Server thread crashed: {e}", exc_info=True)
