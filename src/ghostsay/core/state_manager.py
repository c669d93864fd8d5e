from enum import Enum
from threading import Lock
from typing import Optional

from ghostsay.core.errors import BindError


class ServerState(Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    FAILED = "failed"


class StateManager:
    """
    Thread-safe holder of the server state.
    The ServerManager is the only writer; everything else reads.
    """
    def __init__(self):
        self._state = ServerState.STOPPED
        self._failure: Optional[BindError] = None
        self._lock = Lock()

    def get_state(self) -> ServerState:
        with self._lock:
            return self._state

    def get_failure(self) -> Optional[BindError]:
        """The error that put the server into FAILED, if any."""
        with self._lock:
            return self._failure

    def transition_to(self, new_state: ServerState, failure: Optional[BindError] = None) -> bool:
        """Move to new_state. A failure reason is only kept for FAILED."""
        with self._lock:
            if new_state == ServerState.FAILED and failure is None:
                return False
            self._state = new_state
            self._failure = failure if new_state == ServerState.FAILED else None
            return True

    def is_running(self) -> bool:
        with self._lock:
            return self._state == ServerState.RUNNING
