from typing import Optional


class InvalidConfigError(ValueError):
    """Raised when a port or bind address fails validation."""


class ServerRunningError(RuntimeError):
    """Raised when the server config is changed while the listener is up."""


class BindError(Exception):
    """The listener could not be bound. Carries the message shown to the operator."""
    def __init__(self, host: str, port: int, reason: str, cause: Optional[OSError] = None):
        self.host = host
        self.port = port
        self.reason = reason
        self.cause = cause
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        return f"Failed to start server: {self.reason}"


class PortInUseError(BindError):
    """The requested port is already taken by another listener."""

    @property
    def user_message(self) -> str:
        return f"Port {self.port} is already in use. Try a different port in Settings."
