import ipaddress

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ghostsay.core.errors import InvalidConfigError

MIN_PORT = 1024
MAX_PORT = 65535
DEFAULT_PORT = 57630
DEFAULT_HOST = "127.0.0.1"


def validate_port(port) -> int:
    """Returns port as an int, or raises InvalidConfigError outside 1024-65535."""
    try:
        value = int(port)
    except (TypeError, ValueError):
        raise InvalidConfigError(f"Invalid port number: {port!r}")
    if isinstance(port, bool) or str(value) != str(port).strip():
        raise InvalidConfigError(f"Invalid port number: {port!r}")
    if not MIN_PORT <= value <= MAX_PORT:
        raise InvalidConfigError(f"Port must be between {MIN_PORT}-{MAX_PORT}")
    return value


def validate_host(host) -> str:
    """Returns host unchanged if it is an IPv4/IPv6 literal."""
    if not isinstance(host, str):
        raise InvalidConfigError(f"Invalid IP address: {host!r}")
    try:
        ipaddress.ip_address(host)
    except ValueError:
        raise InvalidConfigError(f"Invalid IP address: {host!r}")
    return host


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=MIN_PORT, le=MAX_PORT)

    @field_validator("host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        try:
            ipaddress.ip_address(value)
        except ValueError:
            raise ValueError(f"Invalid IP address: {value!r}")
        return value

    @classmethod
    def create(cls, host=DEFAULT_HOST, port=DEFAULT_PORT) -> "ServerConfig":
        """Builds a config, turning pydantic's errors into InvalidConfigError."""
        try:
            return cls(host=validate_host(host), port=validate_port(port))
        except ValidationError as e:
            raise InvalidConfigError(str(e)) from e

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}"
