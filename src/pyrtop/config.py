"""Connection and refresh settings for one pyrtop session."""

import getpass
from dataclasses import dataclass
from pathlib import Path

from pyrtop.errors import UsageError
from pyrtop.sshconfig import DEFAULT_SSH_CONFIG, lookup_host

DEFAULT_PORT = 22
DEFAULT_INTERVAL = 5.0  # Seconds
DEFAULT_KEY = Path("~/.ssh/id_rsa")


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Everything needed to connect to one host and poll it."""

    host: str
    port: int = DEFAULT_PORT
    username: str = ""
    key_file: str | None = None
    interval: float = DEFAULT_INTERVAL
    connect_timeout: float = 10.0
    command_timeout: float = 10.0

    def __post_init__(self) -> None:
        if not self.host:
            raise UsageError("no host given")
        if not 0 < self.port < 65536:
            raise UsageError(f"bad port: {self.port}")
        if self.interval <= 0:
            raise UsageError(f"bad interval: {self.interval}")

    @classmethod
    def resolve(
        cls,
        host: str,
        port: int | None = None,
        username: str | None = None,
        key_file: str | None = None,
        interval: float | None = None,
        ssh_config_path: Path | str = DEFAULT_SSH_CONFIG,
    ) -> "MonitorConfig":
        """
        Build a config from command-line values.

        Values given on the command line win over the ssh_config entry for
        ``host``, which wins over the built-in defaults. The ssh_config
        HostName always replaces the alias.
        """
        entry = lookup_host(host, ssh_config_path)

        if port is None:
            port = entry.port or DEFAULT_PORT
        if not username:
            username = entry.user or getpass.getuser()
        if not key_file:
            key_file = entry.identity_file
        if not key_file:
            default_key = DEFAULT_KEY.expanduser()
            if default_key.is_file():
                key_file = str(default_key)
        else:
            key_file = str(Path(key_file).expanduser())

        return cls(
            host=entry.hostname,
            port=port,
            username=username,
            key_file=key_file,
            interval=DEFAULT_INTERVAL if interval is None else interval,
        )
