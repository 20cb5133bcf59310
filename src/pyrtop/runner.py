"""Running diagnostic commands on the remote host over SSH."""

import getpass
import logging
import socket
import sys
from typing import Protocol

import paramiko

from pyrtop.config import MonitorConfig
from pyrtop.errors import CommandError, ConnectionFailed

logger = logging.getLogger(__name__)


class CommandRunner(Protocol):
    """Runs one shell command line and returns its standard output."""

    def run(self, command: str) -> str:
        """Return the command's stdout, or raise CommandError."""
        ...


class SSHCommandRunner:
    """
    CommandRunner backed by a paramiko SSH connection.

    Authentication tries the SSH agent and the configured identity file
    first. If the key is encrypted, or the server rejects key auth, the
    user is prompted for a passphrase or password when stdin is a TTY.
    """

    def __init__(self, config: MonitorConfig, client: paramiko.SSHClient | None = None) -> None:
        self._config = config
        self._client = client if client is not None else paramiko.SSHClient()
        self._connected = False

    def connect(self) -> None:
        """Open the connection, raising ConnectionFailed on any failure."""
        cfg = self._config
        self._client.load_system_host_keys()
        # Unknown host keys are accepted, there is no interactive confirmation.
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        kwargs = {
            "hostname": cfg.host,
            "port": cfg.port,
            "username": cfg.username,
            "key_filename": cfg.key_file,
            "allow_agent": True,
            "look_for_keys": cfg.key_file is None,
            "timeout": cfg.connect_timeout,
        }
        logger.info("connecting to %s@%s:%d", cfg.username, cfg.host, cfg.port)
        try:
            try:
                self._client.connect(**kwargs)
            except paramiko.PasswordRequiredException:
                if not sys.stdin.isatty():
                    raise
                kwargs["passphrase"] = self._prompt(f"Enter passphrase for key '{cfg.key_file}': ")
                self._client.connect(**kwargs)
            except paramiko.AuthenticationException:
                if not sys.stdin.isatty():
                    raise
                kwargs["password"] = self._prompt(f"{cfg.username}@{cfg.host}'s password: ")
                kwargs["allow_agent"] = False
                kwargs["look_for_keys"] = False
                kwargs["key_filename"] = None
                self._client.connect(**kwargs)
        except (paramiko.SSHException, OSError) as exc:
            raise ConnectionFailed(f"{cfg.host}:{cfg.port}: {exc}") from exc
        self._connected = True
        logger.info("connected to %s", cfg.host)

    def _prompt(self, prompt: str) -> str:
        try:
            return getpass.getpass(prompt)
        except (EOFError, KeyboardInterrupt) as exc:
            raise ConnectionFailed("authentication cancelled") from exc

    def run(self, command: str) -> str:
        """Run ``command`` in a fresh session channel and return its stdout."""
        if not self._connected:
            raise CommandError(command)
        try:
            _, stdout, stderr = self._client.exec_command(
                command, timeout=self._config.command_timeout
            )
            output = stdout.read().decode("utf-8", errors="replace")
            status = stdout.channel.recv_exit_status()
            if status != 0:
                error = stderr.read().decode("utf-8", errors="replace")
                raise CommandError(command, exit_status=status, stderr=error)
        except (paramiko.SSHException, socket.timeout, OSError) as exc:
            raise CommandError(command, stderr=str(exc)) from exc
        return output

    def close(self) -> None:
        self._client.close()
        self._connected = False

    def __enter__(self) -> "SSHCommandRunner":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
