"""Exceptions raised by pyrtop."""


class PyrtopError(Exception):
    """Base class for all pyrtop errors."""


class CommandError(PyrtopError):
    """A remote command could not be run or exited with a non-zero status."""

    def __init__(self, command: str, exit_status: int | None = None, stderr: str = "") -> None:
        self.command = command
        self.exit_status = exit_status
        self.stderr = stderr
        detail = f"exit status {exit_status}" if exit_status is not None else "could not run"
        if stderr:
            detail = f"{detail}: {stderr.strip()}"
        super().__init__(f"{command!r}: {detail}")


class ParseError(PyrtopError, ValueError):
    """Command output did not have the expected shape."""


class ConnectionFailed(PyrtopError):
    """The SSH connection to the remote host could not be established."""


class UsageError(PyrtopError):
    """Invalid command-line input."""
