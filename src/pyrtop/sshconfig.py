"""Host alias resolution from the user's OpenSSH client configuration."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import paramiko

logger = logging.getLogger(__name__)

DEFAULT_SSH_CONFIG = Path("~/.ssh/config")


@dataclass(slots=True, frozen=True)
class HostEntry:
    """Connection settings found for one host alias. None means "not set"."""

    hostname: str
    port: int | None = None
    user: str | None = None
    identity_file: str | None = None


def lookup_host(alias: str, path: Path | str = DEFAULT_SSH_CONFIG) -> HostEntry:
    """
    Resolve ``alias`` against an ssh_config file.

    Matching follows ssh_config rules (exact names, glob patterns and
    ``Host *`` defaults). A missing or unreadable file resolves the alias
    to itself.
    """
    config_path = Path(path).expanduser()
    if not config_path.is_file():
        return HostEntry(hostname=alias)

    try:
        config = paramiko.SSHConfig.from_path(str(config_path))
        entry = config.lookup(alias)
    except (OSError, paramiko.SSHException) as exc:
        logger.warning("ignoring %s: %s", config_path, exc)
        return HostEntry(hostname=alias)

    port = None
    if "port" in entry:
        try:
            port = int(entry["port"])
        except ValueError:
            logger.warning("ignoring bad port %r for %s in %s", entry["port"], alias, config_path)

    identity_file = None
    if entry.get("identityfile"):
        identity_file = os.path.expanduser(entry["identityfile"][0])

    return HostEntry(
        hostname=entry.get("hostname") or alias,
        port=port,
        user=entry.get("user"),
        identity_file=identity_file,
    )
