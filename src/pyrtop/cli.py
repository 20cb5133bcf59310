"""Command-line entry point for pyrtop."""

import argparse
import logging
import sys
from importlib import metadata
from pathlib import Path

from pyrtop.app import RtopApp
from pyrtop.collector import SnapshotCollector
from pyrtop.config import DEFAULT_INTERVAL, MonitorConfig
from pyrtop.errors import ConnectionFailed, UsageError
from pyrtop.logging_setup import configure_logging
from pyrtop.runner import SSHCommandRunner
from pyrtop.sshconfig import DEFAULT_SSH_CONFIG

logger = logging.getLogger(__name__)


def _installed_version() -> str:
    try:
        return metadata.version("pyrtop")
    except metadata.PackageNotFoundError:
        return "0.1.0"


def parse_target(target: str) -> tuple[str | None, str, int | None]:
    """Split ``[user@]host[:port]`` into (user, host, port)."""
    user = None
    addr = target
    if "@" in target:
        user, _, addr = target.partition("@")
        if not user or not addr:
            raise UsageError(f"bad target: {target!r}")

    port = None
    parts = addr.split(":")
    if len(parts) == 2:
        addr = parts[0]
        try:
            port = int(parts[1])
        except ValueError:
            raise UsageError(f"bad port: {parts[1]!r}") from None
        if not 0 < port < 65536:
            raise UsageError(f"bad port: {port}")

    if not addr or addr.startswith("-"):
        raise UsageError(f"bad host: {addr!r}")
    return user, addr, port


def parse_interval(value: str) -> float:
    """argparse type for the refresh interval, in whole seconds."""
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"bad interval: {value!r}") from None
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"bad interval: {seconds}")
    return float(seconds)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyrtop",
        description="pyrtop monitors server statistics over an ssh connection",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_installed_version()}")
    parser.add_argument(
        "-i",
        dest="key_file",
        metavar="private-key-file",
        help="private key file to use (default: ~/.ssh/id_rsa if present)",
    )
    parser.add_argument(
        "target",
        metavar="[user@]host[:port]",
        help="the SSH server to connect to, with optional username and port",
    )
    parser.add_argument(
        "interval",
        nargs="?",
        type=parse_interval,
        default=None,
        help=f"refresh interval in seconds (default: {int(DEFAULT_INTERVAL)})",
    )
    parser.add_argument("--ssh-config", default=str(DEFAULT_SSH_CONFIG), help=argparse.SUPPRESS)
    parser.add_argument("--debug", action="store_true", help="log at debug level")
    parser.add_argument("--log-file", type=Path, default=None, help="write logs to this file")
    return parser


def resolve_config(args: argparse.Namespace) -> MonitorConfig:
    user, host, port = parse_target(args.target)
    return MonitorConfig.resolve(
        host,
        port=port,
        username=user,
        key_file=args.key_file,
        interval=args.interval,
        ssh_config_path=args.ssh_config,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.debug else logging.INFO, args.log_file)

    try:
        config = resolve_config(args)
    except UsageError as exc:
        parser.print_usage(sys.stderr)
        print(f"pyrtop: {exc}", file=sys.stderr)
        return 1

    runner = SSHCommandRunner(config)
    try:
        runner.connect()
    except ConnectionFailed as exc:
        logger.error("connection failed: %s", exc)
        print(f"pyrtop: {exc}", file=sys.stderr)
        return 1

    try:
        app = RtopApp(SnapshotCollector(runner), interval=config.interval, host=config.host)
        app.run()
    finally:
        runner.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
