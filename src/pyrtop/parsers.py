"""
Parsers for the text output of the remote diagnostic commands.

Each parser consumes the output of exactly one command. Parsers raise
ParseError when the output as a whole is unusable; a malformed line inside
multi-line output is skipped instead. Field extraction is positional on
purpose: the column layouts of /proc files and ``df``/``ip`` are fixed.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from pyrtop.errors import ParseError
from pyrtop.models import FilesystemEntry, NetworkInterface, RawCPUSample

_NS_PER_SECOND = Decimal(1_000_000_000)
# Longest uptime a timedelta can hold, in whole seconds.
_MAX_UPTIME_SECONDS = Decimal(timedelta.max.days * 86_400 + timedelta.max.seconds)

_MEMINFO_FIELDS = {
    "MemTotal:": "total",
    "MemFree:": "free",
    "Buffers:": "buffers",
    "Cached:": "cached",
    "SwapTotal:": "swap_total",
    "SwapFree:": "swap_free",
}

_CPU_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq", "steal", "guest")


@dataclass(slots=True, frozen=True)
class LoadInfo:
    """Contents of /proc/loadavg, kept as the kernel printed them."""

    load1: str = ""
    load5: str = ""
    load10: str = ""
    running_procs: str = ""
    total_procs: str = ""


@dataclass(slots=True, frozen=True)
class MemInfo:
    """Memory totals from /proc/meminfo, in bytes."""

    total: int = 0
    free: int = 0
    buffers: int = 0
    cached: int = 0
    swap_total: int = 0
    swap_free: int = 0


def _uint(token: str) -> int:
    """Parse an unsigned decimal integer, rejecting signs."""
    if not token.isdigit():
        raise ValueError(f"not an unsigned integer: {token!r}")
    return int(token)


def parse_uptime(text: str) -> int:
    """
    Parse /proc/uptime into nanoseconds since boot.

    The first token is seconds since boot, possibly fractional. Decimal
    arithmetic keeps the conversion exact to the nanosecond.
    """
    parts = text.split()
    if len(parts) < 2:
        raise ParseError(f"uptime: expected at least 2 fields, got {len(parts)}")
    try:
        seconds = Decimal(parts[0])
    except InvalidOperation as exc:
        raise ParseError(f"uptime: not a number: {parts[0]!r}") from exc
    if not seconds.is_finite() or seconds < 0 or seconds > _MAX_UPTIME_SECONDS:
        raise ParseError(f"uptime: not a valid duration: {parts[0]!r}")
    try:
        return int(seconds * _NS_PER_SECOND)
    except ArithmeticError as exc:
        raise ParseError(f"uptime: not a valid duration: {parts[0]!r}") from exc


def parse_hostname(text: str) -> str:
    return text.strip()


def parse_load(text: str) -> LoadInfo:
    """Parse /proc/loadavg, e.g. ``0.12 0.08 0.05 1/234 5678``."""
    parts = text.split()
    if len(parts) != 5:
        raise ParseError(f"loadavg: expected 5 fields, got {len(parts)}")

    running = total = ""
    procs = parts[3]
    slash = procs.find("/")
    if slash != -1:
        running = procs[:slash]
        total = procs[slash + 1:]

    return LoadInfo(
        load1=parts[0],
        load5=parts[1],
        load10=parts[2],
        running_procs=running,
        total_procs=total,
    )


def parse_meminfo(text: str) -> MemInfo:
    """Parse /proc/meminfo. Values are in KiB and are returned in bytes."""
    values: dict[str, int] = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) != 3:
            continue
        key = _MEMINFO_FIELDS.get(parts[0])
        if key is None:
            continue
        try:
            values[key] = _uint(parts[1]) * 1024
        except ValueError:
            continue
    return MemInfo(**values)


def parse_df(text: str) -> list[FilesystemEntry]:
    """
    Parse ``df -B1`` output into filesystem entries, in output order.

    A device name too long for its column makes df print it alone and
    wrap the other five fields onto the next line. ``offset`` is 1 while
    such a continuation line is expected and shifts the column indexes.
    """
    entries: list[FilesystemEntry] = []
    offset = 0
    for line in text.splitlines():
        parts = line.split()
        n = len(parts)
        is_device = n > 0 and parts[0].startswith("/dev/")
        if n == 1 and is_device:
            offset = 1
        elif (n == 5 and offset == 1) or (n == 6 and is_device):
            i = offset
            offset = 0
            try:
                used = _uint(parts[2 - i])
                free = _uint(parts[3 - i])
            except ValueError:
                continue
            entries.append(FilesystemEntry(mount_point=parts[5 - i], used=used, free=free))
    return entries


def parse_ip_addr(
    text: str,
    interfaces: Mapping[str, NetworkInterface] | None = None,
) -> dict[str, NetworkInterface]:
    """
    Merge ``ip -o addr`` output into an interface map.

    Returns a new dict; entries are created on first sight and only the
    address slot matching the family marker is overwritten.
    """
    merged = dict(interfaces or {})
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 4 or parts[2] not in ("inet", "inet6"):
            continue
        name = parts[1]
        current = merged.get(name) or NetworkInterface(name=name)
        if parts[2] == "inet":
            merged[name] = replace(current, ipv4=parts[3])
        else:
            merged[name] = replace(current, ipv6=parts[3])
    return merged


def parse_net_dev(
    text: str,
    interfaces: Mapping[str, NetworkInterface],
) -> dict[str, NetworkInterface]:
    """
    Fill in rx/tx byte counters from /proc/net/dev.

    Only interfaces already present in ``interfaces`` are updated; the
    header lines and unknown interfaces are ignored.
    """
    merged = dict(interfaces)
    for line in text.splitlines():
        parts = line.split()
        if len(parts) != 17:
            continue
        name = parts[0].strip().removesuffix(":")
        current = merged.get(name)
        if current is None:
            continue
        try:
            rx = _uint(parts[1])
            tx = _uint(parts[9])
        except ValueError:
            continue
        merged[name] = replace(current, rx_bytes=rx, tx_bytes=tx)
    return merged


def parse_proc_stat(text: str) -> RawCPUSample:
    """
    Read the aggregate ``cpu`` line of /proc/stat.

    Only the first nine counters are read (guest_nice and anything after
    it are ignored). The total is the sum of the counters that parsed.
    """
    for line in text.splitlines():
        fields = line.split()
        if not fields or fields[0] != "cpu":
            continue
        values: dict[str, int] = {}
        for name, token in zip(_CPU_FIELDS, fields[1:]):
            try:
                values[name] = _uint(token)
            except ValueError:
                continue
        return RawCPUSample(total=sum(values.values()), **values)
    raise ParseError("stat: no aggregate cpu line")
