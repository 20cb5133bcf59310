"""Data models for pyrtop."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType


@dataclass(slots=True, frozen=True)
class FilesystemEntry:
    """One mounted filesystem as reported by ``df -B1``."""

    mount_point: str
    used: int  # Bytes
    free: int  # Bytes


@dataclass(slots=True, frozen=True)
class NetworkInterface:
    """Addresses and byte counters of one network interface."""

    name: str
    ipv4: str = ""  # Mask suffix kept, e.g. "10.0.0.1/24"
    ipv6: str = ""
    rx_bytes: int = 0
    tx_bytes: int = 0


@dataclass(slots=True, frozen=True)
class RawCPUSample:
    """
    Cumulative CPU time counters from the ``cpu`` line of /proc/stat.

    All values are clock ticks since boot. A sample with ``total == 0``
    means "no sample taken yet".
    """

    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0
    steal: int = 0
    guest: int = 0
    total: int = 0


@dataclass(slots=True, frozen=True)
class CPUPercentages:
    """CPU time breakdown over one refresh interval, in percent."""

    user: float = 0.0
    nice: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    guest: float = 0.0

    @property
    def available(self) -> bool:
        """False when no breakdown could be computed this round."""
        return any(
            (self.user, self.nice, self.system, self.idle,
             self.iowait, self.irq, self.softirq, self.guest)
        )


@dataclass(slots=True, frozen=True)
class CPUState:
    """The previous raw CPU sample, carried from one round to the next."""

    previous: RawCPUSample = field(default_factory=RawCPUSample)

    @property
    def warm(self) -> bool:
        return self.previous.total != 0


@dataclass(slots=True, frozen=True)
class ProbeResult:
    """Outcome of one probe: either it produced data or it was unavailable."""

    name: str
    ok: bool
    error: str = ""

    @classmethod
    def success(cls, name: str) -> "ProbeResult":
        return cls(name=name, ok=True)

    @classmethod
    def unavailable(cls, name: str, reason: str) -> "ProbeResult":
        return cls(name=name, ok=False, error=reason)


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Immutable result of one collection round against the remote host."""

    uptime_ns: int = 0
    hostname: str = ""
    load1: str = ""
    load5: str = ""
    load10: str = ""
    running_procs: str = ""
    total_procs: str = ""
    mem_total: int = 0  # Bytes
    mem_free: int = 0
    mem_buffers: int = 0
    mem_cached: int = 0
    swap_total: int = 0
    swap_free: int = 0
    filesystems: tuple[FilesystemEntry, ...] = ()
    interfaces: Mapping[str, NetworkInterface] = field(default_factory=lambda: MappingProxyType({}))
    cpu: CPUPercentages = field(default_factory=CPUPercentages)
    probes: Mapping[str, ProbeResult] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def uptime(self) -> timedelta:
        """Uptime as a timedelta (microsecond resolution)."""
        return timedelta(microseconds=self.uptime_ns // 1000)

    @property
    def mem_used(self) -> int:
        """Memory not free, not buffers and not page cache."""
        used = self.mem_total - self.mem_free - self.mem_buffers - self.mem_cached
        return max(used, 0)

    def probe_ok(self, name: str) -> bool:
        """Whether the named probe produced data this round."""
        result = self.probes.get(name)
        return result is not None and result.ok
