"""Assembling one Snapshot from the remote diagnostic commands."""

import logging
from collections.abc import Callable
from types import MappingProxyType
from typing import TypeVar

from pyrtop import parsers
from pyrtop.cpu import CPUTracker
from pyrtop.errors import CommandError, ParseError
from pyrtop.models import CPUState, ProbeResult, Snapshot
from pyrtop.runner import CommandRunner

logger = logging.getLogger(__name__)

T = TypeVar("T")

CMD_UPTIME = "/bin/cat /proc/uptime"
CMD_HOSTNAME = "/bin/hostname -f"
CMD_LOADAVG = "/bin/cat /proc/loadavg"
CMD_MEMINFO = "/bin/cat /proc/meminfo"
CMD_DF = "/bin/df -B1"
CMD_IP_ADDR = ("/bin/ip -o addr", "/sbin/ip -o addr")
CMD_NET_DEV = "/bin/cat /proc/net/dev"
CMD_STAT = "/bin/cat /proc/stat"

PROBES = (
    "uptime",
    "hostname",
    "load",
    "memory",
    "filesystems",
    "interfaces",
    "counters",
    "cpu",
)


class SnapshotCollector:
    """
    Runs every probe against a CommandRunner and assembles a Snapshot.

    A probe whose command fails or whose output cannot be parsed is
    recorded as unavailable and its fields keep their defaults; the
    remaining probes still run. The collector owns the CPU state, so
    one collector should be used for all rounds against a host.
    """

    def __init__(self, runner: CommandRunner, cpu_state: CPUState | None = None) -> None:
        self._runner = runner
        self._cpu = CPUTracker(cpu_state)

    @property
    def cpu_state(self) -> CPUState:
        return self._cpu.state

    def collect(self) -> Snapshot:
        """Run one round of probes. Never raises for probe failures."""
        fields: dict = {}
        probes: dict[str, ProbeResult] = {}

        uptime = self._probe("uptime", probes, lambda: parsers.parse_uptime(self._run(CMD_UPTIME)))
        if uptime is not None:
            fields["uptime_ns"] = uptime

        hostname = self._probe(
            "hostname", probes, lambda: parsers.parse_hostname(self._run(CMD_HOSTNAME))
        )
        if hostname is not None:
            fields["hostname"] = hostname

        load = self._probe("load", probes, lambda: parsers.parse_load(self._run(CMD_LOADAVG)))
        if load is not None:
            fields.update(
                load1=load.load1,
                load5=load.load5,
                load10=load.load10,
                running_procs=load.running_procs,
                total_procs=load.total_procs,
            )

        mem = self._probe("memory", probes, lambda: parsers.parse_meminfo(self._run(CMD_MEMINFO)))
        if mem is not None:
            fields.update(
                mem_total=mem.total,
                mem_free=mem.free,
                mem_buffers=mem.buffers,
                mem_cached=mem.cached,
                swap_total=mem.swap_total,
                swap_free=mem.swap_free,
            )

        filesystems = self._probe("filesystems", probes, lambda: parsers.parse_df(self._run(CMD_DF)))
        if filesystems is not None:
            fields["filesystems"] = tuple(filesystems)

        interfaces = self._probe(
            "interfaces", probes, lambda: parsers.parse_ip_addr(self._run_ip_addr())
        )
        if interfaces is not None:
            counted = self._probe(
                "counters", probes, lambda: parsers.parse_net_dev(self._run(CMD_NET_DEV), interfaces)
            )
            if counted is not None:
                interfaces = counted
            fields["interfaces"] = MappingProxyType(interfaces)
        else:
            probes["counters"] = ProbeResult.unavailable("counters", "no interfaces to update")

        cpu = self._probe(
            "cpu", probes, lambda: self._cpu.update(parsers.parse_proc_stat(self._run(CMD_STAT)))
        )
        if cpu is not None:
            fields["cpu"] = cpu

        return Snapshot(probes=MappingProxyType(probes), **fields)

    def _run(self, command: str) -> str:
        return self._runner.run(command)

    def _run_ip_addr(self) -> str:
        """Run ``ip -o addr``, falling back to the alternate path."""
        primary, fallback = CMD_IP_ADDR
        try:
            return self._runner.run(primary)
        except CommandError as exc:
            logger.debug("%s failed (%s), trying %s", primary, exc, fallback)
        return self._runner.run(fallback)

    def _probe(self, name: str, probes: dict[str, ProbeResult], func: Callable[[], T]) -> T | None:
        try:
            value = func()
        except (CommandError, ParseError) as exc:
            logger.debug("probe %s unavailable: %s", name, exc)
            probes[name] = ProbeResult.unavailable(name, str(exc))
            return None
        probes[name] = ProbeResult.success(name)
        return value


def collect_snapshot(runner: CommandRunner, cpu_state: CPUState | None = None) -> tuple[Snapshot, CPUState]:
    """
    Collect one snapshot with an explicit CPU state.

    Returns the snapshot and the CPU state to pass to the next call.
    """
    collector = SnapshotCollector(runner, cpu_state)
    snapshot = collector.collect()
    return snapshot, collector.cpu_state

