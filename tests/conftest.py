"""Shared fixtures: canned command output and fake command runners."""

import pytest

from pyrtop.errors import CommandError

UPTIME = "12345.67 8901.23\n"
HOSTNAME = "web01.example.com\n"
LOADAVG = "0.52 0.41 0.30 2/345 6789\n"
MEMINFO = """\
MemTotal:        8048576 kB
MemFree:         1024000 kB
MemAvailable:    4096000 kB
Buffers:          204800 kB
Cached:          2048000 kB
SwapCached:            0 kB
SwapTotal:       2097148 kB
SwapFree:        2097148 kB
HugePages_Total:       0
"""
DF = """\
Filesystem                                         1B-blocks        Used   Available Use% Mounted on
udev                                              4096000000           0  4096000000   0% /dev
/dev/sda1                                        100000000000 40000000000 60000000000  40% /
/dev/mapper/vg0-a-very-long-logical-volume-name
                                                  50000000000 10000000000 40000000000  20% /home
tmpfs                                              819200000     1000000   818200000   1% /run
"""
IP_ADDR = """\
1: lo    inet 127.0.0.1/8 scope host lo\\       valid_lft forever preferred_lft forever
1: lo    inet6 ::1/128 scope host \\       valid_lft forever preferred_lft forever
2: eth0    inet 10.0.0.5/24 brd 10.0.0.255 scope global eth0\\       valid_lft forever preferred_lft forever
2: eth0    inet6 fe80::1/64 scope link \\       valid_lft forever preferred_lft forever
"""
NET_DEV = """\
Inter-|   Receive                                                |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed
    lo:    5000      50    0    0    0     0          0         0     5000      50    0    0    0     0       0          0
  eth0: 1234567    1000    0    0    0     0          0         0   765432     900    0    0    0     0       0          0
 wlan0:    9999      10    0    0    0     0          0         0     8888      10    0    0    0     0       0          0
"""
STAT_1 = """\
cpu  1000 100 500 8000 200 0 100 50 0 0
cpu0 500 50 250 4000 100 0 50 25 0 0
intr 12345
"""
STAT_2 = """\
cpu  1050 100 500 8050 200 0 100 50 0 0
cpu0 525 50 250 4025 100 0 50 25 0 0
intr 12400
"""


def healthy_outputs() -> dict[str, str]:
    return {
        "/bin/cat /proc/uptime": UPTIME,
        "/bin/hostname -f": HOSTNAME,
        "/bin/cat /proc/loadavg": LOADAVG,
        "/bin/cat /proc/meminfo": MEMINFO,
        "/bin/df -B1": DF,
        "/bin/ip -o addr": IP_ADDR,
        "/bin/cat /proc/net/dev": NET_DEV,
        "/bin/cat /proc/stat": STAT_1,
    }


class FakeRunner:
    """CommandRunner returning canned output; unknown commands fail."""

    def __init__(self, outputs: dict[str, str] | None = None) -> None:
        self.outputs = healthy_outputs() if outputs is None else outputs
        self.calls: list[str] = []

    def run(self, command: str) -> str:
        self.calls.append(command)
        if command not in self.outputs:
            raise CommandError(command, exit_status=127, stderr="command not found")
        return self.outputs[command]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()
