"""Tests for the SnapshotCollector."""

from datetime import timedelta

import pytest

from conftest import STAT_2, FakeRunner, healthy_outputs
from pyrtop.collector import PROBES, SnapshotCollector, collect_snapshot
from pyrtop.errors import CommandError, ParseError
from pyrtop.models import CPUPercentages, CPUState, FilesystemEntry, NetworkInterface, Snapshot


class TestCollect:
    """Tests for a single collection round."""

    def test_full_round(self, runner):
        """Test every field is populated from healthy output."""
        snapshot = SnapshotCollector(runner).collect()

        assert snapshot.uptime_ns == 12_345_670_000_000
        assert snapshot.uptime == timedelta(seconds=12345, microseconds=670000)
        assert snapshot.hostname == "web01.example.com"
        assert (snapshot.load1, snapshot.load5, snapshot.load10) == ("0.52", "0.41", "0.30")
        assert (snapshot.running_procs, snapshot.total_procs) == ("2", "345")
        assert snapshot.mem_total == 8048576 * 1024
        assert snapshot.swap_free == 2097148 * 1024
        assert snapshot.filesystems[0] == FilesystemEntry("/", 40_000_000_000, 60_000_000_000)
        assert snapshot.interfaces["eth0"] == NetworkInterface(
            name="eth0",
            ipv4="10.0.0.5/24",
            ipv6="fe80::1/64",
            rx_bytes=1234567,
            tx_bytes=765432,
        )
        assert all(snapshot.probe_ok(name) for name in PROBES)

    def test_probe_order(self, runner):
        """Test commands run in the documented order."""
        SnapshotCollector(runner).collect()
        assert runner.calls == [
            "/bin/cat /proc/uptime",
            "/bin/hostname -f",
            "/bin/cat /proc/loadavg",
            "/bin/cat /proc/meminfo",
            "/bin/df -B1",
            "/bin/ip -o addr",
            "/bin/cat /proc/net/dev",
            "/bin/cat /proc/stat",
        ]

    def test_snapshot_is_immutable(self, runner):
        snapshot = SnapshotCollector(runner).collect()
        with pytest.raises(AttributeError):
            snapshot.hostname = "other"
        with pytest.raises(TypeError):
            snapshot.interfaces["new"] = NetworkInterface(name="new")

    def test_counters_only_for_known_interfaces(self, runner):
        """Test wlan0 from /proc/net/dev is not added to the map."""
        snapshot = SnapshotCollector(runner).collect()
        assert set(snapshot.interfaces) == {"lo", "eth0"}


class TestPartialFailure:
    """A failing probe must not affect the others."""

    def test_one_failing_command(self):
        """Test a failing df leaves only the filesystem list empty."""
        outputs = healthy_outputs()
        del outputs["/bin/df -B1"]

        failed = SnapshotCollector(FakeRunner(outputs)).collect()
        healthy = SnapshotCollector(FakeRunner()).collect()

        assert failed.filesystems == ()
        assert not failed.probe_ok("filesystems")
        assert "exit status 127" in failed.probes["filesystems"].error
        for name in PROBES:
            if name != "filesystems":
                assert failed.probe_ok(name)
        assert failed.hostname == healthy.hostname
        assert failed.mem_total == healthy.mem_total
        assert dict(failed.interfaces) == dict(healthy.interfaces)

    def test_unparseable_output(self):
        outputs = healthy_outputs()
        outputs["/bin/cat /proc/loadavg"] = "garbage\n"

        snapshot = SnapshotCollector(FakeRunner(outputs)).collect()

        assert snapshot.load1 == ""
        assert snapshot.running_procs == ""
        assert not snapshot.probe_ok("load")
        assert snapshot.hostname == "web01.example.com"

    @pytest.mark.parametrize("uptime", ["1e999999 0\n", "1e20 0\n"])
    def test_out_of_range_uptime(self, uptime):
        """Test an absurd uptime fails only its own probe."""
        outputs = healthy_outputs()
        outputs["/bin/cat /proc/uptime"] = uptime
        collector = SnapshotCollector(FakeRunner(outputs))

        collector.collect()
        snapshot = collector.collect()

        assert not snapshot.probe_ok("uptime")
        assert snapshot.uptime == timedelta(0)
        for name in PROBES:
            if name != "uptime":
                assert snapshot.probe_ok(name)
        assert snapshot.hostname == "web01.example.com"
        assert snapshot.filesystems
        assert collector.cpu_state.warm

    def test_every_command_failing(self):
        """Test a round always completes even with nothing available."""
        snapshot = SnapshotCollector(FakeRunner({})).collect()

        assert snapshot == Snapshot(probes=snapshot.probes)
        assert not any(snapshot.probe_ok(name) for name in PROBES)
        assert set(snapshot.probes) == set(PROBES)

    def test_counters_unavailable_without_addresses(self):
        outputs = healthy_outputs()
        del outputs["/bin/ip -o addr"]

        runner = FakeRunner(outputs)
        snapshot = SnapshotCollector(runner).collect()

        assert snapshot.interfaces == {}
        assert not snapshot.probe_ok("counters")
        assert "/bin/cat /proc/net/dev" not in runner.calls

    def test_counter_failure_keeps_addresses(self):
        outputs = healthy_outputs()
        del outputs["/bin/cat /proc/net/dev"]

        snapshot = SnapshotCollector(FakeRunner(outputs)).collect()

        assert snapshot.interfaces["eth0"].ipv4 == "10.0.0.5/24"
        assert snapshot.interfaces["eth0"].rx_bytes == 0
        assert not snapshot.probe_ok("counters")

    def test_unexpected_errors_propagate(self):
        class BrokenRunner:
            def run(self, command):
                raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            SnapshotCollector(BrokenRunner()).collect()


class TestIpFallback:
    """Tests for the ip command fallback path."""

    def test_fallback_path(self):
        """Test /sbin/ip is used when /bin/ip is unavailable."""
        outputs = healthy_outputs()
        outputs["/sbin/ip -o addr"] = outputs.pop("/bin/ip -o addr")
        runner = FakeRunner(outputs)

        snapshot = SnapshotCollector(runner).collect()

        assert snapshot.probe_ok("interfaces")
        assert snapshot.interfaces["lo"].ipv4 == "127.0.0.1/8"
        assert runner.calls.index("/bin/ip -o addr") < runner.calls.index("/sbin/ip -o addr")

    def test_fallback_not_used_when_primary_works(self, runner):
        SnapshotCollector(runner).collect()
        assert "/sbin/ip -o addr" not in runner.calls

    def test_both_paths_failing(self):
        outputs = healthy_outputs()
        del outputs["/bin/ip -o addr"]

        snapshot = SnapshotCollector(FakeRunner(outputs)).collect()

        assert not snapshot.probe_ok("interfaces")
        assert "/sbin/ip -o addr" in snapshot.probes["interfaces"].error


class TestCpuRounds:
    """CPU percentages across consecutive rounds."""

    def test_first_round_has_no_cpu(self, runner):
        snapshot = SnapshotCollector(runner).collect()
        assert snapshot.cpu == CPUPercentages()
        assert snapshot.probe_ok("cpu")

    def test_second_round_has_cpu(self, runner):
        collector = SnapshotCollector(runner)
        collector.collect()
        runner.outputs["/bin/cat /proc/stat"] = STAT_2

        snapshot = collector.collect()

        assert snapshot.cpu.user == pytest.approx(50.0)
        assert snapshot.cpu.idle == pytest.approx(50.0)

    def test_state_survives_failed_cpu_round(self, runner):
        collector = SnapshotCollector(runner)
        collector.collect()
        warm = collector.cpu_state

        del runner.outputs["/bin/cat /proc/stat"]
        snapshot = collector.collect()

        assert snapshot.cpu == CPUPercentages()
        assert collector.cpu_state == warm

    def test_explicit_state_threading(self, runner):
        """Test collect_snapshot passes the CPU state in and out."""
        _, state = collect_snapshot(runner)
        assert state.warm

        runner.outputs["/bin/cat /proc/stat"] = STAT_2
        snapshot, next_state = collect_snapshot(runner, state)

        assert snapshot.cpu.user == pytest.approx(50.0)
        assert next_state != state

    def test_new_collector_starts_cold(self, runner):
        SnapshotCollector(runner).collect()
        assert SnapshotCollector(runner).cpu_state == CPUState()


def test_error_types():
    """Test probe failures are the recoverable error types."""
    assert issubclass(ParseError, ValueError)
    err = CommandError("/bin/df -B1", exit_status=1, stderr="df: boom\n")
    assert err.exit_status == 1
    assert "df: boom" in str(err)
