"""pyrtop - Main Textual application."""

from datetime import timedelta
from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Static

from pyrtop.collector import SnapshotCollector
from pyrtop.models import FilesystemEntry, NetworkInterface, Snapshot
from pyrtop.monitor import RemoteMonitor


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    if size < 1024:
        return f"{size} bytes"
    for unit in ["KiB", "MiB"]:
        size = size / 1024
        if size < 1024:
            return f"{size:6.2f} {unit}"
    return f"{size / 1024:6.2f} GiB"


def format_uptime(uptime: timedelta) -> str:
    """Format uptime as e.g. ``3d 4h 5m 6s``, dropping sub-second precision."""
    seconds = int(uptime.total_seconds())
    days = 0
    while seconds > 24 * 3600:
        days += 1
        seconds -= 24 * 3600
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        text = f"{hours}h {minutes}m {seconds}s"
    elif minutes:
        text = f"{minutes}m {seconds}s"
    else:
        text = f"{seconds}s"
    return f"{days}d {text}" if days else text


def _bar(percent: float, color: str, width: int = 20) -> str:
    filled = min(max(int(percent * width / 100), 0), width)
    return f"[{color}]█[/{color}]" * filled + "[dim]░[/dim]" * (width - filled)


def _value(text: str) -> str:
    return f"[b]{text}[/b]" if text else "[dim]-[/dim]"


class SummaryStats(Static):
    """Header widget showing host, load, CPU and memory statistics."""

    DEFAULT_CSS = """
    SummaryStats {
        height: auto;
        min-height: 9;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize SummaryStats."""
        super().__init__(*args, **kwargs)
        self._snapshot: Snapshot | None = None

    @property
    def snapshot(self) -> Snapshot | None:
        return self._snapshot

    def compose(self) -> ComposeResult:
        """Compose the summary layout."""
        yield Horizontal(
            Static(self._get_host_info(), id="host-info"),
            Static(self._get_cpu_info(), id="cpu-info"),
            Static(self._get_mem_info(), id="mem-info"),
        )

    def update_stats(self, snapshot: Snapshot) -> None:
        """Update the statistics from a snapshot."""
        self._snapshot = snapshot
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Refresh the display with current data."""
        try:
            self.query_one("#host-info", Static).update(self._get_host_info())
            self.query_one("#cpu-info", Static).update(self._get_cpu_info())
            self.query_one("#mem-info", Static).update(self._get_mem_info())
        except Exception:
            pass  # Widget not mounted yet

    def _get_host_info(self) -> str:
        """Get host, load and process count display."""
        snap = self._snapshot
        if snap is None:
            return "Connecting..."
        uptime = format_uptime(snap.uptime) if snap.probe_ok("uptime") else ""
        return (
            f"{_value(snap.hostname)} up {_value(uptime)}\n\n"
            f"Load:\n"
            f"    {_value(snap.load1)} {_value(snap.load5)} {_value(snap.load10)}\n\n"
            f"Processes:\n"
            f"    {_value(snap.running_procs)} running of {_value(snap.total_procs)} total"
        )

    def _get_cpu_info(self) -> str:
        """Get CPU breakdown display."""
        snap = self._snapshot
        if snap is None:
            return ""
        cpu = snap.cpu
        if not cpu.available:
            return "CPU:\n    [dim]waiting for a second sample...[/dim]"
        busy = 100.0 - cpu.idle
        return (
            f"CPU \\[{_bar(busy, 'green')}] {busy:5.1f}%\n"
            f"    {cpu.user:6.2f}% user     {cpu.system:6.2f}% sys\n"
            f"    {cpu.nice:6.2f}% nice     {cpu.idle:6.2f}% idle\n"
            f"    {cpu.iowait:6.2f}% iowait   {cpu.irq:6.2f}% hardirq\n"
            f"    {cpu.softirq:6.2f}% softirq  {cpu.guest:6.2f}% guest"
        )

    def _get_mem_info(self) -> str:
        """Get memory info display."""
        snap = self._snapshot
        if snap is None or snap.mem_total == 0:
            return ""
        mem_percent = 100.0 * snap.mem_used / snap.mem_total
        swap_used = max(snap.swap_total - snap.swap_free, 0)
        swap_percent = 100.0 * swap_used / snap.swap_total if snap.swap_total else 0.0
        # Use escaped brackets for the bar containers
        return (
            f"Mem\\[{_bar(mem_percent, 'cyan')}]\n"
            f"Swp\\[{_bar(swap_percent, 'yellow')}]\n"
            f"    free    = {_value(format_bytes(snap.mem_free))}\n"
            f"    used    = {_value(format_bytes(snap.mem_used))}\n"
            f"    buffers = {_value(format_bytes(snap.mem_buffers))}\n"
            f"    cached  = {_value(format_bytes(snap.mem_cached))}\n"
            f"    swap    = {_value(format_bytes(snap.swap_free))} free of "
            f"{_value(format_bytes(snap.swap_total))}"
        )


class FilesystemTable(Container):
    """Container for the filesystem table."""

    DEFAULT_CSS = """
    FilesystemTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize FilesystemTable."""
        super().__init__(*args, **kwargs)
        self._entries: tuple[FilesystemEntry, ...] = ()

    def compose(self) -> ComposeResult:
        """Compose the filesystem table."""
        yield DataTable(id="filesystem-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#filesystem-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Mount", key="mount", width=24)
        table.add_column("Free", key="free", width=12)
        table.add_column("Size", key="size", width=12)
        table.add_column("Used%", key="used", width=6)

    def update_filesystems(self, entries: tuple[FilesystemEntry, ...]) -> None:
        """
        Replace the rows with ``entries``.

        Rows are rebuilt every time: mount points can repeat and the df
        order has to be kept.
        """
        if entries == self._entries:
            return
        table = self.query_one("#filesystem-table", DataTable)
        table.clear()
        for entry in entries:
            size = entry.used + entry.free
            used = f"{100.0 * entry.used / size:5.1f}" if size else "-"
            table.add_row(
                entry.mount_point,
                format_bytes(entry.free),
                format_bytes(size),
                used,
            )
        self._entries = entries


class InterfaceTable(Container):
    """Container for the network interface table."""

    DEFAULT_CSS = """
    InterfaceTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize InterfaceTable."""
        super().__init__(*args, **kwargs)
        self._current_names: set[str] = set()

    def compose(self) -> ComposeResult:
        """Compose the interface table."""
        yield DataTable(id="interface-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#interface-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Interface", key="name", width=12)
        table.add_column("IPv4", key="ipv4", width=20)
        table.add_column("IPv6", key="ipv6", width=30)
        table.add_column("RX", key="rx", width=12)
        table.add_column("TX", key="tx", width=12)

    def update_interfaces(self, interfaces: dict[str, NetworkInterface]) -> None:
        """
        Update the interface table with new data, sorted by name.

        Uses update_cell for existing rows to avoid re-rendering the whole table.
        """
        table = self.query_one("#interface-table", DataTable)
        new_names = set(interfaces)

        for name in self._current_names - new_names:
            try:
                table.remove_row(name)
            except Exception:
                pass  # Row may not exist

        for name, intf in interfaces.items():
            cells = {
                "name": name,
                "ipv4": intf.ipv4,
                "ipv6": intf.ipv6,
                "rx": format_bytes(intf.rx_bytes),
                "tx": format_bytes(intf.tx_bytes),
            }
            if name in self._current_names:
                for column, value in cells.items():
                    table.update_cell(name, column, value)
            else:
                table.add_row(*cells.values(), key=name)

        self._current_names = new_names
        if new_names:
            table.sort("name")


class RtopApp(App):
    """Main pyrtop application."""

    TITLE = "pyrtop"
    SUB_TITLE = "Remote System Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #summary-stats {
        dock: top;
        height: auto;
        min-height: 9;
    }

    Horizontal {
        height: auto;
    }

    #host-info {
        width: 1fr;
    }

    #cpu-info {
        width: 1fr;
        padding-left: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
    ]

    def __init__(self, collector: SnapshotCollector, interval: float = 5.0, host: str = "") -> None:
        """Initialize the RtopApp."""
        super().__init__()
        self._update_queue: Queue[Snapshot] = Queue()
        self._monitor = RemoteMonitor(collector, self._update_queue, interval=interval)
        if host:
            self.sub_title = host

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield SummaryStats(id="summary-stats")
        yield FilesystemTable()
        yield InterfaceTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the remote monitor when the app is mounted."""
        self._monitor.start()
        # Set up a timer to poll the queue for updates
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Check the queue for snapshots and refresh the UI."""
        # Drain the queue to get the most recent snapshot
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self._update_ui(snapshot)

    def _update_ui(self, snapshot: Snapshot) -> None:
        """Update the UI with the new snapshot."""
        self.query_one("#summary-stats", SummaryStats).update_stats(snapshot)
        self.query_one(FilesystemTable).update_filesystems(snapshot.filesystems)
        self.query_one(InterfaceTable).update_interfaces(dict(snapshot.interfaces))

    def action_refresh(self) -> None:
        """Collect a new snapshot without waiting for the interval."""
        self._monitor.refresh_now()
        self.notify("Refreshing...")

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()
