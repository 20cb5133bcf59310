"""Background refresh loop for pyrtop."""

import logging
import threading
from queue import Queue

from pyrtop.collector import SnapshotCollector
from pyrtop.models import Snapshot

logger = logging.getLogger(__name__)

MIN_INTERVAL = 0.1  # Seconds


class RemoteMonitor:
    """
    Collects a Snapshot from the remote host once per interval.

    Runs in a separate daemon thread and pushes snapshots to a thread-safe
    Queue. Rounds never overlap, and the collector (with its CPU state) is
    only ever touched from the monitor thread.
    """

    def __init__(
        self,
        collector: SnapshotCollector,
        update_queue: Queue[Snapshot],
        interval: float = 5.0,
    ) -> None:
        """
        Initialize the RemoteMonitor.

        Args:
            collector: Collector bound to the remote host.
            update_queue: Thread-safe queue to push snapshots to.
            interval: Seconds between rounds. Default 5.0s.
        """
        self._collector = collector
        self._queue = update_queue
        self._interval = max(MIN_INTERVAL, interval)
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        """Get the refresh interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the refresh interval."""
        self._interval = max(MIN_INTERVAL, value)

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="RemoteMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        self._wake_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def refresh_now(self) -> None:
        """Cut the current wait short and run the next round immediately."""
        self._wake_event.set()

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self._queue.put(self._collector.collect())
            except Exception:
                # Keep the loop running, the next round may succeed
                logger.exception("collection round failed")

            self._wake_event.wait(timeout=self._interval)
            self._wake_event.clear()
