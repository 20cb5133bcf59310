"""CPU usage breakdown from two consecutive /proc/stat samples."""

import threading

from pyrtop.models import CPUPercentages, CPUState, RawCPUSample


def compute_cpu(state: CPUState, sample: RawCPUSample) -> tuple[CPUPercentages, CPUState]:
    """
    Compute the CPU breakdown between the sample held in ``state`` and ``sample``.

    Returns the percentages and the state to use next round, which always
    holds ``sample``. A cold state (no previous sample) yields all-zero
    percentages, as does a zero or negative tick delta between the two
    samples; counters run backwards when the host reboots between rounds.
    Steal time counts towards the total but is not reported.
    """
    next_state = CPUState(previous=sample)
    if not state.warm:
        return CPUPercentages(), next_state

    prev = state.previous
    total = sample.total - prev.total
    if total <= 0:
        return CPUPercentages(), next_state

    def pct(current: int, previous: int) -> float:
        return 100.0 * (current - previous) / total

    percentages = CPUPercentages(
        user=pct(sample.user, prev.user),
        nice=pct(sample.nice, prev.nice),
        system=pct(sample.system, prev.system),
        idle=pct(sample.idle, prev.idle),
        iowait=pct(sample.iowait, prev.iowait),
        irq=pct(sample.irq, prev.irq),
        softirq=pct(sample.softirq, prev.softirq),
        guest=pct(sample.guest, prev.guest),
    )
    return percentages, next_state


class CPUTracker:
    """
    Owns the rolling CPU state between rounds.

    Calls to update() are serialized, so rounds collected from more than
    one thread still see each sample exactly once.
    """

    def __init__(self, state: CPUState | None = None) -> None:
        self._state = state or CPUState()
        self._lock = threading.Lock()

    @property
    def state(self) -> CPUState:
        """The state that the next update() will compare against."""
        return self._state

    def update(self, sample: RawCPUSample) -> CPUPercentages:
        """Record a new sample and return the breakdown since the last one."""
        with self._lock:
            percentages, self._state = compute_cpu(self._state, sample)
        return percentages
