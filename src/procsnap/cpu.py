"""Aggregate CPU utilization from successive /proc/stat samples."""

import logging
import threading
from collections.abc import Callable

from procsnap.errors import CounterParseError
from procsnap.models import CpuCounters
from procsnap.parsing import parse_cpu_line
from procsnap.sources import ProcStatSource, TextSource

logger = logging.getLogger(__name__)


class CounterStore:
    """
    Holds the previous CPU counter sample for the lifetime of the collector.

    ``advance`` reads a new sample and swaps it in while holding the store's
    lock, so concurrent samplers never compute a delta against a sample that
    another caller is about to replace.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._previous: CpuCounters | None = None

    @property
    def previous(self) -> CpuCounters | None:
        with self._lock:
            return self._previous

    def advance(
        self, read: Callable[[], CpuCounters]
    ) -> tuple[CpuCounters | None, CpuCounters]:
        """
        Read a sample and make it the new previous sample.

        Returns:
            ``(previous, current)``. ``previous`` is None on the first call.

        If ``read`` raises, the stored sample is left untouched and the
        exception propagates.
        """
        with self._lock:
            current = read()
            previous, self._previous = self._previous, current
            return previous, current

    def reset(self) -> None:
        with self._lock:
            self._previous = None


def utilization(previous: CpuCounters | None, current: CpuCounters) -> int:
    """
    Percentage of non-idle ticks between two samples, rounded half up.

    Returns 0 without a previous sample, and 0 when the total did not
    advance (identical samples, or counters that went backwards after a
    reset or wrap).
    """
    if previous is None:
        return 0
    delta_total = current.total - previous.total
    if delta_total <= 0:
        return 0
    delta_idle = min(max(current.idle_total - previous.idle_total, 0), delta_total)
    return (1000 * (delta_total - delta_idle) // delta_total + 5) // 10


class CpuSampler:
    """
    Samples aggregate CPU utilization.

    The first call in a store's lifetime always returns 0 because there is
    no earlier sample to compare against. Callers that need a meaningful
    first figure should sample once, wait, and sample again.
    """

    def __init__(
        self,
        source: TextSource | None = None,
        store: CounterStore | None = None,
    ) -> None:
        self._source = source if source is not None else ProcStatSource()
        self._store = store if store is not None else CounterStore()

    @property
    def store(self) -> CounterStore:
        return self._store

    def _read_counters(self) -> CpuCounters:
        return parse_cpu_line(self._source.read())

    def sample(self) -> int:
        """Return utilization in [0, 100]; 0 if the source is unusable."""
        try:
            previous, current = self._store.advance(self._read_counters)
        except (OSError, CounterParseError) as e:
            logger.debug(f"CPU counters unavailable from {self._source!r}: {e}")
            return 0
        return utilization(previous, current)
