"""Snapshot engine for procsnap."""

import logging
import time

from procsnap.classifier import ContainerClassifier
from procsnap.config import CollectorConfig
from procsnap.cpu import CounterStore, CpuSampler
from procsnap.memory import MemorySampler
from procsnap.models import Snapshot
from procsnap.sources import ArgumentRegionReader, MeminfoSource, ProcStatSource
from procsnap.walker import ProcessWalker

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


class SnapshotBuilder:
    """
    Assembles one immutable Snapshot per call to ``build()``.

    There is no polling thread: each snapshot is produced synchronously on
    request. The only state kept between calls is the CPU sampler's counter
    store, which is safe to share between threads.
    """

    def __init__(
        self,
        memory_sampler: MemorySampler | None = None,
        cpu_sampler: CpuSampler | None = None,
        walker: ProcessWalker | None = None,
        classifier: ContainerClassifier | None = None,
    ) -> None:
        """
        Initialize the SnapshotBuilder.

        Args:
            memory_sampler: Aggregate memory source. Defaults to /proc/meminfo.
            cpu_sampler: Aggregate CPU source. Defaults to /proc/stat with a
                private counter store.
            walker: Process table walker. Defaults to psutil enumeration.
            classifier: Container classifier; None disables tagging and every
                record is reported as not container-related.
        """
        self._memory = memory_sampler if memory_sampler is not None else MemorySampler()
        self._cpu = cpu_sampler if cpu_sampler is not None else CpuSampler()
        self._walker = walker if walker is not None else ProcessWalker()
        self._classifier = classifier

    @classmethod
    def from_config(
        cls,
        config: CollectorConfig,
        store: CounterStore | None = None,
    ) -> "SnapshotBuilder":
        """Wire every component from a CollectorConfig."""
        return cls(
            memory_sampler=MemorySampler(MeminfoSource(config.proc_root)),
            cpu_sampler=CpuSampler(ProcStatSource(config.proc_root), store),
            walker=ProcessWalker(ArgumentRegionReader(config.proc_root, config.cmdline_max)),
            classifier=ContainerClassifier(config.container_keywords) if config.classify else None,
        )

    def prime(self) -> None:
        """Take a throwaway CPU sample so the next build has a baseline."""
        self._cpu.sample()

    def build(self) -> Snapshot:
        """Build a snapshot. Never raises; degraded fields are zero."""
        ts_ms = now_ms()
        try:
            memory = self._memory.sample()
            cpu_pct = self._cpu.sample()
            classify = self._classifier.classify if self._classifier is not None else None
            processes, count = self._walker.walk(memory.total_kb, classify)

            return Snapshot(
                total_ram_kb=memory.total_kb,
                free_ram_kb=memory.free_kb,
                available_kb=memory.available_kb,
                used_ram_kb=memory.used_kb,
                cpu_usage_pct=cpu_pct,
                timestamp_ms=ts_ms,
                total_process_count=count,
                processes=processes,
            )
        except MemoryError:
            logger.warning("Out of memory while building snapshot; returning zeroed snapshot")
            return Snapshot.empty(ts_ms)
