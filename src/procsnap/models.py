"""Data models for procsnap."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class MemoryStats:
    """Aggregate memory figures in kilobytes."""

    total_kb: int
    free_kb: int
    available_kb: int
    used_kb: int

    @classmethod
    def from_kb(cls, total_kb: int, free_kb: int, available_kb: int) -> "MemoryStats":
        """
        Build stats from raw meminfo figures.

        An unreported (zero) available figure falls back to free memory, and
        used memory is floored at zero when available exceeds total.
        """
        if available_kb == 0:
            available_kb = free_kb
        return cls(
            total_kb=total_kb,
            free_kb=free_kb,
            available_kb=available_kb,
            used_kb=max(0, total_kb - available_kb),
        )

    @classmethod
    def zero(cls) -> "MemoryStats":
        return cls(total_kb=0, free_kb=0, available_kb=0, used_kb=0)


@dataclass(slots=True, frozen=True)
class CpuCounters:
    """Accumulated ticks per CPU category since boot."""

    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int
    steal: int

    @property
    def idle_total(self) -> int:
        return self.idle + self.iowait

    @property
    def total(self) -> int:
        return (
            self.user
            + self.nice
            + self.system
            + self.idle
            + self.iowait
            + self.irq
            + self.softirq
            + self.steal
        )


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable record of one process, as seen during a single walk."""

    pid: int
    name: str  # kernel comm, at most 15 chars
    command_line: str
    vsz_kb: int
    rss_kb: int
    mem_percent: int  # 0 - 100, floored
    cpu_time_ns: int  # user + system
    state: str  # 'R', 'S', 'D', 'T', 't', 'Z', 'X' or '?'
    container_related: bool


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Point-in-time report of memory, CPU and the process table."""

    total_ram_kb: int
    free_ram_kb: int
    available_kb: int
    used_ram_kb: int
    cpu_usage_pct: int
    timestamp_ms: int
    total_process_count: int
    processes: tuple[ProcessRecord, ...]

    @classmethod
    def empty(cls, timestamp_ms: int) -> "Snapshot":
        """A structurally complete, all-zero snapshot."""
        return cls(
            total_ram_kb=0,
            free_ram_kb=0,
            available_kb=0,
            used_ram_kb=0,
            cpu_usage_pct=0,
            timestamp_ms=timestamp_ms,
            total_process_count=0,
            processes=(),
        )
