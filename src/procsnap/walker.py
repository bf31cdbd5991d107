"""Single-pass walk of the live process table."""

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

import psutil

from procsnap.models import ProcessRecord
from procsnap.sources import ArgumentRegionReader

logger = logging.getLogger(__name__)

COMM_WIDTH = 15  # TASK_COMM_LEN - 1

# psutil reports the exit state (zombie/dead) ahead of the run state.
_STATE_TAGS = {
    psutil.STATUS_RUNNING: "R",
    psutil.STATUS_SLEEPING: "S",
    psutil.STATUS_DISK_SLEEP: "D",
    psutil.STATUS_IDLE: "D",
    psutil.STATUS_STOPPED: "T",
    psutil.STATUS_TRACING_STOP: "t",
    psutil.STATUS_ZOMBIE: "Z",
    psutil.STATUS_DEAD: "X",
}


def coarse_state(status: str | None) -> str:
    """Map a psutil status string to a one-character state tag."""
    if status is None:
        return "?"
    return _STATE_TAGS.get(status, "?")


def format_invocation(raw: bytes | None) -> str:
    """Turn a NUL-separated argument region into one printable line."""
    if not raw:
        return ""
    return raw.rstrip(b"\0").replace(b"\0", b" ").decode("utf-8", errors="replace")


T = TypeVar("T")


def _read(getter: Callable[[], T], default: T) -> T:
    """Call a psutil getter, returning ``default`` if the field is unavailable."""
    try:
        return getter()
    except psutil.Error:
        return default


class ProcessWalker:
    """
    Enumerates the process table once and materializes a ProcessRecord per
    process.

    Processes that exit mid-walk either get a best-effort record (fields
    that could no longer be read are 0/empty) or, if they were gone before
    their name could be read, are skipped. Either way the reported count is
    the number of records returned.
    """

    def __init__(
        self,
        argument_reader: ArgumentRegionReader | None = None,
        process_iter: Callable[[], Iterable[psutil.Process]] = psutil.process_iter,
    ) -> None:
        self._arguments = argument_reader if argument_reader is not None else ArgumentRegionReader()
        self._process_iter = process_iter

    def walk(
        self,
        total_ram_kb: int,
        classify: Callable[[str], bool] | None = None,
    ) -> tuple[tuple[ProcessRecord, ...], int]:
        """
        Walk the process table in enumeration order.

        Args:
            total_ram_kb: Total RAM used for each record's memory percentage.
            classify: Optional container classifier applied to each command line.

        Returns:
            ``(records, total_count)`` where ``total_count == len(records)``.
        """
        records: list[ProcessRecord] = []
        try:
            for proc in self._process_iter():
                record = self._inspect(proc, total_ram_kb, classify)
                if record is not None:
                    records.append(record)
        except (OSError, IndexError, psutil.Error) as e:
            # procfs went away or holds no pid entries; keep what was materialized so far
            logger.warning(f"Process table enumeration aborted after {len(records)} processes: {e}")
        return tuple(records), len(records)

    def _inspect(
        self,
        proc: psutil.Process,
        total_ram_kb: int,
        classify: Callable[[str], bool] | None,
    ) -> ProcessRecord | None:
        pid = proc.pid
        with proc.oneshot():
            zombie = False
            try:
                name = proc.name()
            except psutil.ZombieProcess:
                name, zombie = "", True
            except psutil.NoSuchProcess:
                logger.debug(f"PID {pid} exited before it could be inspected")
                return None
            except psutil.AccessDenied:
                name = ""

            # A zero virtual size means no user-space memory context:
            # kernel threads, and processes that already released theirs.
            mem = _read(proc.memory_info, None)
            vsz_kb = mem.vms // 1024 if mem is not None else 0
            if vsz_kb > 0:
                rss_kb = mem.rss // 1024
                command_line = format_invocation(self._arguments.read(pid))
            else:
                rss_kb = 0
                command_line = ""
            mem_percent = rss_kb * 100 // total_ram_kb if total_ram_kb > 0 else 0

            times = _read(proc.cpu_times, None)
            cpu_time_ns = round((times.user + times.system) * 1_000_000_000) if times is not None else 0

            state = coarse_state(_read(proc.status, psutil.STATUS_ZOMBIE if zombie else None))

        return ProcessRecord(
            pid=pid,
            name=name[:COMM_WIDTH],
            command_line=command_line,
            vsz_kb=vsz_kb,
            rss_kb=rss_kb,
            mem_percent=mem_percent,
            cpu_time_ns=cpu_time_ns,
            state=state,
            container_related=classify(command_line) if classify is not None else False,
        )
