"""Raw procfs sources.

Samplers depend on the ``TextSource`` protocol rather than on file paths, so
tests can hand them canned text. Every read goes back to the kernel; nothing
is cached between calls.
"""

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_PROC_ROOT = Path("/proc")
CMDLINE_MAX = 1024


class TextSource(Protocol):
    """Anything that returns fresh text on each call, or raises OSError."""

    def read(self) -> str: ...


class ProcTextSource:
    """Reads a whole procfs text file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def read(self) -> str:
        with open(self.path, encoding="ascii", errors="replace") as f:
            return f.read()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r})"


class ProcStatSource(ProcTextSource):
    """Reads only the first line of /proc/stat, the aggregate ``cpu`` line."""

    def __init__(self, proc_root: Path | str = DEFAULT_PROC_ROOT) -> None:
        super().__init__(Path(proc_root) / "stat")

    def read(self) -> str:
        with open(self.path, encoding="ascii", errors="replace") as f:
            return f.readline()


class MeminfoSource(ProcTextSource):
    """Reads /proc/meminfo."""

    def __init__(self, proc_root: Path | str = DEFAULT_PROC_ROOT) -> None:
        super().__init__(Path(proc_root) / "meminfo")


class ArgumentRegionReader:
    """
    Cross-process read of a process's argument vector.

    The kernel serves ``/proc/<pid>/cmdline`` straight out of the target's
    argument memory region, so the target may exit or drop its address space
    between listing and reading. ``read`` returns the bytes it got, owned by
    the caller, or ``None`` when the region is unavailable.
    """

    def __init__(
        self,
        proc_root: Path | str = DEFAULT_PROC_ROOT,
        limit: int = CMDLINE_MAX,
    ) -> None:
        self.proc_root = Path(proc_root)
        self.limit = limit

    def read(self, pid: int) -> bytes | None:
        path = self.proc_root / str(pid) / "cmdline"
        try:
            with open(path, "rb") as f:
                return f.read(self.limit)
        except OSError as e:
            # ENOENT/ESRCH once the process is gone, EACCES under hidepid
            logger.debug(f"Argument region of PID {pid} unavailable: {e}")
            return None
