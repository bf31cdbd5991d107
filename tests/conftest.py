"""Shared fakes for procsnap tests."""

from contextlib import nullcontext
from types import SimpleNamespace

import psutil
import pytest

from procsnap.cpu import CpuSampler
from procsnap.memory import MemorySampler
from procsnap.monitor import SnapshotBuilder
from procsnap.walker import ProcessWalker

MEMINFO = """\
MemTotal:       16000000 kB
MemFree:         2000000 kB
MemAvailable:    8000000 kB
Buffers:          500000 kB
Cached:          4000000 kB
"""


class StaticSource:
    """Text source returning the same text on every read."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.reads = 0

    def read(self) -> str:
        self.reads += 1
        return self.text


class SequenceSource:
    """Text source returning successive lines, one per read."""

    def __init__(self, *lines: str) -> None:
        self._lines = list(lines)

    def read(self) -> str:
        return self._lines.pop(0)


class FailingSource:
    """Text source whose file cannot be opened."""

    def read(self) -> str:
        raise FileNotFoundError("no such file")


class FakeProcess:
    """
    Stand-in for psutil.Process.

    Any field may be given as an exception instance, which is raised when
    the field is read.
    """

    def __init__(
        self,
        pid: int,
        name="proc",
        status=psutil.STATUS_SLEEPING,
        rss: int = 4096 * 1024,
        vms: int = 16384 * 1024,
        user: float = 1.5,
        system: float = 0.25,
        memory_info=None,
        cpu_times=None,
    ) -> None:
        self.pid = pid
        self._name = name
        self._status = status
        self._memory_info = memory_info if memory_info is not None else SimpleNamespace(rss=rss, vms=vms)
        self._cpu_times = cpu_times if cpu_times is not None else SimpleNamespace(user=user, system=system)

    @staticmethod
    def _get(value):
        if isinstance(value, BaseException):
            raise value
        return value

    def oneshot(self):
        return nullcontext()

    def name(self):
        return self._get(self._name)

    def status(self):
        return self._get(self._status)

    def memory_info(self):
        return self._get(self._memory_info)

    def cpu_times(self):
        return self._get(self._cpu_times)


class FakeArgumentReader:
    """Argument reader backed by a dict of pid -> raw bytes (or None)."""

    def __init__(self, regions: dict[int, bytes | None] | None = None) -> None:
        self.regions = regions or {}
        self.requested: list[int] = []

    def read(self, pid: int) -> bytes | None:
        self.requested.append(pid)
        return self.regions.get(pid)


def make_walker(processes, regions=None) -> ProcessWalker:
    return ProcessWalker(
        argument_reader=FakeArgumentReader(regions),
        process_iter=lambda: iter(processes),
    )


def make_builder(processes=(), regions=None, meminfo: str = MEMINFO, cpu_lines=None, classifier=None):
    cpu_source = SequenceSource(*cpu_lines) if cpu_lines else FailingSource()
    return SnapshotBuilder(
        memory_sampler=MemorySampler(StaticSource(meminfo)),
        cpu_sampler=CpuSampler(cpu_source),
        walker=make_walker(list(processes), regions),
        classifier=classifier,
    )


@pytest.fixture
def fake_procfs(tmp_path):
    """A minimal procfs tree with stat, meminfo and one process's cmdline."""
    (tmp_path / "stat").write_text(
        "cpu  100 0 50 800 50 0 0 0 0 0\ncpu0 100 0 50 800 50 0 0 0 0 0\nintr 1\n"
    )
    (tmp_path / "meminfo").write_text(MEMINFO)
    proc_dir = tmp_path / "4242"
    proc_dir.mkdir()
    (proc_dir / "cmdline").write_bytes(b"/usr/bin/dockerd\0--host=unix\0")
    return tmp_path
