"""JSON rendering of snapshots.

The document is produced as a stream of chunks, one per global field and one
per process, so callers can start writing before the whole process list has
been formatted.
"""

import json
from collections.abc import Iterator
from typing import TextIO

from procsnap.models import ProcessRecord, Snapshot


def process_fields(record: ProcessRecord) -> dict:
    """Per-process mapping in wire order."""
    return {
        "pid": record.pid,
        "nombre": record.name,
        "cmdline_or_container_id": record.command_line,
        "vsz_kb": record.vsz_kb,
        "rss_kb": record.rss_kb,
        "mem_percent": record.mem_percent,
        "cpu_time_ns": record.cpu_time_ns,
        "estado": record.state,
        "container_related": "yes" if record.container_related else "no",
    }


def global_fields(snapshot: Snapshot) -> dict:
    """Top-level scalar fields in wire order."""
    return {
        "total_ram_kb": snapshot.total_ram_kb,
        "free_ram_kb": snapshot.free_ram_kb,
        "available_kb": snapshot.available_kb,
        "used_ram_kb": snapshot.used_ram_kb,
        "cpu_usage_pct": snapshot.cpu_usage_pct,
        "ts_ms": snapshot.timestamp_ms,
        "total_procs": snapshot.total_process_count,
    }


class Renderer:
    """Serializes a Snapshot to an indented JSON document."""

    def stream(self, snapshot: Snapshot) -> Iterator[str]:
        yield "{\n"
        for key, value in global_fields(snapshot).items():
            yield f"  {json.dumps(key)}: {json.dumps(value)},\n"

        yield '  "procesos": ['
        first = True
        for record in snapshot.processes:
            yield "\n    " if first else ",\n    "
            first = False
            yield json.dumps(process_fields(record))
        yield "]\n}\n" if first else "\n  ]\n}\n"

    def render(self, snapshot: Snapshot) -> str:
        return "".join(self.stream(snapshot))

    def write(self, snapshot: Snapshot, out: TextIO) -> None:
        for chunk in self.stream(snapshot):
            out.write(chunk)
