"""procsnap-top - live Textual viewer over SnapshotBuilder."""

from enum import Enum

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Static
from textual.worker import Worker, get_current_worker

from procsnap.config import CollectorConfig
from procsnap.models import ProcessRecord, Snapshot
from procsnap.monitor import SnapshotBuilder


class SortKey(Enum):
    """Sort keys for the process table."""

    CPU = "cpu"
    MEM = "mem"
    PID = "pid"
    NAME = "name"


def format_kb(size_kb: int) -> str:
    """Format kilobytes as human-readable string."""
    size = float(size_kb)
    for unit in ["K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "K" else f"{int(size):5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def format_cpu_time(cpu_time_ns: int) -> str:
    """Format nanoseconds as [h:]mm:ss.cc like top's TIME+ column."""
    centis = cpu_time_ns // 10_000_000
    seconds, centis = divmod(centis, 100)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:2d}:{seconds:02d}.{centis:02d}"


class HeaderStats(Static):
    """Header widget showing CPU and memory statistics."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 4;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._snapshot: Snapshot | None = None

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
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
            cpu_info = self.query_one("#cpu-info", Static)
            mem_info = self.query_one("#mem-info", Static)
        except Exception:
            return  # Widget not mounted yet
        cpu_info.update(self._get_cpu_info())
        mem_info.update(self._get_mem_info())

    def _get_cpu_info(self) -> str:
        """Get CPU info display."""
        if self._snapshot is None:
            return "Loading CPU info..."
        usage = self._snapshot.cpu_usage_pct
        bar_len = min(usage // 5, 20)
        bar = "[green]█[/green]" * bar_len + "[dim]░[/dim]" * (20 - bar_len)
        return (
            f"CPU \\[{bar}] {usage:3d}%\n"
            f"Tasks: {self._snapshot.total_process_count}"
        )

    def _get_mem_info(self) -> str:
        """Get memory info display."""
        snapshot = self._snapshot
        if snapshot is None or snapshot.total_ram_kb == 0:
            return "Loading memory info..."

        percent = snapshot.used_ram_kb * 100 // snapshot.total_ram_kb
        bar_len = min(percent // 5, 20)
        bar = "[cyan]█[/cyan]" * bar_len + "[dim]░[/dim]" * (20 - bar_len)
        used_gb = snapshot.used_ram_kb / (1024**2)
        total_gb = snapshot.total_ram_kb / (1024**2)
        avail_gb = snapshot.available_kb / (1024**2)
        return f"Mem\\[{bar}] {used_gb:.1f}G/{total_gb:.1f}G\nAvailable: {avail_gb:.1f}G"


class ProcessTable(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._current_pids: set[int] = set()
        self._sort_key: SortKey = SortKey.CPU
        self._sort_reverse: bool = True  # Default: descending for CPU
        self._containers_only: bool = False
        self._reorder: bool = False  # drop rows so they are re-added in sort order

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    @property
    def containers_only(self) -> bool:
        return self._containers_only

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key and return it."""
        keys = list(SortKey)
        current_index = keys.index(self._sort_key)
        next_index = (current_index + 1) % len(keys)
        self._sort_key = keys[next_index]
        # Set sort order based on key
        self._sort_reverse = self._sort_key in (SortKey.CPU, SortKey.MEM)
        self._reorder = True
        return self._sort_key

    def toggle_containers(self) -> bool:
        """Toggle the container-related filter and return the new setting."""
        self._containers_only = not self._containers_only
        self._reorder = True
        return self._containers_only

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=8)
        table.add_column("NAME", key="name", width=16)
        table.add_column("S", key="state", width=3)
        table.add_column("TIME+", key="cpu", width=11)
        table.add_column("MEM%", key="mem", width=5)
        table.add_column("RES", key="rss", width=8)
        table.add_column("VIRT", key="vsz", width=8)
        table.add_column("CTR", key="container", width=4)
        table.add_column("Command", key="command")

    def update_processes(self, processes: tuple[ProcessRecord, ...] | list[ProcessRecord]) -> None:
        """
        Update the process table with new data.

        Uses update_cell for existing rows to avoid re-rendering the whole table.
        """
        table = self.query_one("#process-table", DataTable)
        if self._reorder:
            table.clear()
            self._current_pids = set()
            self._reorder = False

        visible = [p for p in processes if p.container_related or not self._containers_only]
        sorted_processes = self._sort_processes(visible)
        new_pids = {proc.pid for proc in sorted_processes}

        # Remove rows for processes that no longer exist or are filtered out
        for pid in self._current_pids - new_pids:
            try:
                table.remove_row(str(pid))
            except Exception:
                pass  # Row may not exist

        for proc in sorted_processes:
            row_key = str(proc.pid)
            if proc.pid in self._current_pids:
                self._update_row(table, row_key, proc)
            else:
                self._add_row(table, row_key, proc)

        self._current_pids = new_pids

    def _sort_processes(self, processes: list[ProcessRecord]) -> list[ProcessRecord]:
        """Sort processes based on the current sort key."""
        key_func = {
            SortKey.CPU: lambda p: p.cpu_time_ns,
            SortKey.MEM: lambda p: p.rss_kb,
            SortKey.PID: lambda p: p.pid,
            SortKey.NAME: lambda p: p.name.lower(),
        }
        return sorted(processes, key=key_func[self._sort_key], reverse=self._sort_reverse)

    def _cells(self, proc: ProcessRecord) -> dict[str, str]:
        return {
            "pid": str(proc.pid),
            "name": proc.name,
            "state": proc.state,
            "cpu": format_cpu_time(proc.cpu_time_ns),
            "mem": f"{proc.mem_percent:3d}",
            "rss": format_kb(proc.rss_kb),
            "vsz": format_kb(proc.vsz_kb),
            "container": "yes" if proc.container_related else "",
            "command": proc.command_line[:80] or f"[{proc.name}]",
        }

    def _update_row(self, table: DataTable, row_key: str, proc: ProcessRecord) -> None:
        """Update an existing row using update_cell for performance."""
        try:
            for column, value in self._cells(proc).items():
                table.update_cell(row_key, column, value)
        except Exception:
            pass  # Row may have been removed

    def _add_row(self, table: DataTable, row_key: str, proc: ProcessRecord) -> None:
        """Add a new row to the table."""
        try:
            table.add_row(*self._cells(proc).values(), key=row_key)
        except Exception:
            pass  # Row may already exist


class ProcsnapApp(App):
    """Live process viewer."""

    TITLE = "procsnap-top"
    SUB_TITLE = "Host snapshot viewer"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 4;
    }

    Horizontal {
        height: auto;
    }

    #cpu-info {
        width: 1fr;
        padding-right: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("f6", "sort", "Sort"),
        ("c", "containers", "Containers"),
        ("r", "refresh", "Refresh"),
    ]

    def __init__(
        self,
        builder: SnapshotBuilder | None = None,
        config: CollectorConfig | None = None,
    ) -> None:
        """Initialize the ProcsnapApp."""
        super().__init__()
        self._config = config if config is not None else CollectorConfig.from_env()
        self._builder = builder if builder is not None else SnapshotBuilder.from_config(self._config)
        self._last_snapshot: Snapshot | None = None
        self._build_worker: Worker | None = None

    @property
    def last_snapshot(self) -> Snapshot | None:
        return self._last_snapshot

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield ProcessTable()
        yield Footer()

    def on_mount(self) -> None:
        """Take a baseline CPU sample and schedule refreshes."""
        self._builder.prime()
        self.set_interval(self._config.poll_rate, self._refresh_snapshot)

    def _refresh_snapshot(self) -> None:
        """Start a snapshot build off the event loop unless one is in flight."""
        if self._build_worker is not None and not self._build_worker.is_finished:
            return
        self._build_worker = self.run_worker(
            self._build_snapshot, name="snapshot", group="snapshot", thread=True
        )

    def _build_snapshot(self) -> None:
        """Walk the process table in a worker thread and hand the result to the UI."""
        snapshot = self._builder.build()
        if not get_current_worker().is_cancelled:
            self.call_from_thread(self._apply_snapshot, snapshot)

    def _apply_snapshot(self, snapshot: Snapshot) -> None:
        self._last_snapshot = snapshot
        self._update_ui(snapshot)

    def _update_ui(self, snapshot: Snapshot) -> None:
        """Update the UI with the new snapshot."""
        try:
            header = self.query_one("#header-stats", HeaderStats)
            header.update_stats(snapshot)
        except Exception:
            pass  # Screen is being torn down

        try:
            process_table = self.query_one(ProcessTable)
            process_table.update_processes(snapshot.processes)
        except Exception:
            pass  # Screen is being torn down

    def action_sort(self) -> None:
        """Handle sort action - cycle through sort keys."""
        process_table = self.query_one(ProcessTable)
        new_sort_key = process_table.cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")
        if self._last_snapshot is not None:
            process_table.update_processes(self._last_snapshot.processes)

    def action_containers(self) -> None:
        """Toggle showing only container-related processes."""
        process_table = self.query_one(ProcessTable)
        containers_only = process_table.toggle_containers()
        self.notify("Containers only" if containers_only else "All processes")
        if self._last_snapshot is not None:
            process_table.update_processes(self._last_snapshot.processes)

    def action_refresh(self) -> None:
        """Build a fresh snapshot immediately."""
        self._refresh_snapshot()


def main() -> None:
    """Entry point for the procsnap-top viewer."""
    config = CollectorConfig.from_env()
    config.apply_procfs()
    app = ProcsnapApp(config=config)
    app.run()


if __name__ == "__main__":
    main()
