"""Tests for procsnap data models."""

import dataclasses

import pytest

from procsnap.models import CpuCounters, MemoryStats, ProcessRecord, Snapshot


def make_record(**overrides) -> ProcessRecord:
    fields = dict(
        pid=123,
        name="test_process",
        command_line="/usr/bin/test --flag",
        vsz_kb=20480,
        rss_kb=4096,
        mem_percent=2,
        cpu_time_ns=1_750_000_000,
        state="S",
        container_related=False,
    )
    fields.update(overrides)
    return ProcessRecord(**fields)


def test_process_record_creation():
    """Test ProcessRecord dataclass creation."""
    record = make_record()

    assert record.pid == 123
    assert record.name == "test_process"
    assert record.command_line == "/usr/bin/test --flag"
    assert record.vsz_kb == 20480
    assert record.rss_kb == 4096
    assert record.mem_percent == 2
    assert record.cpu_time_ns == 1_750_000_000
    assert record.state == "S"
    assert record.container_related is False


def test_process_record_is_frozen():
    """Test that ProcessRecord is immutable (frozen)."""
    record = make_record()

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.pid = 999


def test_process_record_uses_slots():
    """Test that ProcessRecord uses __slots__ for memory efficiency."""
    assert not hasattr(make_record(), "__dict__")


class TestMemoryStats:
    def test_used_is_total_minus_available(self):
        stats = MemoryStats.from_kb(total_kb=16000, free_kb=2000, available_kb=8000)
        assert stats.used_kb == 8000
        assert stats.available_kb == 8000

    def test_missing_available_falls_back_to_free(self):
        stats = MemoryStats.from_kb(total_kb=16000, free_kb=2000, available_kb=0)
        assert stats.available_kb == 2000
        assert stats.used_kb == 14000

    def test_used_floored_at_zero(self):
        """A malformed source reporting more available than total."""
        stats = MemoryStats.from_kb(total_kb=1000, free_kb=500, available_kb=5000)
        assert stats.used_kb == 0
        assert stats.used_kb <= stats.total_kb

    def test_zero(self):
        assert MemoryStats.zero() == MemoryStats(0, 0, 0, 0)


class TestCpuCounters:
    def test_totals(self):
        counters = CpuCounters(100, 0, 50, 800, 50, 0, 0, 0)
        assert counters.idle_total == 850
        assert counters.total == 1000

    def test_all_categories_count_towards_total(self):
        counters = CpuCounters(1, 2, 3, 4, 5, 6, 7, 8)
        assert counters.total == 36
        assert counters.idle_total == 9


class TestSnapshot:
    def test_empty_snapshot_is_structurally_complete(self):
        snapshot = Snapshot.empty(1700000000000)

        assert snapshot.timestamp_ms == 1700000000000
        assert snapshot.total_process_count == 0
        assert snapshot.processes == ()
        assert snapshot.total_ram_kb == 0
        assert snapshot.cpu_usage_pct == 0

    def test_snapshot_is_frozen(self):
        snapshot = Snapshot.empty(0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.cpu_usage_pct = 50
