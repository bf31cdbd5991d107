"""Aggregate memory figures from /proc/meminfo."""

import logging

from procsnap.models import MemoryStats
from procsnap.parsing import parse_meminfo
from procsnap.sources import MeminfoSource, TextSource

logger = logging.getLogger(__name__)


class MemorySampler:
    """Reads total, free and available memory; never raises."""

    def __init__(self, source: TextSource | None = None) -> None:
        self._source = source if source is not None else MeminfoSource()

    def sample(self) -> MemoryStats:
        try:
            text = self._source.read()
        except OSError as e:
            logger.debug(f"Memory info unavailable from {self._source!r}: {e}")
            return MemoryStats.zero()

        values = parse_meminfo(text)
        if not values:
            logger.debug(f"No MemTotal/MemFree/MemAvailable lines in {self._source!r}")
            return MemoryStats.zero()

        return MemoryStats.from_kb(
            total_kb=values.get("MemTotal", 0),
            free_kb=values.get("MemFree", 0),
            available_kb=values.get("MemAvailable", 0),
        )
