"""Fixed-format parsers for procfs text.

Both parsers are pure functions over strings so they can be tested without
touching the host.
"""

from procsnap.errors import CounterParseError
from procsnap.models import CpuCounters

CPU_FIELD_COUNT = 8
MEMINFO_KEYS = ("MemTotal", "MemFree", "MemAvailable")


def parse_cpu_line(line: str) -> CpuCounters:
    """
    Parse the aggregate ``cpu`` line of /proc/stat.

    The first eight numeric fields are user, nice, system, idle, iowait, irq,
    softirq and steal. Newer kernels append guest fields, which are ignored.

    Raises:
        CounterParseError: If the label is not ``cpu`` or fewer than eight
            non-negative integers follow it.
    """
    tokens = line.split()
    if not tokens or tokens[0] != "cpu":
        raise CounterParseError("expected aggregate 'cpu' line", line)

    fields = tokens[1 : CPU_FIELD_COUNT + 1]
    if len(fields) < CPU_FIELD_COUNT:
        raise CounterParseError(
            f"expected {CPU_FIELD_COUNT} counter fields, got {len(fields)}", line
        )
    if not all(field.isascii() and field.isdigit() for field in fields):
        raise CounterParseError("non-numeric counter field", line)

    user, nice, system, idle, iowait, irq, softirq, steal = (int(f) for f in fields)
    return CpuCounters(
        user=user,
        nice=nice,
        system=system,
        idle=idle,
        iowait=iowait,
        irq=irq,
        softirq=softirq,
        steal=steal,
    )


def parse_meminfo(text: str) -> dict[str, int]:
    """
    Extract MemTotal, MemFree and MemAvailable (kB) from /proc/meminfo text.

    Lines that do not match, or whose value is not an integer, are skipped.
    Keys that never matched are absent from the result.
    """
    values: dict[str, int] = {}
    for line in text.splitlines():
        key, sep, rest = line.partition(":")
        key = key.strip()
        if not sep or key not in MEMINFO_KEYS:
            continue
        parts = rest.split()
        if not parts or not (parts[0].isascii() and parts[0].isdigit()):
            continue
        values[key] = int(parts[0])
    return values
