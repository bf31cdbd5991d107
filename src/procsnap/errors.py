"""Exceptions raised inside procsnap.

None of these escape ``SnapshotBuilder.build()``; samplers catch them and
degrade the affected fields to zero.
"""


class SnapshotError(Exception):
    """Base class for procsnap errors."""


class CounterParseError(SnapshotError, ValueError):
    """A procfs line did not have the expected fixed format."""

    def __init__(self, message: str, line: str = "") -> None:
        super().__init__(message)
        self.line = line

    def __str__(self) -> str:
        base = super().__str__()
        if self.line:
            return f"{base}: {self.line!r}"
        return base
