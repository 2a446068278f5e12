"""Exception types raised by pysmem."""


class PysmemError(Exception):
    """Base class for all pysmem errors."""


class SizeParseError(PysmemError, ValueError):
    """A memory line is not shaped like '<Label>: <N> kB'."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"cannot parse size from {line!r}: {reason}")
        self.line = line
        self.reason = reason


class ProcessingError(PysmemError):
    """A per-process record is structurally invalid."""


class FatalError(PysmemError):
    """A shared prerequisite of the whole run could not be built."""
