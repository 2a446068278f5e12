"""Data models for pysmem."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ProcessIdentity:
    """Who a process is and who owns it."""

    pid: int
    uid: int
    username: str  # Empty when the uid has no entry in the user database


@dataclass(slots=True, frozen=True)
class ProcessSizes:
    """Memory footprint of a process, all values in bytes."""

    pss: int = 0
    rss: int = 0
    uss: int = 0  # Private_Clean + Private_Dirty
    swap: int = 0

    def __add__(self, other: "ProcessSizes") -> "ProcessSizes":
        """Elementwise sum."""
        if not isinstance(other, ProcessSizes):
            return NotImplemented
        return ProcessSizes(
            pss=self.pss + other.pss,
            rss=self.rss + other.rss,
            uss=self.uss + other.uss,
            swap=self.swap + other.swap,
        )


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable snapshot of one admitted process."""

    identity: ProcessIdentity
    command: str  # Short name from comm
    cmdline: str  # Argument vector joined with spaces
    sizes: ProcessSizes

    @property
    def pid(self) -> int:
        """Get the process id."""
        return self.identity.pid

    @property
    def uid(self) -> int:
        """Get the owning uid."""
        return self.identity.uid

    @property
    def username(self) -> str:
        """Get the owner's name, empty if unknown."""
        return self.identity.username


def total_sizes(records) -> ProcessSizes:
    """Elementwise sum of the sizes of every record (all zero when empty)."""
    totals = ProcessSizes()
    for record in records:
        totals += record.sizes
    return totals
