"""Run configuration for pysmem."""

from dataclasses import dataclass, field
from pathlib import Path

import psutil

from pysmem.fields import DEFAULT_FIELDS, Field

DEFAULT_SOURCE = Path(psutil.PROCFS_PATH)
DEFAULT_SORT_FIELD = Field.RSS


@dataclass(slots=True, frozen=True)
class Options:
    """Immutable configuration for one run."""

    source: Path = DEFAULT_SOURCE
    no_header: bool = False
    numeric: bool = False  # Show uids instead of user names
    reverse: bool = False
    abbreviate: bool = False  # Human-readable sizes
    totals: bool = False
    process_filter: str | None = None
    user_filter: str | None = None
    fields: tuple[Field, ...] = field(default_factory=tuple)
    sort_field: Field = DEFAULT_SORT_FIELD
    workers: int | None = None  # None: one per CPU
    interactive: bool = False
    verbose: int = 0

    @property
    def active_fields(self) -> tuple[Field, ...]:
        """The columns to show: the explicit list, or every field in default order."""
        return self.fields or DEFAULT_FIELDS
