"""Report columns: what each one is, how it sorts and how it prints."""

from enum import Enum

from pysmem.models import ProcessRecord, ProcessSizes
from pysmem.sizes import format_size

COLUMN_WIDTH = 10


class Field(Enum):
    """Columns that can be shown, sorted on or totalled."""

    PID = "pid"
    USER = "user"
    PSS = "pss"
    RSS = "rss"
    USS = "uss"
    SWAP = "swap"
    CMDLINE = "cmdline"

    @property
    def title(self) -> str:
        """Header label, e.g. 'Pss'."""
        return self.value.capitalize()

    @classmethod
    def parse(cls, name: str) -> "Field":
        """Look up a field by its lower-case name."""
        try:
            return cls(name)
        except ValueError:
            choices = ", ".join(field.value for field in cls)
            raise ValueError(f"Unknown field: {name} (choose from {choices})") from None


DEFAULT_FIELDS: tuple[Field, ...] = tuple(Field)


class Kind(Enum):
    """How a column is justified and whether it can be totalled."""

    IDENTIFIER = "identifier"
    SIZE = "size"
    TEXT = "text"


_KINDS = {
    Field.PID: Kind.IDENTIFIER,
    Field.USER: Kind.TEXT,
    Field.PSS: Kind.SIZE,
    Field.RSS: Kind.SIZE,
    Field.USS: Kind.SIZE,
    Field.SWAP: Kind.SIZE,
    Field.CMDLINE: Kind.TEXT,
}

_SIZE_ATTRS = {
    Field.PSS: "pss",
    Field.RSS: "rss",
    Field.USS: "uss",
    Field.SWAP: "swap",
}

# Value each field sorts on. User depends on the numeric flag and is handled
# in sort_value().
_SORT_VALUES = {
    Field.PID: lambda r: r.pid,
    Field.PSS: lambda r: r.sizes.pss,
    Field.RSS: lambda r: r.sizes.rss,
    Field.USS: lambda r: r.sizes.uss,
    Field.SWAP: lambda r: r.sizes.swap,
    Field.CMDLINE: lambda r: r.cmdline,
}


def kind(field: Field, numeric: bool = False) -> Kind:
    """The kind of ``field``; User is an identifier when shown as a uid."""
    if field is Field.USER and numeric:
        return Kind.IDENTIFIER
    return _KINDS[field]


def sort_value(field: Field, record: ProcessRecord, numeric: bool = False):
    """The value of ``record`` that ``field`` orders on."""
    if field is Field.USER:
        return record.uid if numeric else record.username
    return _SORT_VALUES[field](record)


def compare(field: Field, a: ProcessRecord, b: ProcessRecord, numeric: bool = False) -> int:
    """
    Three-way comparison of two records on exactly one field.

    Returns a negative number, zero or a positive number. There is no
    secondary key: records that tie keep whatever order they arrived in.
    """
    left = sort_value(field, a, numeric)
    right = sort_value(field, b, numeric)
    return (left > right) - (left < right)


def _format_size(size: int, abbreviate: bool) -> str:
    if abbreviate:
        return f"{format_size(size):>{COLUMN_WIDTH}}"
    return f"{size:{COLUMN_WIDTH}}"


def size_of(field: Field, sizes: ProcessSizes) -> int:
    """The byte count ``field`` selects from ``sizes``."""
    try:
        return getattr(sizes, _SIZE_ATTRS[field])
    except KeyError:
        raise ValueError(f"Field not supported for totals: {field.title}") from None


def format_field(
    field: Field,
    record: ProcessRecord,
    numeric: bool = False,
    abbreviate: bool = False,
) -> str:
    """Render one cell of a process row, padded to the column width."""
    if field is Field.PID:
        return f"{record.pid:{COLUMN_WIDTH}}"
    if field is Field.USER:
        if numeric:
            return f"{record.uid:{COLUMN_WIDTH}}"
        return f"{record.username:{COLUMN_WIDTH}}"
    if field is Field.CMDLINE:
        return f"{record.cmdline:{COLUMN_WIDTH}}"
    return _format_size(size_of(field, record.sizes), abbreviate)


def format_total(field: Field, totals: ProcessSizes, abbreviate: bool = False) -> str:
    """
    Render one cell of the totals row.

    Raises:
        ValueError: if ``field`` is not a size field.
    """
    return _format_size(size_of(field, totals), abbreviate)


def format_header(field: Field, numeric: bool = False) -> str:
    """Render a header cell, left-justified for text and right-justified otherwise."""
    if kind(field, numeric) is Kind.TEXT:
        return f"{field.title:<{COLUMN_WIDTH}}"
    return f"{field.title:>{COLUMN_WIDTH}}"
