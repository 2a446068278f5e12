"""Parsing and rendering of memory sizes.

The kernel reports every memory category in smaps and smaps_rollup as a
line like::

    Private_Dirty:        1234 kB

where the padding between the label and the value varies. "kB" there means
KiB, so values are multiplied by 1024.
"""

from collections.abc import Iterable

from pysmem.errors import SizeParseError
from pysmem.models import ProcessSizes

KB_SUFFIX = "kB"

# Label prefix -> accumulator. Both private categories feed USS.
_CATEGORIES = {
    "Pss:": "pss",
    "Rss:": "rss",
    "Private_Clean:": "uss",
    "Private_Dirty:": "uss",
    "Swap:": "swap",
}

_UNITS = ["B", "KB", "MB", "GB", "TB", "PB", "EB"]


def parse_size(line: str) -> int:
    """
    Parse one '<Label>: <N> kB' line into a byte count.

    The value is the last whitespace-delimited token before the unit.

    Raises:
        SizeParseError: if the unit is missing, the label and value are not
            separated by whitespace, or the value is not a non-negative integer.
    """
    text = line[:-1] if line.endswith("\n") else line
    if not text.endswith(KB_SUFFIX):
        raise SizeParseError(line, "missing kB suffix")
    head = text[: -len(KB_SUFFIX)]
    if not head[-1:].isspace():
        raise SizeParseError(line, "no space before unit")

    tokens = head.split()
    if len(tokens) < 2:
        raise SizeParseError(line, "no value after label")
    value = tokens[-1]
    if not (value.isascii() and value.isdigit()):
        raise SizeParseError(line, f"bad value {value!r}")
    return int(value) * 1024


def aggregate(lines: Iterable[str]) -> ProcessSizes:
    """
    Sum the memory categories of a smaps or smaps_rollup listing.

    Lines are independent of each other, so order does not matter; lines with
    any other label are ignored.
    """
    totals = dict.fromkeys(("pss", "rss", "uss", "swap"), 0)
    for line in lines:
        for prefix, name in _CATEGORIES.items():
            if line.startswith(prefix):
                totals[name] += parse_size(line)
                break
    return ProcessSizes(**totals)


def format_size(size: int) -> str:
    """Format bytes as a conventional binary size, e.g. 100KB or 1.5MB."""
    if size < 1024:
        return f"{size}B"
    value = float(size)
    for unit in _UNITS[1:]:
        value /= 1024
        if value < 1024 or unit == _UNITS[-1]:
            break
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text}{unit}"
