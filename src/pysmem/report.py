"""Sorting and text rendering of scan results."""

import sys
from collections.abc import Iterable, Sequence
from functools import cmp_to_key
from typing import TextIO

from pysmem.config import Options
from pysmem.fields import COLUMN_WIDTH, Field, Kind, compare, format_field, format_header, format_total, kind
from pysmem.filters import Filters
from pysmem.models import ProcessRecord, total_sizes
from pysmem.scanner import ProcReader, ProcessScanner
from pysmem.users import UserDirectory

SEPARATOR = "-" * 80


def collect(options: Options, reader: ProcReader | None = None, users=None) -> list[ProcessRecord]:
    """
    Scan the process table described by ``options``.

    Args:
        options: Run configuration.
        reader: File access collaborator for the scanner.
        users: (name, uid) pairs for the user directory. Defaults to the
            system password database.

    Raises:
        FatalError: if the filters, the user directory or the process table
            root cannot be set up.
    """
    filters = Filters.compile(options.process_filter, options.user_filter)
    directory = UserDirectory.build(filters, users)
    scanner = ProcessScanner(directory, filters, reader=reader, workers=options.workers)
    return scanner.scan(options.source)


def sort_records(
    records: Iterable[ProcessRecord],
    field: Field,
    reverse: bool = False,
    numeric: bool = False,
) -> list[ProcessRecord]:
    """
    Sort records on a single field.

    Reversing negates the ascending comparison, so records that tie stay in
    the order they were collected in either direction.
    """
    if reverse:
        key = cmp_to_key(lambda a, b: -compare(field, a, b, numeric))
    else:
        key = cmp_to_key(lambda a, b: compare(field, a, b, numeric))
    return sorted(records, key=key)


def _line(cells: Iterable[str]) -> str:
    return "".join(f"{cell} " for cell in cells)


def header_line(fields: Sequence[Field], numeric: bool = False) -> str:
    """The header line for ``fields``."""
    return _line(format_header(field, numeric) for field in fields)


def record_line(record: ProcessRecord, fields: Sequence[Field], options: Options) -> str:
    """One table row for ``record``."""
    return _line(format_field(field, record, options.numeric, options.abbreviate) for field in fields)


def totals_line(records: Iterable[ProcessRecord], fields: Sequence[Field], options: Options) -> str:
    """Totals for the size columns; other columns are left blank."""
    totals = total_sizes(records)
    cells = []
    for field in fields:
        if kind(field, options.numeric) is Kind.SIZE:
            cells.append(format_total(field, totals, options.abbreviate))
        else:
            cells.append(" " * COLUMN_WIDTH)
    return _line(cells)


def render(records: Iterable[ProcessRecord], options: Options, out: TextIO) -> None:
    """Write the sorted table, with optional header and totals, to ``out``."""
    fields = options.active_fields
    rows = sort_records(records, options.sort_field, options.reverse, options.numeric)

    if not options.no_header:
        print(header_line(fields, options.numeric), file=out)
    for record in rows:
        print(record_line(record, fields, options), file=out)
    if options.totals:
        print(SEPARATOR, file=out)
        print(totals_line(rows, fields, options), file=out)


def run(options: Options, out: TextIO | None = None, reader: ProcReader | None = None, users=None) -> None:
    """Scan, then print the report. Nothing is written if the scan fails."""
    records = collect(options, reader=reader, users=users)
    render(records, options, out or sys.stdout)
