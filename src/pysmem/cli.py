"""Command line entry point for pysmem."""

import argparse
import os
import sys
from pathlib import Path

import structlog

from pysmem import log as logsetup
from pysmem.config import DEFAULT_SORT_FIELD, DEFAULT_SOURCE, Options
from pysmem.errors import FatalError
from pysmem.fields import Field
from pysmem.report import collect, render

log = structlog.get_logger()

EXIT_FATAL = 1
EXIT_INTERRUPTED = 130
EXIT_BROKEN_PIPE = 141  # 128 + SIGPIPE, what a shell reports for `pysmem | head`


def _field(name: str) -> Field:
    """Argparse type for a field name."""
    try:
        return Field.parse(name)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _positive(text: str) -> int:
    """Argparse type for a count of at least one."""
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="pysmem",
        description="Report proportional, resident, unique and swapped memory per process.",
    )
    parser.add_argument("-H", "--no-header", action="store_true", help="disable the header line")
    parser.add_argument("-P", "--processfilter", dest="process_filter", metavar="REGEX", help="process filter")
    parser.add_argument("-U", "--userfilter", dest="user_filter", metavar="REGEX", help="user filter")
    parser.add_argument("-n", "--numeric", action="store_true", help="show uids instead of user names")
    parser.add_argument("-r", "--reverse", action="store_true", help="reverse sort")
    parser.add_argument("-k", "--abbreviate", action="store_true", help="show human-readable sizes")
    parser.add_argument(
        "-S",
        "--source",
        type=Path,
        default=DEFAULT_SOURCE,
        help="the path to /proc (the data source, default: %(default)s)",
    )
    parser.add_argument(
        "-c",
        "--columns",
        dest="fields",
        type=_field,
        nargs="+",
        default=[],
        metavar="FIELD",
        help="columns to show: " + ", ".join(field.value for field in Field),
    )
    parser.add_argument(
        "-s",
        "--sort",
        dest="sort_field",
        type=_field,
        default=DEFAULT_SORT_FIELD,
        metavar="FIELD",
        help=f"column to sort on (default: {DEFAULT_SORT_FIELD.value})",
    )
    parser.add_argument("-t", "--totals", action="store_true", help="show totals")
    parser.add_argument("-j", "--jobs", dest="workers", type=_positive, help="scanner threads (default: one per CPU)")
    parser.add_argument("-i", "--interactive", action="store_true", help="browse the result interactively")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="log progress to stderr (repeat for more)")
    return parser


def parse_options(argv: list[str] | None = None) -> Options:
    """Parse command line arguments into an Options instance."""
    args = build_parser().parse_args(argv)
    return Options(
        source=args.source,
        no_header=args.no_header,
        numeric=args.numeric,
        reverse=args.reverse,
        abbreviate=args.abbreviate,
        totals=args.totals,
        process_filter=args.process_filter,
        user_filter=args.user_filter,
        fields=tuple(args.fields),
        sort_field=args.sort_field,
        workers=args.workers,
        interactive=args.interactive,
        verbose=args.verbose,
    )


def _silence_stdout() -> None:
    """Point stdout at /dev/null so the flush at interpreter exit cannot fail again."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def _browse(options: Options, records) -> None:
    """Open the Textual browser on ``records``."""
    from pysmem.app import PysmemApp

    PysmemApp(records, options).run()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the pysmem command. Returns the exit status."""
    options = parse_options(argv)
    logsetup.configure(options.verbose)

    try:
        records = collect(options)
        if options.interactive:
            _browse(options, records)
        else:
            render(records, options, sys.stdout)
            sys.stdout.flush()
    except FatalError as exc:
        log.debug("fatal", exc_info=exc)
        print(f"pysmem: {exc}", file=sys.stderr)
        return EXIT_FATAL
    except BrokenPipeError:
        _silence_stdout()
        return EXIT_BROKEN_PIPE
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    return 0


if __name__ == "__main__":
    sys.exit(main())
