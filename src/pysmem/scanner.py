"""Process table scanner for pysmem."""

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TextIO

import psutil
import structlog

from pysmem.errors import FatalError, ProcessingError, PysmemError
from pysmem.filters import Filters
from pysmem.models import ProcessIdentity, ProcessRecord, ProcessSizes
from pysmem.sizes import aggregate
from pysmem.users import UserDirectory

log = structlog.get_logger()

UID_PREFIX = "Uid:"
ROLLUP_FILE = "smaps_rollup"
SMAPS_FILE = "smaps"


class ProcReader:
    """
    Reads files below the process table.

    Every read is scoped: handles are closed as soon as the caller is done,
    whether or not parsing succeeded.
    """

    def read_bytes(self, path: Path) -> bytes:
        """Read a whole (small) file."""
        with open(path, "rb") as handle:
            return handle.read()

    def open_lines(self, path: Path) -> TextIO:
        """Open a text file for line iteration; use as a context manager."""
        return open(path, encoding="utf-8", errors="replace")


def parse_pid(name: str) -> int | None:
    """The pid a process directory is named after, or None if it is not one."""
    if not (name.isascii() and name.isdigit()):
        return None
    pid = int(name)
    return pid if pid > 0 else None


def parse_uid(line: str) -> int:
    """
    Parse the real uid out of a status line like 'Uid:\\t1000\\t1000\\t1000\\t1000'.

    Raises:
        ProcessingError: if the line carries no numeric uid.
    """
    tokens = line[len(UID_PREFIX):].split()
    if not tokens or not (tokens[0].isascii() and tokens[0].isdigit()):
        raise ProcessingError(f"malformed uid line {line!r}")
    return int(tokens[0])


def _strip_newline(text: str) -> str:
    return text[:-1] if text.endswith("\n") else text


class ProcessScanner:
    """
    Collects memory statistics for every process under a process table root.

    Each process directory is handled by an independent task on a thread
    pool. A process that vanishes, denies access or has malformed files
    mid-scan is dropped without affecting the others.
    """

    def __init__(
        self,
        users: UserDirectory,
        filters: Filters,
        reader: ProcReader | None = None,
        workers: int | None = None,
    ) -> None:
        """
        Initialize the ProcessScanner.

        Args:
            users: User directory, already filtered by the user pattern.
            filters: Compiled filters; the process pattern is applied here.
            reader: File access collaborator. Default reads the filesystem.
            workers: Thread pool size. Default one per CPU.
        """
        self._users = users
        self._filters = filters
        self._reader = reader or ProcReader()
        self._workers = workers

    @property
    def workers(self) -> int:
        """Number of threads the scan runs on."""
        return self._workers or psutil.cpu_count() or 4

    def scan(self, source: Path) -> list[ProcessRecord]:
        """
        Scan every entry of ``source`` and return the admitted processes.

        Returns only after every task has finished. The order of the returned
        records is unspecified.

        Raises:
            FatalError: if ``source`` itself cannot be listed.
        """
        try:
            with os.scandir(source) as iterator:
                entries = list(iterator)
        except OSError as exc:
            raise FatalError(f"can't read {source}: {exc}") from exc

        log.info("scan_started", source=str(source), entries=len(entries), workers=self.workers)
        with ThreadPoolExecutor(
            max_workers=self.workers,
            thread_name_prefix="ProcessScanner",
        ) as executor:
            results = list(executor.map(self.scan_entry, entries))

        records = [record for record in results if record is not None]
        log.info("scan_finished", admitted=len(records))
        return records

    def scan_entry(self, entry: os.DirEntry) -> ProcessRecord | None:
        """Build the record for one directory entry, or None if it is dropped."""
        try:
            return self._read_process(entry)
        except (OSError, PysmemError) as exc:
            # Processes exit or change credentials while we read them
            log.debug("process_dropped", entry=entry.name, reason=str(exc))
            return None

    def _read_process(self, entry: os.DirEntry) -> ProcessRecord | None:
        """Walk one entry through the scan steps; I/O errors propagate."""
        if not entry.is_dir():
            return None
        pid = parse_pid(entry.name)
        if pid is None:
            return None
        path = Path(entry.path)

        uid = self._read_uid(path / "status")
        if self._users.is_excluded(uid):
            log.debug("process_dropped", pid=pid, reason="user filtered")
            return None

        command = _strip_newline(self._reader.read_bytes(path / "comm").decode("utf-8", "replace"))

        raw_cmdline = self._reader.read_bytes(path / "cmdline").replace(b"\0", b" ")
        if not raw_cmdline:
            # Exited process or kernel thread
            return None
        cmdline = raw_cmdline[:-1].decode("utf-8", "replace")

        if not self._filters.accept_command(command, cmdline):
            log.debug("process_dropped", pid=pid, reason="process filtered")
            return None

        return ProcessRecord(
            identity=ProcessIdentity(pid=pid, uid=uid, username=self._users.name_of(uid)),
            command=command,
            cmdline=cmdline,
            sizes=self._read_sizes(path),
        )

    def _read_uid(self, path: Path) -> int:
        """Find the real uid in a status file."""
        with self._reader.open_lines(path) as lines:
            for line in lines:
                if line.startswith(UID_PREFIX):
                    return parse_uid(line)
        raise ProcessingError(f"no uid line in {path}")

    def _read_sizes(self, path: Path) -> ProcessSizes:
        """Sum the memory maps, preferring the rollup."""
        try:
            handle = self._reader.open_lines(path / ROLLUP_FILE)
        except FileNotFoundError:
            # Kernels before 4.14 have no rollup
            handle = self._reader.open_lines(path / SMAPS_FILE)
        with handle as lines:
            return aggregate(lines)
