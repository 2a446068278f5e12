"""Shared fixtures: synthetic process tables and records."""

from pathlib import Path

import pytest

from pysmem import log as logsetup
from pysmem.models import ProcessIdentity, ProcessRecord, ProcessSizes

USERS = [("root", 0), ("daemon", 1), ("alice", 1000)]


def status_text(name: str, uid: int) -> str:
    """A minimal /proc/<pid>/status."""
    return (
        f"Name:\t{name}\n"
        "Umask:\t0022\n"
        "State:\tS (sleeping)\n"
        "Tgid:\t1\n"
        "PPid:\t0\n"
        f"Uid:\t{uid}\t{uid}\t{uid}\t{uid}\n"
        f"Gid:\t{uid}\t{uid}\t{uid}\t{uid}\n"
        "VmRSS:\t    1234 kB\n"
    )


def rollup_text(pss=0, rss=0, private_clean=0, private_dirty=0, swap=0) -> str:
    """A /proc/<pid>/smaps_rollup with sizes in kB."""
    return (
        "55d3c4a00000-7ffd2b5fe000 ---p 00000000 00:00 0                          [rollup]\n"
        f"Rss:             {rss:>8} kB\n"
        f"Pss:             {pss:>8} kB\n"
        f"Pss_Anon:        {pss:>8} kB\n"
        "Pss_File:               0 kB\n"
        "Shared_Clean:           0 kB\n"
        "Shared_Dirty:           0 kB\n"
        f"Private_Clean:   {private_clean:>8} kB\n"
        f"Private_Dirty:   {private_dirty:>8} kB\n"
        "Referenced:             0 kB\n"
        f"Swap:            {swap:>8} kB\n"
        f"SwapPss:         {swap:>8} kB\n"
        "Locked:                 0 kB\n"
    )


class ProcTree:
    """Builds a fake process table below ``root``."""

    def __init__(self, root: Path) -> None:
        """Initialize ProcTree rooted at ``root``."""
        self.root = root

    def add(
        self,
        pid,
        uid: int = 0,
        comm: str = "proc",
        cmdline: bytes = b"proc\0",
        sizes: dict | None = None,
        smaps: str | None = None,
        rollup: bool = True,
        status: str | None = None,
    ) -> Path:
        directory = self.root / str(pid)
        directory.mkdir(parents=True)
        (directory / "status").write_text(status if status is not None else status_text(comm, uid))
        (directory / "comm").write_text(comm + "\n")
        (directory / "cmdline").write_bytes(cmdline)
        text = smaps if smaps is not None else rollup_text(**(sizes or {}))
        (directory / ("smaps_rollup" if rollup else "smaps")).write_text(text)
        return directory


@pytest.fixture(autouse=True)
def debug_logging():
    """Route every log level to the (captured) stderr."""
    logsetup.configure(2)
    yield
    logsetup.configure(0)


@pytest.fixture
def proc_tree(tmp_path):
    """An empty fake process table."""
    root = tmp_path / "proc"
    root.mkdir()
    return ProcTree(root)


@pytest.fixture
def sample_tree(proc_tree):
    """pid 100 (root, initd) and pid 200 (alice, myproc --flag), plus non-process entries."""
    proc_tree.add(
        100,
        uid=0,
        comm="initd",
        cmdline=b"initd\0",
        sizes=dict(pss=100, rss=200, private_clean=40, private_dirty=20, swap=0),
    )
    proc_tree.add(
        200,
        uid=1000,
        comm="myproc",
        cmdline=b"myproc\0--flag\0",
        sizes=dict(pss=50, rss=80, private_clean=10, private_dirty=30, swap=4),
    )
    (proc_tree.root / "meminfo").write_text("MemTotal:  16000000 kB\n")
    (proc_tree.root / "sys").mkdir()
    return proc_tree


@pytest.fixture
def make_record():
    """Factory for ProcessRecord with sizes given in bytes."""

    def factory(pid=1, uid=0, username="root", cmdline="cmd", command=None, pss=0, rss=0, uss=0, swap=0):
        return ProcessRecord(
            identity=ProcessIdentity(pid=pid, uid=uid, username=username),
            command=command if command is not None else cmdline.split(" ")[0],
            cmdline=cmdline,
            sizes=ProcessSizes(pss=pss, rss=rss, uss=uss, swap=swap),
        )

    return factory


@pytest.fixture
def users():
    """(name, uid) pairs standing in for the password database."""
    return list(USERS)
