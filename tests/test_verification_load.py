"""Verification Test: Load - a large synthetic process table.

Checks that every admitted process appears exactly once and that no file
descriptors are leaked, whatever the worker count.
"""

import os
import sys

import pytest

from pysmem.filters import Filters
from pysmem.scanner import ProcessScanner
from pysmem.users import UserDirectory

NUM_PROCESSES = 1000


def open_fd_count() -> int:
    """Number of descriptors this process has open."""
    return len(os.listdir("/proc/self/fd"))


@pytest.fixture
def large_tree(proc_tree):
    """A table of many processes, every tenth without a command line."""
    for pid in range(1, NUM_PROCESSES + 1):
        proc_tree.add(
            pid,
            uid=1000 if pid % 2 else 0,
            comm=f"worker{pid}",
            cmdline=f"worker{pid}\0--id\0{pid}\0".encode(),
            sizes=dict(pss=pid, rss=2 * pid, private_clean=pid // 2, private_dirty=pid - pid // 2),
        )
    # Every tenth process is a kernel thread without a command line
    for pid in range(10, NUM_PROCESSES + 1, 10):
        (proc_tree.root / str(pid) / "cmdline").write_bytes(b"")
    return proc_tree


class TestLoad:
    """Load verification suite tests."""

    @pytest.mark.parametrize("workers", [1, 4, 32])
    def test_every_process_once(self, large_tree, users, workers):
        """Test every admitted process appears exactly once."""
        filters = Filters()
        scanner = ProcessScanner(UserDirectory.build(filters, users), filters, workers=workers)

        records = scanner.scan(large_tree.root)

        expected = {pid for pid in range(1, NUM_PROCESSES + 1) if pid % 10}
        assert sorted(record.pid for record in records) == sorted(expected)
        for record in records:
            assert record.sizes.pss == record.pid * 1024
            assert record.sizes.uss == record.pid * 1024

    def test_user_filter_halves_the_result(self, large_tree, users):
        """Test a user filter keeps only that user's processes."""
        filters = Filters.compile(user="^alice$")
        scanner = ProcessScanner(UserDirectory.build(filters, users), filters, workers=8)

        records = scanner.scan(large_tree.root)

        assert {record.uid for record in records} == {1000}
        assert len(records) == len([pid for pid in range(1, NUM_PROCESSES + 1, 2) if pid % 10])

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="needs /proc/self/fd")
    def test_no_descriptor_leak(self, large_tree, users):
        """Test repeated scans do not leak descriptors."""
        filters = Filters()
        scanner = ProcessScanner(UserDirectory.build(filters, users), filters, workers=8)
        scanner.scan(large_tree.root)

        before = open_fd_count()
        for _ in range(3):
            scanner.scan(large_tree.root)
        assert open_fd_count() <= before
