"""Snapshot of the system user database."""

import pwd
from collections.abc import Iterable, Mapping

import structlog

from pysmem.errors import FatalError
from pysmem.filters import Filters

log = structlog.get_logger()


class UserDirectory:
    """
    Maps uids to user names, with the user filter already applied.

    Built once before the scan and only read afterwards, so it is safe to
    share between scanner threads.
    """

    def __init__(self, names: Mapping[int, str | None], accept_unknown: bool = True) -> None:
        """
        Args:
            names: uid -> user name, or None when the user is filtered out.
            accept_unknown: whether a uid missing from ``names`` passes the
                user filter (it resolves to an empty name).
        """
        self._names = dict(names)
        self._accept_unknown = accept_unknown

    @classmethod
    def build(
        cls,
        filters: Filters,
        entries: Iterable[tuple[str, int]] | None = None,
    ) -> "UserDirectory":
        """
        Enumerate the user database once and apply the user filter.

        Args:
            filters: The run's filters; only the user pattern is consulted.
            entries: (name, uid) pairs. Defaults to the system password database.

        Raises:
            FatalError: if the password database cannot be read.
        """
        if entries is None:
            try:
                entries = [(entry.pw_name, entry.pw_uid) for entry in pwd.getpwall()]
            except OSError as exc:
                raise FatalError(f"cannot read user database: {exc}") from exc

        names: dict[int, str | None] = {}
        for name, uid in entries:
            # First entry wins for duplicated uids, as getpwuid() would return it.
            if uid in names:
                continue
            names[uid] = name if filters.accept_user(name) else None

        log.debug("user_directory_built", users=len(names))
        return cls(names, accept_unknown=filters.accept_user(""))

    def __len__(self) -> int:
        """Number of distinct uids."""
        return len(self._names)

    def is_excluded(self, uid: int) -> bool:
        """True if processes owned by ``uid`` must be dropped."""
        if uid in self._names:
            return self._names[uid] is None
        return not self._accept_unknown

    def name_of(self, uid: int) -> str:
        """The user name for ``uid``, or an empty string when unknown or excluded."""
        return self._names.get(uid) or ""
