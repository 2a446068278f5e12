"""Process and user filters."""

import re
from dataclasses import dataclass

from pysmem.errors import FatalError


def _compile(pattern: str | None, what: str) -> re.Pattern[str] | None:
    """Compile ``pattern``, or None if it is absent."""
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise FatalError(f"invalid {what} filter {pattern!r}: {exc}") from exc


@dataclass(slots=True, frozen=True)
class Filters:
    """
    Compiled process and user patterns.

    A missing pattern accepts everything. Patterns are searched for anywhere
    in the text, not anchored.
    """

    process: re.Pattern[str] | None = None
    user: re.Pattern[str] | None = None

    @classmethod
    def compile(cls, process: str | None = None, user: str | None = None) -> "Filters":
        """
        Build filters from pattern strings.

        Raises:
            FatalError: if either pattern is not a valid regular expression.
        """
        return cls(process=_compile(process, "process"), user=_compile(user, "user"))

    def accept_process(self, text: str) -> bool:
        """True if no process pattern is set or ``text`` matches it."""
        return self.process is None or self.process.search(text) is not None

    def accept_user(self, text: str) -> bool:
        """True if no user pattern is set or ``text`` matches it."""
        return self.user is None or self.user.search(text) is not None

    def accept_command(self, command: str, cmdline: str) -> bool:
        """True if either the short command name or the full command line matches."""
        return self.accept_process(command) or self.accept_process(cmdline)
