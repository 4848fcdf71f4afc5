"""Small helpers: connection strings, host lists, flags and text."""

from __future__ import annotations

import re
import string
import threading

_ATOI = re.compile(r"\s*([+-]?\d+)")
_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _tokens(text: str, delim: str) -> list[str]:
    """Split ``text`` on ``delim``, dropping empty pieces."""
    return [part for part in text.split(delim) if part]


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def number_length(number: int) -> int:
    """Number of characters needed to print ``number`` in decimal."""
    return len(str(abs(number))) + (1 if number < 0 else 0)


def parse_connstring(conninfo: str) -> tuple[str, int | None]:
    """Split ``host:port`` into host and port.

    The port is None when none is given (a socket path, for instance).
    A port that does not read as a non-zero number raises ValueError.
    """
    parts = _tokens(conninfo, ":")
    if not parts:
        raise ValueError(f"no host in connection string {conninfo!r}")
    hostname = parts[0]
    if len(parts) == 1:
        return hostname, None
    port = _atoi(parts[1])
    if port == 0:
        raise ValueError(f"invalid port in connection string {conninfo!r}")
    return hostname, port


def _hostinfo_part(hostinfo: str, index: int) -> list[str]:
    groups = _tokens(hostinfo, ";")
    if index >= len(groups):
        return []
    return _tokens(groups[index], ",")


def parse_hostinfo_master(hostinfo: str) -> list[str]:
    """Hosts listed before the ';' in a ``masters;replicas`` string."""
    return _hostinfo_part(hostinfo, 0)


def parse_hostinfo_replica(hostinfo: str) -> list[str]:
    """Hosts listed after the ';' in a ``masters;replicas`` string."""
    return _hostinfo_part(hostinfo, 1)


def strlwr(text: str) -> str:
    """Lower-case the ASCII letters of ``text``."""
    return text.translate(_LOWER)


class AtomicFlag:
    """A thread-safe boolean flag."""

    def __init__(self, value: bool = False) -> None:
        self._value = bool(value)
        self._lock = threading.Lock()

    def get(self) -> bool:
        """Current value of the flag."""
        with self._lock:
            return self._value

    def set(self, value: bool) -> bool:
        """Flip the flag to ``value``; True only if it held the opposite."""
        value = bool(value)
        with self._lock:
            if self._value == value:
                return False
            self._value = value
            return True