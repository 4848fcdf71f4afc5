"""Per-message metadata: typed values stored under string keys."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Optional

from schaufel.htable import HTable

MAXELEM = 8


class MType(enum.Enum):
    """Kind of value a metadatum holds."""

    STRING = enum.auto()
    INT = enum.auto()
    BIGINT = enum.auto()
    FUNC = enum.auto()
    OPAQUE = enum.auto()


@dataclass
class MDatum:
    """A typed metadata value; ``key`` is set when it is inserted."""

    type: MType
    value: Any = None
    length: int = 0
    key: Optional[str] = None


def _release(datum: MDatum) -> None:
    if datum.type is MType.FUNC:
        datum.value = None


class Metadata:
    """Collection of metadata values keyed by name."""

    def __init__(self) -> None:
        self._table = HTable(key=lambda datum: datum.key, before_free=_release)

    def find(self, key: str) -> MDatum | None:
        """Return the datum stored under ``key``, or None."""
        return self._table.find(MDatum(MType.OPAQUE, key=key))

    def insert(self, key: str, datum: MDatum | None) -> MDatum | None:
        """Store ``datum`` under ``key`` and return it.

        If ``key`` was already present the old datum is replaced and
        None is returned; None is also returned for a missing datum.
        """
        if datum is None:
            return None
        datum.key = key
        if not self._table.insert(datum):
            return None
        return self._table.find(datum)

    def callback_run(self, msg: Any) -> bool:
        """Run the function stored under "callback" on ``msg``.

        True when there is no callback; False when the entry is not a function.
        """
        datum = self.find("callback")
        if datum is None:
            return True
        if datum.type is not MType.FUNC or datum.value is None:
            return False
        return bool(datum.value(msg))

    def free(self) -> None:
        """Drop every stored datum."""
        self._table.clear()

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: str) -> bool:
        return self.find(key) is not None

    def __iter__(self) -> Iterator[MDatum]:
        return iter(self._table)