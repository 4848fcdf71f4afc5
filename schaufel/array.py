"""A growable array of strings with stack-like access."""

from __future__ import annotations

from collections.abc import Iterator


class Array:
    """Ordered collection of strings that grows by doubling its capacity."""

    def __init__(self, capacity: int = 1) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self._capacity = capacity or 1
        self._items: list[str] = []

    @property
    def capacity(self) -> int:
        """Number of slots reserved before the next growth step."""
        return self._capacity

    def insert(self, value: str) -> None:
        """Append a string, doubling the capacity when the array is full."""
        if len(self._items) == self._capacity:
            self._capacity *= 2
        self._items.append(str(value))

    def pop(self) -> str | None:
        """Remove and return the last string, or None when empty."""
        if not self._items:
            return None
        return self._items.pop()

    def get(self, index: int) -> str | None:
        """Return the string at ``index``, or None when out of range."""
        if 0 <= index < len(self._items):
            return self._items[index]
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"Array({self._items!r})"