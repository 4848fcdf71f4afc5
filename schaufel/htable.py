"""A chained hash table that grows and shrinks with its item count."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any, Hashable, Optional

_MIN_SIZE = 8
_MASK32 = 0xFFFFFFFF


def default_hash(key: str | bytes) -> int:
    """Jenkins one-at-a-time hash of ``key`` as a 32-bit value."""
    if isinstance(key, str):
        key = key.encode()
    hval = 0
    for byte in key:
        # bytes are added as signed chars
        hval = (hval + (byte - 256 if byte > 127 else byte)) & _MASK32
        hval = (hval + (hval << 10)) & _MASK32
        hval ^= hval >> 6
    hval = (hval + (hval << 3)) & _MASK32
    hval ^= hval >> 11
    hval = (hval + (hval << 15)) & _MASK32
    return hval


class HTable:
    """Hash table of nodes identified by the key that ``key`` extracts.

    ``hfunc`` hashes a key; ``before_free`` is called with every node
    that leaves the table, whether deleted, replaced or cleared.
    """

    def __init__(
        self,
        key: Optional[Callable[[Any], Hashable]] = None,
        hfunc: Optional[Callable[[Any], int]] = None,
        before_free: Optional[Callable[[Any], None]] = None,
    ) -> None:
        self._key = key if key is not None else (lambda node: node)
        self._hfunc = hfunc if hfunc is not None else default_hash
        self._before_free = before_free
        self._buckets: list[list[tuple[int, Any]]] = self._empty(_MIN_SIZE)
        self._count = 0

    @staticmethod
    def _empty(size: int) -> list[list[tuple[int, Any]]]:
        return [[] for _ in range(size)]

    @property
    def size(self) -> int:
        """Number of buckets currently allocated."""
        return len(self._buckets)

    def _hash(self, node: Any) -> int:
        return self._hfunc(self._key(node)) & _MASK32

    def _bucket(self, hval: int) -> list[tuple[int, Any]]:
        return self._buckets[hval & (len(self._buckets) - 1)]

    def _release(self, node: Any) -> None:
        if self._before_free is not None:
            self._before_free(node)

    def _resize(self) -> None:
        if self._count < _MIN_SIZE:
            return
        size = len(self._buckets)
        if self._count > size:
            new_size = size * 2
        elif self._count <= size // 2:
            new_size = size // 2
        else:
            return
        buckets = self._empty(new_size)
        for bucket in self._buckets:
            for hval, node in bucket:
                buckets[hval & (new_size - 1)].append((hval, node))
        self._buckets = buckets

    def insert(self, node: Any) -> bool:
        """Store ``node``; True if its key was new, False if it replaced one."""
        hval = self._hash(node)
        bucket = self._bucket(hval)
        wanted = self._key(node)
        for pos, (_, item) in enumerate(bucket):
            if self._key(item) == wanted:
                self._release(item)
                bucket[pos] = (hval, node)
                return False
        bucket.insert(0, (hval, node))
        self._count += 1
        self._resize()
        return True

    def find(self, query: Any) -> Any | None:
        """Return the stored node with the same key as ``query``, or None."""
        wanted = self._key(query)
        bucket = self._bucket(self._hash(query))
        return next((item for _, item in bucket if self._key(item) == wanted), None)

    def delete(self, query: Any) -> bool:
        """Remove the node with the same key as ``query``; False if absent."""
        wanted = self._key(query)
        bucket = self._bucket(self._hash(query))
        for pos, (_, item) in enumerate(bucket):
            if self._key(item) == wanted:
                del bucket[pos]
                self._release(item)
                self._count -= 1
                self._resize()
                return True
        return False

    def clear(self) -> None:
        """Remove every node, releasing each one."""
        buckets = self._buckets
        self._buckets = self._empty(_MIN_SIZE)
        self._count = 0
        for bucket in buckets:
            for _, node in bucket:
                self._release(node)

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Any]:
        return iter([node for bucket in self._buckets for _, node in bucket])

    def __contains__(self, query: Any) -> bool:
        return self.find(query) is not None