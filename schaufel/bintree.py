"""An ordered tree of nodes keyed by an integer element."""

from __future__ import annotations

import bisect
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Optional


@dataclass(eq=False)
class Node:
    """A tree entry: its key ``elem``, a payload and an optional release hook."""

    elem: int
    data: Any = None
    free: Optional[Callable[["Node"], None]] = None


def int_compare(a: Node, b: Node) -> int:
    """Order two nodes by their integer element (-1, 0 or 1)."""
    if a.elem < b.elem:
        return -1
    if a.elem > b.elem:
        return 1
    return 0


class BinTree:
    """Set of nodes ordered by a comparison function."""

    def __init__(self, compare: Callable[[Node, Node], int] = int_compare) -> None:
        self._compare = compare
        self._key = cmp_to_key(compare)
        self._nodes: list[Node] = []

    def _locate(self, node: Node) -> tuple[int, Node | None]:
        pos = bisect.bisect_left(self._nodes, self._key(node), key=self._key)
        if pos < len(self._nodes) and self._compare(self._nodes[pos], node) == 0:
            return pos, self._nodes[pos]
        return pos, None

    def search(self, node: Node) -> Node:
        """Return the node equal to ``node``, inserting ``node`` if absent."""
        pos, found = self._locate(node)
        if found is not None:
            return found
        self._nodes.insert(pos, node)
        return node

    def find(self, elem: int) -> Node | None:
        """Return the node whose element equals ``elem``, or None."""
        _, found = self._locate(Node(elem))
        return found

    def destroy(self) -> None:
        """Remove every node, running each node's release hook."""
        nodes, self._nodes = self._nodes, []
        for node in nodes:
            if node.free is not None:
                node.free(node)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes))