"""A bounded, thread-safe message queue partitioned by xmark."""

from __future__ import annotations

import itertools
import sys
import threading
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Optional

from schaufel.metadata import Metadata
from schaufel.settings import ConfigError, is_list

MAX_QUEUE_SIZE = 100000
DEFAULT_TIMEOUT = 10.0


class BadMessage(Exception):
    """A hook rejected a message."""


@dataclass
class Message:
    """A message payload with its xmark and metadata."""

    data: Any = None
    xmark: int = 0
    metadata: Optional[Metadata] = None

    @property
    def length(self) -> int:
        """Length of the payload, 0 when there is none."""
        return 0 if self.data is None else len(self.data)


Hook = Callable[[Message], bool]


def _run_hooks(hooks: Iterable[Hook], msg: Message) -> bool:
    return all(hook(msg) for hook in hooks)


class Queue:
    """FIFO queue whose consumers take messages of one xmark at a time.

    ``postadd`` hooks run on every message before it is queued and
    ``preget`` hooks on every message handed out; a hook returning
    False rejects the message with BadMessage.
    """

    def __init__(
        self,
        postadd: Iterable[Hook] = (),
        preget: Iterable[Hook] = (),
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.timeout = timeout
        self._postadd = list(postadd)
        self._preget = list(preget)
        self._lock = threading.Lock()
        self._arrived = threading.Condition(self._lock)
        self._departed = threading.Condition(self._lock)
        self._messages: dict[int, Message] = {}
        self._marks: dict[int, deque[int]] = {}
        self._sequence = itertools.count()
        self._added = 0
        self._delivered = 0

    def add(self, data: Any, xmark: int = 0, metadata: Optional[Metadata] = None) -> None:
        """Queue ``data`` under ``xmark``, blocking while the queue is full."""
        msg = Message(data, xmark, metadata)
        if not _run_hooks(self._postadd, msg):
            raise BadMessage("message rejected by postadd hook")
        with self._lock:
            # hooks may have changed the xmark
            self._departed.wait_for(lambda: len(self._messages) <= MAX_QUEUE_SIZE)
            key = next(self._sequence)
            self._messages[key] = msg
            self._marks.setdefault(msg.xmark, deque()).append(key)
            self._added += 1
            self._arrived.notify_all()

    def get(self, msg: Message) -> Message:
        """Fill ``msg`` with the oldest message of its xmark and return it.

        Raises TimeoutError when none arrives within the queue's timeout.
        """
        if msg is None:
            raise ValueError("need a message to fill")
        xmark = msg.xmark
        with self._lock:
            if not self._arrived.wait_for(
                lambda: bool(self._marks.get(xmark)), timeout=self.timeout
            ):
                raise TimeoutError(f"no message with xmark {xmark} arrived")
            pending = self._marks[xmark]
            entry = self._messages.pop(pending.popleft())
            if not pending:
                del self._marks[xmark]
            self._delivered += 1
            self._departed.notify_all()

        msg.data = entry.data
        msg.metadata = entry.metadata
        if not _run_hooks(self._preget, msg):
            raise BadMessage("message rejected by preget hook")
        return msg

    def length(self) -> int:
        """Number of messages waiting."""
        with self._lock:
            return len(self._messages)

    def added(self) -> int:
        """Messages added since the last call."""
        with self._lock:
            count, self._added = self._added, 0
            return count

    def delivered(self) -> int:
        """Messages delivered since the last call."""
        with self._lock:
            count, self._delivered = self._delivered, 0
            return count

    def close(self) -> None:
        """Drop every waiting message."""
        with self._lock:
            self._messages.clear()
            self._marks.clear()
            self._departed.notify_all()

    def __enter__(self) -> "Queue":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def queue_validate(config: Any) -> bool:
    """Check a queue group, adding empty ``postadd``/``preget`` lists."""
    if not isinstance(config, dict):
        return False
    valid = True
    for name in ("postadd", "preget"):
        child = config.setdefault(name, [])
        try:
            is_list(child, f"{name} must be a list")
        except ConfigError as exc:
            print(exc, file=sys.stderr)
            valid = False
    return valid