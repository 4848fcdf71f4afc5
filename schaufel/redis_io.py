"""Moving messages in and out of a Redis list."""

from __future__ import annotations

import sys
from collections import deque
from typing import Any, Optional

import redis

from schaufel.helper import parse_connstring
from schaufel.queue import Message
from schaufel.settings import ConfigError, lookup, lookup_string
from schaufel.validator import Validator

CONNECT_TIMEOUT = 1.5
BLPOP_TIMEOUT = 1


def _pipeline_size(config: Any) -> int:
    value = lookup(config, "pipeline")
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return 0


def _connect(host: str) -> redis.Redis:
    """Connect to ``host:port``, or to a unix socket when no port is given."""
    hostname, port = parse_connstring(host)
    if port is None:
        client = redis.Redis(
            unix_socket_path=hostname, socket_connect_timeout=CONNECT_TIMEOUT
        )
    else:
        client = redis.Redis(
            host=hostname, port=port, socket_connect_timeout=CONNECT_TIMEOUT
        )
    try:
        client.ping()
    except redis.RedisError as exc:
        raise ConnectionError(f"redis connection failed: {exc}") from exc
    return client


class _RedisEndpoint:
    def __init__(self, config: Any) -> None:
        host = lookup_string(config, "host", "redis: need host!")
        self.topic = lookup_string(config, "topic", "redis: need a topic!")
        self.pipe_max = _pipeline_size(config)
        self._client = _connect(host)
        self._pipe = self._client.pipeline(transaction=False) if self.pipe_max else None
        self._pipe_cur = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()


class RedisProducer(_RedisEndpoint):
    """Pushes message payloads onto the head of a Redis list."""

    def __init__(self, config: Any) -> None:
        super().__init__(config)

    def _flush(self, lazy: bool) -> int:
        if self._pipe_cur == 0:
            return 0
        if lazy and self._pipe_cur < self.pipe_max:
            return -1
        count = self._pipe_cur
        self._pipe.execute()
        self._pipe_cur = 0
        return count

    def produce(self, msg: Message) -> None:
        """LPUSH the payload of ``msg``, batching when pipelining is on."""
        data = msg.data if msg.data is not None else b""
        if self._pipe is None:
            self._client.lpush(self.topic, data)
            return
        self._pipe.lpush(self.topic, data)
        self._pipe_cur += 1
        self._flush(lazy=True)

    def close(self) -> None:
        """Send any pipelined pushes, then disconnect."""
        if self._pipe is not None:
            self._flush(lazy=False)
        super().close()


class RedisConsumer(_RedisEndpoint):
    """Pops message payloads from the head of a Redis list."""

    def __init__(self, config: Any) -> None:
        super().__init__(config)
        self._pipe_full = False
        self._replies: deque = deque()

    @staticmethod
    def _handle_reply(reply: Optional[Any], msg: Message) -> bool:
        if reply is not None and len(reply) == 2:
            msg.data = bytes(reply[1])
            return True
        return False

    def consume(self, msg: Message) -> bool:
        """BLPOP one payload into ``msg``; False when nothing was received."""
        if self._pipe is None:
            reply = self._client.blpop([self.topic], timeout=BLPOP_TIMEOUT)
            return self._handle_reply(reply, msg)

        if self._pipe_cur < self.pipe_max:
            self._pipe.blpop([self.topic], timeout=BLPOP_TIMEOUT)
            self._pipe_cur += 1
        if self._pipe_cur >= self.pipe_max:
            self._pipe_full = True
        if not self._pipe_full:
            return False

        if not self._replies:
            self._replies.extend(self._pipe.execute())
        reply = self._replies.popleft()
        self._pipe_cur -= 1
        if self._pipe_cur == 0:
            self._pipe_full = False
        return self._handle_reply(reply, msg)

    def close(self) -> None:
        """Disconnect; replies still pending are dropped."""
        if self._pipe is not None:
            self._pipe.reset()
        self._replies.clear()
        super().close()


def redis_validator(config: Any) -> bool:
    """True when a redis producer or consumer group names a host and a topic."""
    try:
        lookup_string(config, "host", "redis: need host!")
        lookup_string(config, "topic", "redis: need a topic!")
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return False
    return True


def redis_validator_init() -> Validator:
    """Validator for redis producers and consumers."""
    return Validator(validate_consumer=redis_validator, validate_producer=redis_validator)