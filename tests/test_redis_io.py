import pytest
import redis

from schaufel.queue import Message
from schaufel.redis_io import (
    RedisConsumer,
    RedisProducer,
    redis_validator,
    redis_validator_init,
)


class FakeServer:
    def __init__(self):
        self.lists = {}
        self.clients = []
        self.executions = 0


class FakePipeline:
    def __init__(self, client):
        self._client = client
        self._commands = []

    def lpush(self, key, *values):
        self._commands.append(("lpush", (key, *values), {}))
        return self

    def blpop(self, keys, timeout=0):
        self._commands.append(("blpop", (keys,), {"timeout": timeout}))
        return self

    def execute(self):
        commands, self._commands = self._commands, []
        self._client.server.executions += 1
        return [getattr(self._client, name)(*args, **kw) for name, args, kw in commands]

    def reset(self):
        self._commands = []


def _as_bytes(value):
    return value.encode() if isinstance(value, str) else bytes(value)


@pytest.fixture
def server(monkeypatch):
    srv = FakeServer()

    class FakeRedis:
        def __init__(self, **kwargs):
            self.kwargs = kwargs
            self.server = srv
            self.closed = False
            srv.clients.append(self)

        def ping(self):
            if self.kwargs.get("host") == "down":
                raise redis.ConnectionError("refused")
            return True

        def lpush(self, key, *values):
            items = self.server.lists.setdefault(key, [])
            for value in values:
                items.insert(0, _as_bytes(value))
            return len(items)

        def blpop(self, keys, timeout=0):
            for key in keys:
                items = self.server.lists.get(key)
                if items:
                    return (key.encode(), items.pop(0))
            return None

        def pipeline(self, transaction=True):
            return FakePipeline(self)

        def close(self):
            self.closed = True

    monkeypatch.setattr(redis, "Redis", FakeRedis)
    return srv


def _consume(config):
    consumer = RedisConsumer(config)
    msg = Message()
    return consumer.consume(msg), msg.data


def test_producer_pushes_without_pipeline(server):
    config = {"host": "localhost:6379", "topic": "events"}
    producer = RedisProducer(config)
    producer.produce(Message(data=b"hello"))
    assert server.lists["events"] == [b"hello"]
    assert server.executions == 0
    assert _consume(config) == (True, b"hello")


def test_producer_pushes_to_head(server):
    config = {"host": "localhost:6379", "topic": "events"}
    producer = RedisProducer(config)
    producer.produce(Message(data=b"first"))
    producer.produce(Message(data="second"))
    assert server.lists["events"] == [b"second", b"first"]
    assert _consume(config) == (True, b"second")
    assert _consume(config) == (True, b"first")


def test_producer_pipeline_flushes_when_full(server):
    producer = RedisProducer({"host": "localhost:6379", "topic": "t", "pipeline": 3})
    producer.produce(Message(data=b"a"))
    producer.produce(Message(data=b"b"))
    assert "t" not in server.lists
    producer.produce(Message(data=b"c"))
    assert server.lists["t"] == [b"c", b"b", b"a"]
    assert server.executions == 1
    assert _consume({"host": "localhost:6379", "topic": "t"}) == (True, b"c")


def test_producer_close_flushes_pending(server):
    with RedisProducer({"host": "localhost:6379", "topic": "t", "pipeline": 5}) as producer:
        producer.produce(Message(data=b"only"))
        assert "t" not in server.lists
    assert server.lists["t"] == [b"only"]
    assert server.clients[0].closed is True
    assert _consume({"host": "localhost:6379", "topic": "t"}) == (True, b"only")


def test_tcp_connection_arguments(server):
    config = {"host": "localhost:7432", "topic": "t"}
    RedisProducer(config).produce(Message(data=b"tcp"))
    kwargs = server.clients[0].kwargs
    assert kwargs["host"] == "localhost"
    assert kwargs["port"] == 7432
    assert _consume(config) == (True, b"tcp")


def test_unix_socket_connection(server):
    server.lists["t"] = [b"sock"]
    consumer = RedisConsumer({"host": "/tmp/123.sock", "topic": "t"})
    assert server.clients[0].kwargs["unix_socket_path"] == "/tmp/123.sock"
    msg = Message()
    assert consumer.consume(msg) is True
    assert msg.data == b"sock"


def test_invalid_port_raises(server):
    with pytest.raises(ValueError):
        RedisProducer({"host": "localhost:moep", "topic": "t"})


def test_failed_connection_raises(server):
    with pytest.raises(ConnectionError):
        RedisConsumer({"host": "down:6379", "topic": "t"})


def test_consumer_without_pipeline(server):
    server.lists["q"] = [b"x"]
    consumer = RedisConsumer({"host": "localhost:6379", "topic": "q"})
    msg = Message()
    assert consumer.consume(msg) is True
    assert msg.data == b"x"
    empty = Message(data=b"kept")
    assert consumer.consume(empty) is False
    assert empty.data == b"kept"


def test_consumer_pipeline_delivers_in_order(server):
    server.lists["q"] = [b"1", b"2", b"3"]
    consumer = RedisConsumer({"host": "localhost:6379", "topic": "q", "pipeline": 2})
    msg = Message()
    assert consumer.consume(msg) is False
    assert msg.data is None
    received = []
    for _ in range(3):
        assert consumer.consume(msg) is True
        received.append(msg.data)
    assert received == [b"1", b"2", b"3"]


def test_consumer_roundtrip_with_producer(server):
    config = {"host": "localhost:6379", "topic": "rt"}
    producer = RedisProducer(config)
    consumer = RedisConsumer(config)
    producer.produce(Message(data=b"payload"))
    msg = Message()
    assert consumer.consume(msg) is True
    assert msg.data == b"payload"
    assert server.lists["rt"] == []


def test_validator_requires_host_and_topic():
    assert redis_validator({"host": "localhost:6379", "topic": "t"}) is True
    assert redis_validator({"topic": "t"}) is False
    assert redis_validator({"host": "localhost:6379"}) is False
    assert redis_validator({"host": 5, "topic": "t"}) is False


def test_validator_init_checks_both_sides():
    validator = redis_validator_init()
    good = {"host": "localhost:6379", "topic": "t"}
    assert validator.validate_consumer(good) is True
    assert validator.validate_producer(good) is True
    assert validator.validate_producer({}) is False