# schaufel

Building blocks for moving messages from consumers to producers through an
in-process queue.

## Modules

- `schaufel.queue` — `Queue`, a thread-safe FIFO of `Message` objects
  partitioned by an integer *xmark*. `Queue.get(msg)` fills `msg` with the
  oldest message of `msg.xmark` and raises `TimeoutError` when none arrives
  within `Queue.timeout` seconds (10 by default). `Queue.add` blocks while the
  queue holds more than `MAX_QUEUE_SIZE` messages. Hooks are plain callables
  taking a `Message` and returning a bool: `postadd` hooks run before a
  message is queued, `preget` hooks before it is handed out; a hook returning
  False raises `BadMessage`. `Queue.added()` and `Queue.delivered()` return
  counts since their last call; `Queue.length()` the number waiting.
  `queue_validate` checks a queue configuration group.
- `schaufel.metadata` — `Metadata`, typed `MDatum` values (`MType`) stored
  under string keys. `Metadata.callback_run(msg)` runs the function stored
  under `"callback"`.
- `schaufel.redis_io` — `RedisProducer` (LPUSH onto a list, batched when
  `pipeline` is set) and `RedisConsumer` (BLPOP with a one-second timeout,
  batched when `pipeline` is set; `consume` returns False when nothing was
  received). Both take a configuration group with `host` (`host:port`, or a
  unix socket path) and `topic`. `redis_validator` checks such a group.
- `schaufel.validator` — `validator_init(kind)` returns the `Validator` for a
  consumer/producer type, matched on its first letter; only `redis` is built
  in, other types are added with `register_validator`.
- `schaufel.config` — `config_validate`, `config_merge` (folds an `Options`
  into a configuration), `logger_parse`, `read_config`, `get_thread_count`
  (with `ThreadKind`), `module_to_string`, `config_group_apply`,
  `config_create_path` and `config_set_default_string`.
- `schaufel.settings` — parses configuration text (`parse`, `load`) into
  dicts, lists and tuples, and looks values up by path (`lookup`,
  `lookup_string`, `lookup_int`, `get_member`, `is_list`), raising
  `ConfigError`. `Options` holds command-line choices.
- `schaufel.logger` — a process-wide logger (`logger_validate`,
  `logger_init`, `logger_log`, `logger_free`, `get_logger_state`) writing to
  a file, stdout, stderr, syslog or nowhere.
- Utilities: `schaufel.fnv` (FNV-1a 32-bit hashing and xor-folding),
  `schaufel.htable` (`HTable`, a chained hash table, and `default_hash`),
  `schaufel.bintree` (`BinTree`, `Node`, `int_compare`), `schaufel.array`
  (`Array`) and `schaufel.helper` (`parse_connstring`,
  `parse_hostinfo_master`, `parse_hostinfo_replica`, `number_length`,
  `strlwr`, `AtomicFlag`).

## Installing

```
pip install .
```

Running the tests needs the `test` extra:

```
pip install .[test]
pytest
```

## Examples

```python
from schaufel.queue import Message, Queue

q = Queue()
q.add(b"moep", 1, None)

msg = Message(xmark=1)
q.get(msg)
print(msg.data)   # b"moep"
q.close()
```

Hashing a key and folding it to 16 bits:

```python
from schaufel.fnv import fnv_init, fold_init

h = fnv_init("fnv32a_str")(b"hurz")   # 0x60bdfa92
print(hex(fold_init("fold16")(h)))    # 0x9a2f
```

Parsing a logger specification into a configuration group:

```python
from schaufel.config import logger_parse

logger = {}
logger_parse("FILE:0644:/var/log/schaufel.log", logger)
# {'type': 'file', 'mode': 420, 'file': '/var/log/schaufel.log'}
```

## What this package does not do

- It has no command to run: there is no program that reads a configuration
  and starts consumer and producer threads. The pieces above have to be
  wired together by the caller.
- Redis is the only transport included. There are no Kafka, PostgreSQL,
  file or dummy consumers and producers, and `validator_init` returns None
  for those types unless a validator is registered with
  `register_validator`; `config_validate` then reports the type as having
  no validator.
- No ready-made hooks are included; queue hooks are callables the caller
  supplies.