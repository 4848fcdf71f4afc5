"""Assembling, merging and validating the program configuration.

A configuration is a tree of dicts (groups) and lists as produced by
:mod:`schaufel.settings`.
"""

from __future__ import annotations

import enum
import re
import stat
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

from schaufel.logger import logger_validate
from schaufel.queue import queue_validate
from schaufel.settings import ConfigError, Options, load, lookup
from schaufel.validator import validator_init

PATH_SEPARATOR = "/"
MAX_PATH_LENGTH = 512
MAX_IDENT_LENGTH = 510
DEFAULT_FILE_MODE = 0o640

_SPECIAL_BITS = stat.S_ISVTX | stat.S_ISGID | stat.S_ISUID

_LOGGER_SPEC = re.compile(
    r"^(STDOUT\Z|STDERR\Z|NULL\Z)"
    r"|^(FILE):([0-7]{3,4}:)?(.+\Z)"
    r"|^(SYSLOG(:[^:]+)?(:[A-Za-z0-9]+\Z)|SYSLOG\Z)",
    re.DOTALL,
)

_MODULES = {
    "d": "dummy",
    "r": "redis",
    "k": "kafka",
    "p": "postgres",
    "f": "file",
}

# option fields copied into a consumer/producer group, in order
_ENDPOINT_FIELDS = ("broker", "host", "groupid", "topic", "file", "pipeline")


class ThreadKind(enum.IntEnum):
    """Which side of the pipeline a thread list describes."""

    CONSUMER = 1
    PRODUCER = 2

    @property
    def section(self) -> str:
        """Name of the configuration list holding this kind of thread."""
        return "consumers" if self is ThreadKind.CONSUMER else "producers"


def _complain(message: str) -> None:
    print(message, file=sys.stderr)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _add_member(group: dict, name: str, value: Any) -> Any:
    if name in group:
        raise ConfigError(f"setting {name!r} already exists")
    group[name] = value
    return value


def logger_parse(spec: Optional[str], logger: Optional[dict]) -> None:
    """Fill the ``logger`` group from a command-line logger specification.

    Accepted forms are ``STDOUT``, ``STDERR``, ``NULL``,
    ``FILE:[mode:]path``, ``SYSLOG[:ident][:facility]``; anything else
    is taken as a file name.
    """
    if spec is None or logger is None:
        return

    match = _LOGGER_SPEC.match(spec)
    if match is None:
        _add_member(logger, "type", "file")
        _add_member(logger, "file", spec)
        _add_member(logger, "mode", DEFAULT_FILE_MODE)
        return

    if match.group(1) is not None:
        _add_member(logger, "type", match.group(1).lower())
        return

    if match.group(2) is not None:
        _add_member(logger, "type", "file")
        mode_text = match.group(3)
        if mode_text is not None:
            mode = int(mode_text[:-1], 8)
            if mode & _SPECIAL_BITS:
                raise ConfigError(f"cowardly refusing to create file mode {mode:04o}")
            _add_member(logger, "mode", mode)
        _add_member(logger, "file", match.group(4))
        return

    _add_member(logger, "type", "syslog")
    if match.group(7):
        _add_member(logger, "facility", match.group(7)[1:])
    if match.group(6):
        _add_member(logger, "ident", match.group(6)[1:][:MAX_IDENT_LENGTH])


def read_config(path: str | Path) -> dict:
    """Read the configuration file at ``path``."""
    try:
        return load(path)
    except ConfigError as exc:
        location = f"{path}: line {exc.line}: " if exc.line else f"{path}: "
        raise ConfigError(f"failed to read config: {location}{exc.message}", exc.line) from exc


def module_to_string(module: str) -> str:
    """Name of the producer/consumer module selected by its letter."""
    key = module[:1] if isinstance(module, str) else ""
    try:
        return _MODULES[key]
    except KeyError:
        raise ValueError(f"unknown producer/consumer {module!r}") from None


def _endpoint(options: Options, module: str, threads: int, prefix: str) -> dict:
    group: dict = {"type": module_to_string(module), "threads": threads}
    for name in _ENDPOINT_FIELDS:
        value = getattr(options, f"{prefix}_{name}")
        if value:
            _add_member(group, name, value)
    return group


def config_merge(config: dict, options: Options) -> dict:
    """Merge command-line ``options`` into ``config`` and return it.

    When ``options.config`` names a file it is read first; command-line
    settings then take precedence over it.
    """
    if options.config:
        loaded = read_config(options.config)
        config.clear()
        config.update(loaded)

    if options.logger:
        config["logger"] = {}
        logger_parse(options.logger, config["logger"])

    if "logger" not in config:
        config["logger"] = {"type": "stderr"}

    if options.input:
        config["consumers"] = [
            _endpoint(options, options.input, options.consumer_threads, "in")
        ]

    if options.output:
        config["producers"] = [
            _endpoint(options, options.output, options.producer_threads, "out")
        ]

    return config


def get_thread_count(config: dict, kind: ThreadKind) -> int:
    """Total number of threads configured for consumers or producers."""
    entries = lookup(config, kind.section)
    if not isinstance(entries, list):
        return 0
    total = 0
    for entry in entries:
        threads = lookup(entry, "threads")
        if _is_int(threads):
            total += threads
    return total


def _thread_validate(config: dict, kind: ThreadKind) -> bool:
    section = kind.section
    entries = config.get(section)
    if entries is None:
        _complain(f"Need a {section} list")
        return False
    if not isinstance(entries, list):
        _complain(f"{section} needs to be a list")
        return False
    if not entries:
        _complain(f"Need at least one {section} item!")
        return False

    valid = True
    for index, child in enumerate(entries):
        threads = lookup(child, "threads")
        if not _is_int(threads) or threads <= 0:
            _complain(f"{section}: [{index}] need threads")
            valid = False
        type_name = lookup(child, "type")
        if not isinstance(type_name, str):
            _complain(f"{section}: [{index}] needs a type")
            valid = False

        if not isinstance(child, dict):
            _complain(f"{section}: [{index}] needs to be a group")
            return False
        hooks = child.setdefault("hooks", [])
        if not isinstance(hooks, list):
            _complain(f"{section}: [{index}] hooklist must be a list!")
            return False

        validator = validator_init(type_name) if isinstance(type_name, str) else None
        if validator is None:
            _complain(f"Type {type_name} has no validator!")
            return False
        check = (
            validator.validate_consumer
            if kind is ThreadKind.CONSUMER
            else validator.validate_producer
        )
        if not check(child):
            return False
    return valid


def config_validate(config: Any) -> bool:
    """Check logger, queue, consumers and producers; fills in defaults."""
    if not isinstance(config, dict):
        _complain("configuration needs to be a group")
        return False

    logger = config.get("logger")
    if logger is None:
        _complain("Need a logger defined")
        return False

    valid = True
    if not logger_validate(logger):
        valid = False

    queue = config.setdefault("queue", {})
    if not queue_validate(queue):
        valid = False

    if not _thread_validate(config, ThreadKind.CONSUMER):
        valid = False
    if not _thread_validate(config, ThreadKind.PRODUCER):
        valid = False
    return valid


def config_group_apply(
    options: Any, func: Callable[[Optional[str], Optional[str], Any], None], arg: Any = None
) -> None:
    """Call ``func(key, value, arg)`` for each setting of a group.

    Values that are not strings are passed as None.
    """
    if not options:
        return
    if isinstance(options, dict):
        items = list(options.items())
    else:
        items = [(None, value) for value in options]
    for key, value in items:
        func(key, value if isinstance(value, str) else None, arg)


def _walk_path(parent: dict, path: str) -> tuple[dict, str]:
    if len(path) >= MAX_PATH_LENGTH:
        raise ValueError(f"path longer than {MAX_PATH_LENGTH - 1} characters")
    *groups, leaf = path.split(PATH_SEPARATOR)
    current = parent
    for name in groups:
        found = current.get(name)
        if found is None:
            found = current[name] = {}
        elif not isinstance(found, dict):
            raise ConfigError(f"`{name}` is not a settings group")
        current = found
    return current, leaf


def config_create_path(parent: dict, path: str, kind: type = dict) -> Any:
    """Create the groups along ``a/b/leaf`` and a new ``kind()`` leaf.

    Returns the new leaf value, or None when the leaf already exists.
    """
    group, leaf = _walk_path(parent, path)
    if leaf in group:
        return None
    value = kind()
    group[leaf] = value
    return value


def config_set_default_string(parent: dict, path: str, value: str) -> None:
    """Set the string at ``path`` unless it is already set."""
    group, leaf = _walk_path(parent, path)
    if leaf not in group:
        group[leaf] = value