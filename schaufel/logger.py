"""Process-wide log output to a file, a standard stream, syslog or nowhere."""

from __future__ import annotations

import enum
import os
import stat
import sys
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

from schaufel.helper import AtomicFlag, strlwr

LOG_BUFFER_SIZE = 4096
DEFAULT_MODE = 0o640
DEFAULT_FACILITY = "daemon"
DEFAULT_IDENT = "schaufel"

_SPECIAL_BITS = stat.S_ISVTX | stat.S_ISGID | stat.S_ISUID
_STREAM_TYPES = ("stdout", "stderr", "null")

# syslog facility names and their facility numbers
FACILITIES: dict[str, int] = {
    "auth": 4,
    "authpriv": 10,
    "cron": 9,
    "daemon": 3,
    "ftp": 11,
    "kern": 0,
    "lpr": 6,
    "mail": 2,
    "mark": 24,
    "news": 7,
    "security": 4,
    "syslog": 5,
    "user": 1,
    "uucp": 8,
    **{f"local{n}": 16 + n for n in range(8)},
}


class LogLevel(enum.IntEnum):
    """Severity of a log message."""

    FATAL = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4


@dataclass
class _Sink:
    write: Callable[[str], None]
    close: Optional[Callable[[], None]] = None
    timestamp: bool = True


class _Current:
    sink: Optional[_Sink] = None


_current = _Current()
_state = AtomicFlag(False)
_lock = threading.Lock()


def _complain(message: str) -> None:
    print(message, file=sys.stderr)


def _write_stream(stream: Any, text: str) -> None:
    stream.write(text)
    stream.flush()


def _write_stderr(text: str) -> None:
    _write_stream(sys.stderr, text)


def _write_stdout(text: str) -> None:
    _write_stream(sys.stdout, text)


def _discard(text: str) -> None:
    del text


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_file(config: dict) -> bool:
    mode = config.get("mode", DEFAULT_MODE)
    if not _is_int(mode):
        mode = DEFAULT_MODE
    if mode & _SPECIAL_BITS:
        _complain(f"logger: cowardly refusing to create file mode {mode:04o}")
        return False
    if mode > 0o7777:
        _complain(f"logger: illegal mode: {mode:o}")
        return False
    if not isinstance(config.get("file"), str):
        _complain("logger: missing configuration for type: file")
        return False
    return True


def _validate_syslog(config: dict) -> bool:
    if "facility" not in config:
        config["facility"] = DEFAULT_FACILITY
    else:
        facility = config["facility"]
        if not isinstance(facility, str):
            _complain("logger: expected logger facility to be of type string")
            return False
        if facility not in FACILITIES:
            _complain(f"logger: unknown syslog facility {facility}")
            return False
    if "ident" not in config:
        config["ident"] = DEFAULT_IDENT
    elif not isinstance(config["ident"], str):
        _complain("logger: syslog ident must be a string")
        return False
    return True


def logger_validate(config: Any) -> bool:
    """Check a logger group, filling in syslog defaults; False if invalid."""
    if not isinstance(config, dict) or not isinstance(config.get("type"), str):
        _complain("logger: need a type (file/stdout/stderr/syslog/null)")
        return False
    kind = strlwr(config["type"])
    if kind == "file":
        return _validate_file(config)
    if kind in _STREAM_TYPES:
        return True
    if kind == "syslog":
        return _validate_syslog(config)
    _complain(f"logger: unsupported type {kind}")
    return False


def get_logger_state() -> bool:
    """True while a logger is initialised."""
    return _state.get()


def _file_sink(config: dict) -> _Sink:
    mode = config.get("mode", DEFAULT_MODE)
    if not _is_int(mode):
        mode = DEFAULT_MODE
    fd = os.open(config["file"], os.O_CREAT | os.O_APPEND | os.O_WRONLY, mode)

    def write(text: str) -> None:
        try:
            os.write(fd, text.encode())
        except OSError as exc:
            _complain(f"while writing to logfile {exc.strerror}")

    return _Sink(write=write, close=lambda: os.close(fd))


def _syslog_sink(config: dict) -> _Sink:
    import syslog

    facility = config.get("facility")
    ident = config.get("ident")
    if not isinstance(facility, str) or not isinstance(ident, str):
        raise ValueError("syslog logger expects a facility and an ident")
    if facility not in FACILITIES:
        raise ValueError(f'facility "{facility}" does not exist')
    syslog.openlog(ident, syslog.LOG_PID | syslog.LOG_CONS, FACILITIES[facility] << 3)

    def write(text: str) -> None:
        syslog.syslog(syslog.LOG_INFO | syslog.LOG_USER, text.rstrip("\n"))

    return _Sink(write=write, close=syslog.closelog, timestamp=False)


def logger_init(config: dict) -> None:
    """Open the logger described by a validated logger group."""
    kind = config.get("type")
    if not isinstance(kind, str):
        raise ValueError("logger needs a type")
    kind = strlwr(kind)
    if kind == "file":
        sink = _file_sink(config)
    elif kind == "stderr":
        sink = _Sink(write=_write_stderr)
    elif kind == "stdout":
        sink = _Sink(write=_write_stdout)
    elif kind == "null":
        sink = _Sink(write=_discard)
    elif kind == "syslog":
        sink = _syslog_sink(config)
    else:
        raise ValueError(f"no such logger type: {kind}")

    logger_free()
    _current.sink = sink
    _state.set(True)
    logger_log("logger initialized")


def logger_free() -> None:
    """Close the current logger; standard streams are left open."""
    sink, _current.sink = _current.sink, None
    if sink is None:
        return
    _state.set(False)
    if sink.close is not None:
        sink.close()


def _timestamp() -> str:
    now = time.localtime()
    return (
        f"{time.strftime('%a %b', now)} {now.tm_mday:2d} "
        f"{time.strftime('%H:%M:%S %Y', now)} "
    )


def logger_log(fmt: str, *args: Any) -> None:
    """Write one formatted line, prefixed with a timestamp where the sink wants one.

    Before a logger is initialised the line goes to standard error.
    """
    sink = _current.sink
    message = fmt % args if args else fmt
    stamp = _timestamp() if sink is None or sink.timestamp else ""
    line = (stamp + message)[:LOG_BUFFER_SIZE] + "\n"
    with _lock:
        (sink.write if sink is not None else _write_stderr)(line)