"""Reading and querying configuration documents.

A document is made of settings ``name = value;``.  Groups ``{ ... }``
become dicts, lists ``( ... )`` become lists and arrays ``[ ... ]``
become tuples; scalars are strings, integers, floats and booleans.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

ConfigValue = Union[dict, list, tuple, str, int, float, bool]


class ConfigError(Exception):
    """A configuration document is malformed or lacks a setting."""

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        self.message = message
        self.line = line
        super().__init__(message if line is None else f"{message} (line {line})")


@dataclass
class Options:
    """Settings given on the command line."""

    config: Optional[str] = None
    consumer_threads: int = 0
    producer_threads: int = 0
    input: Optional[str] = None
    in_host: Optional[str] = None
    in_broker: Optional[str] = None
    in_pipeline: int = 0
    in_file: Optional[str] = None
    in_groupid: Optional[str] = None
    in_topic: Optional[str] = None
    output: Optional[str] = None
    out_host: Optional[str] = None
    out_host_replica: Optional[str] = None
    out_broker: Optional[str] = None
    out_pipeline: int = 0
    out_file: Optional[str] = None
    out_groupid: Optional[str] = None
    out_topic: Optional[str] = None
    logger: Optional[str] = None
    in_hosts: list[str] = field(default_factory=list)
    out_hosts: list[str] = field(default_factory=list)
    out_hosts_replica: list[str] = field(default_factory=list)


_LEXEME_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
   |(?P<comment>(?:\#|//)[^\n]*)
   |(?P<block>/\*.*?\*/)
   |(?P<string>"(?:[^"\\]|\\.)*")
   |(?P<bool>(?i:true|false)(?![-A-Za-z0-9_*]))
   |(?P<float>[-+]?(?:\d+\.\d*|\.\d+)(?:[eE][-+]?\d+)?|[-+]?\d+[eE][-+]?\d+)
   |(?P<hex>0[xX][0-9A-Fa-f]+L{0,2})
   |(?P<int>[-+]?\d+L{0,2})
   |(?P<name>[A-Za-z*][-A-Za-z0-9_*]*)
   |(?P<punct>[=:;,{}()\[\]])
    """,
    re.VERBOSE | re.DOTALL,
)
_ESCAPE = re.compile(r"\\(x[0-9A-Fa-f]{2}|.)", re.DOTALL)
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "f": "\f", "\\": "\\", '"': '"'}
_SKIP = {"space", "comment", "block"}
_INDEX = re.compile(r"\[(\d+)\]")
_SEPARATORS = re.compile(r"[./:]")


@dataclass
class _Lexeme:
    kind: str
    text: str
    line: int

    def is_punct(self, char: str) -> bool:
        return self.kind == "punct" and self.text == char


def _unescape(text: str) -> str:
    def replace(match: re.Match) -> str:
        code = match.group(1)
        if code.startswith("x") and len(code) == 3:
            return chr(int(code[1:], 16))
        return _ESCAPES.get(code, code)

    return _ESCAPE.sub(replace, text[1:-1])


def _tokenize(text: str) -> list[_Lexeme]:
    lexemes = []
    pos, line = 0, 1
    while pos < len(text):
        match = _LEXEME_PATTERN.match(text, pos)
        if match is None:
            raise ConfigError(f"syntax error near {text[pos:pos + 10]!r}", line)
        if match.lastgroup not in _SKIP:
            lexemes.append(_Lexeme(match.lastgroup, match.group(), line))
        line += match.group().count("\n")
        pos = match.end()
    return lexemes


class _Parser:
    def __init__(self, lexemes: list[_Lexeme]) -> None:
        self._lexemes = lexemes
        self._pos = 0

    def _peek(self) -> _Lexeme | None:
        return self._lexemes[self._pos] if self._pos < len(self._lexemes) else None

    def _next(self) -> _Lexeme:
        lexeme = self._peek()
        if lexeme is None:
            line = self._lexemes[-1].line if self._lexemes else 1
            raise ConfigError("unexpected end of input", line)
        self._pos += 1
        return lexeme

    def settings(self, closing: Optional[str]) -> dict:
        group: dict = {}
        while True:
            lexeme = self._peek()
            if lexeme is None:
                if closing is None:
                    return group
                self._next()
            elif closing is not None and lexeme.is_punct(closing):
                self._pos += 1
                return group
            else:
                self._setting(group)

    def _setting(self, group: dict) -> None:
        lexeme = self._next()
        if lexeme.kind != "name":
            raise ConfigError(f"expected a setting name, got {lexeme.text!r}", lexeme.line)
        sep = self._next()
        if not (sep.is_punct("=") or sep.is_punct(":")):
            raise ConfigError(f"expected '=' or ':' after {lexeme.text!r}", sep.line)
        if lexeme.text in group:
            raise ConfigError(f"duplicate setting name {lexeme.text!r}", lexeme.line)
        group[lexeme.text] = self._value()
        after = self._peek()
        if after is not None and (after.is_punct(";") or after.is_punct(",")):
            self._pos += 1

    def _sequence(self, closing: str) -> list:
        items: list = []
        while True:
            lexeme = self._peek()
            if lexeme is not None and lexeme.is_punct(closing):
                self._pos += 1
                return items
            items.append(self._value())
            lexeme = self._next()
            if lexeme.is_punct(closing):
                return items
            if not lexeme.is_punct(","):
                raise ConfigError(f"expected ',' or {closing!r}", lexeme.line)

    def _value(self) -> ConfigValue:
        lexeme = self._next()
        if lexeme.is_punct("{"):
            return self.settings("}")
        if lexeme.is_punct("("):
            return self._sequence(")")
        if lexeme.is_punct("["):
            items = self._sequence("]")
            kinds = {type(item) for item in items}
            if any(isinstance(item, (dict, list, tuple)) for item in items) or len(kinds) > 1:
                raise ConfigError("array elements must be scalars of one type", lexeme.line)
            return tuple(items)
        if lexeme.kind == "string":
            parts = [_unescape(lexeme.text)]
            while (nxt := self._peek()) is not None and nxt.kind == "string":
                parts.append(_unescape(self._next().text))
            return "".join(parts)
        if lexeme.kind == "bool":
            return lexeme.text.lower() == "true"
        if lexeme.kind == "hex":
            return int(lexeme.text.rstrip("L"), 16)
        if lexeme.kind == "int":
            return int(lexeme.text.rstrip("L"), 10)
        if lexeme.kind == "float":
            return float(lexeme.text)
        raise ConfigError(f"unexpected {lexeme.text!r}", lexeme.line)


def parse(text: str) -> dict:
    """Parse a configuration document into its root group."""
    return _Parser(_tokenize(text)).settings(None)


def load(path: str | Path) -> dict:
    """Read and parse the configuration file at ``path``."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read config {path}: {exc.strerror or exc}") from exc
    return parse(text)


def lookup(root: Any, path: str) -> Any:
    """Follow a path such as ``consumers.[0].type`` or ``logger/type``.

    Returns None when any part of the path does not exist.
    """
    current = root
    for part in filter(None, _SEPARATORS.split(path)):
        index = _INDEX.fullmatch(part)
        if index is not None:
            if isinstance(current, dict):
                items = list(current.values())
            elif isinstance(current, (list, tuple)):
                items = current
            else:
                return None
            position = int(index.group(1))
            if position >= len(items):
                return None
            current = items[position]
        elif isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return None
    return current


def lookup_string(conf: Any, path: str, err: str) -> str:
    """Return the string at ``path``; raise ConfigError(err) otherwise."""
    value = lookup(conf, path)
    if not isinstance(value, str):
        raise ConfigError(err)
    return value


def lookup_int(conf: Any, path: str, err: str) -> int:
    """Return the integer at ``path``; raise ConfigError(err) otherwise."""
    value = lookup(conf, path)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ConfigError(err)
    return value


def get_member(conf: Any, name: str, err: str) -> ConfigValue:
    """Return the member ``name`` of a group; raise ConfigError(err) if absent."""
    if not isinstance(conf, dict) or name not in conf:
        raise ConfigError(err)
    return conf[name]


def is_list(conf: Any, err: str) -> bool:
    """Return True for a list setting; raise ConfigError(err) otherwise."""
    if not isinstance(conf, list):
        raise ConfigError(err)
    return True