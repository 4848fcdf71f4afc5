"""Configuration validators chosen by producer/consumer kind."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Validator:
    """Checks for a consumer group and a producer group of one kind."""

    validate_consumer: Callable[[Any], bool]
    validate_producer: Callable[[Any], bool]


ValidatorFactory = Callable[[], Validator]

_REGISTRY: dict[str, ValidatorFactory] = {}


def _builtin_factories() -> dict[str, ValidatorFactory]:
    from schaufel.redis_io import redis_validator_init

    return {"r": redis_validator_init}


def register_validator(kind: str, factory: ValidatorFactory) -> None:
    """Make ``factory`` supply validators for kinds starting like ``kind``."""
    if not kind:
        raise ValueError("kind must not be empty")
    _REGISTRY[kind[0]] = factory


def validator_init(kind: str) -> Optional[Validator]:
    """Return a validator for ``kind`` (matched on its first letter), or None."""
    if not kind:
        return None
    key = kind[0]
    factory = _REGISTRY.get(key) or _builtin_factories().get(key)
    if factory is None:
        return None
    return factory()