import pytest

from schaufel.redis_io import redis_validator
from schaufel.validator import Validator, register_validator, validator_init


def test_redis_kind_is_builtin():
    validator = validator_init("redis")
    assert validator.validate_consumer is redis_validator
    assert validator.validate_producer is redis_validator


def test_kind_is_matched_on_first_letter():
    validator = validator_init("r")
    assert validator.validate_consumer({"host": "localhost:1", "topic": "t"}) is True


def test_unknown_kind_returns_none():
    assert validator_init("xyz") is None


def test_empty_kind_returns_none():
    assert validator_init("") is None


def test_registered_factory_is_used():
    def factory():
        return Validator(
            validate_consumer=lambda conf: "c" in conf,
            validate_producer=lambda conf: "p" in conf,
        )

    register_validator("zeta", factory)
    validator = validator_init("zulu")
    assert validator.validate_consumer({"c": 1}) is True
    assert validator.validate_consumer({}) is False
    assert validator.validate_producer({"p": 1}) is True


def test_register_requires_kind():
    with pytest.raises(ValueError):
        register_validator("", lambda: None)