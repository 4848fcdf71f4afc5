"""32-bit FNV-1a hashing and xor-folding to fewer bits."""

from __future__ import annotations

import sys
from collections.abc import Callable
from functools import partial

FNV_32A_INIT = 0x811C9DC5
FNV_32_PRIME = 0x01000193
_MASK32 = 0xFFFFFFFF


def _fnv32a(buf: bytes, hval: int = FNV_32A_INIT) -> int:
    for byte in buf:
        hval ^= byte
        hval = (hval * FNV_32_PRIME) & _MASK32
    return hval


def fnv32a_str(buf: bytes | str) -> int:
    """FNV-1a hash of a byte string (text is encoded as UTF-8)."""
    if isinstance(buf, str):
        buf = buf.encode()
    return _fnv32a(bytes(buf))


def fnv32a_int(value: int) -> int:
    """FNV-1a hash of the four native-order bytes of a 32-bit integer."""
    return _fnv32a((value & _MASK32).to_bytes(4, sys.byteorder))


def fold(bits: int, hval: int) -> int:
    """Xor-fold a 32-bit hash down to ``bits`` bits."""
    if not 1 <= bits <= 31:
        raise ValueError("bits must be between 1 and 31")
    mask = (1 << bits) - 1
    return ((hval & _MASK32) >> (32 - bits)) ^ (hval & mask)


def fold_noop(hval: int) -> int:
    """Return the hash unfolded, kept to its 32 bits."""
    return hval & _MASK32


_HASHES: dict[str, Callable[..., int]] = {
    "fnv32a_str": fnv32a_str,
    "fnv32a_int": fnv32a_int,
}

_FOLDS: dict[str, Callable[[int], int]] = {"fold_noop": fold_noop}
_FOLDS.update({f"fold{bits}": partial(fold, bits) for bits in range(31, 0, -1)})


def fnv_init(name: str) -> Callable[..., int] | None:
    """Return the hash function called ``name``, or None if unknown."""
    return _HASHES.get(name)


def fold_init(name: str) -> Callable[[int], int] | None:
    """Return the fold function called ``name``, or None if unknown."""
    return _FOLDS.get(name)