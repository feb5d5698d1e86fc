"""Bit-level helpers: byte order, power-of-two rounding and integer log2."""

from __future__ import annotations

import struct

#: Width in bits of a native pointer / ``size_t``.
WORD_BITS = struct.calcsize("P") * 8

_WORD_MAX = (1 << WORD_BITS) - 1


def is_little_endian() -> bool:
    """Return True when the host stores the least significant byte first."""
    return struct.pack("=H", 1)[0] == 1


def _check_word(x: int) -> None:
    if x <= 0:
        raise ValueError(f"expected a positive integer, got {x}")
    if x > _WORD_MAX:
        raise OverflowError(f"{x} does not fit in {WORD_BITS} bits")


def round_of_two(x: int) -> int:
    """Round ``x`` up to the nearest power of two.

    Raises ValueError for non-positive input and OverflowError when the
    result would not fit in a machine word.
    """
    _check_word(x)
    if x > 1 << (WORD_BITS - 1):
        raise OverflowError(f"next power of two after {x} exceeds {WORD_BITS} bits")
    return 1 << (x - 1).bit_length()


def log2(x: int) -> int:
    """Return the integer base-2 logarithm of ``x`` (floor)."""
    _check_word(x)
    return x.bit_length() - 1