"""Hash functions for byte keys."""

from __future__ import annotations

_MASK64 = (1 << 64) - 1


def djb2(key: bytes | bytearray | memoryview | str) -> int:
    """Return the 64-bit xor variant of the djb2 hash of ``key``.

    Bytes are treated as signed chars, so values of 0x80 and above are
    sign-extended before being mixed in. Empty keys hash to 0; strings are
    hashed as their UTF-8 encoding.
    """
    data = key.encode("utf-8") if isinstance(key, str) else bytes(key)
    if not data:
        return 0

    value = 5381
    for byte in data:
        signed = byte if byte < 0x80 else (byte - 0x100) & _MASK64
        value = (((value << 5) + value) & _MASK64) ^ signed
    return value