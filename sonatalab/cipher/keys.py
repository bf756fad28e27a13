"""Key material handling shared by the table generators and key schedule."""
from __future__ import annotations

from typing import Union

KeyMaterial = Union[bytes, bytearray, str]


def key_bytes(key: KeyMaterial) -> bytes:
    """Return key material as bytes (``str`` keys are UTF-8 encoded)."""
    if isinstance(key, str):
        return key.encode("utf-8")
    return bytes(key)


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """XOR two byte strings of equal length."""
    if len(a) != len(b):
        raise ValueError("xor_bytes length mismatch")
    return bytes(x ^ y for x, y in zip(a, b))
