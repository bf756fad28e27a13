"""Key-dependent 4-bit S-box (nibble substitution).

The table is a Fisher-Yates shuffle of 0..15 driven by an LCG seeded from
a multiplicative hash of the key, so the same key always gives the same
table. Each byte is substituted nibble by nibble.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
from typing import Sequence, Tuple

from .errors import TableValidationError
from .keys import KeyMaterial, key_bytes
from .prng import Lcg, fisher_yates, hash32

logger = logging.getLogger(__name__)

SBOX_SIZE = 16

SBox = Tuple[int, ...]


def generate_sbox(key: KeyMaterial) -> SBox:
    """Generate the 16-entry S-box for ``key``."""
    seed = hash32(key_bytes(key))
    table = tuple(fisher_yates(SBOX_SIZE, Lcg(seed)))
    logger.debug("S-box generated (seed=%08x): %s", seed, table)
    return table


def invert_sbox(sbox: Sequence[int]) -> SBox:
    """Return the positional inverse ``inv[S[x]] = x``.

    Raises:
        TableValidationError: if ``sbox`` is not a permutation of 0..15.
    """
    if len(sbox) != SBOX_SIZE:
        raise TableValidationError(f"S-box must have {SBOX_SIZE} entries, got {len(sbox)}")
    inv = [0] * SBOX_SIZE
    seen = set()
    for x, y in enumerate(sbox):
        if not 0 <= y < SBOX_SIZE or y in seen:
            raise TableValidationError(f"S-box is not a permutation (entry {x} -> {y})")
        seen.add(y)
        inv[y] = x
    return tuple(inv)


def sub_nibbles(byte: int, table: Sequence[int]) -> int:
    """Substitute the high and low nibble of one byte independently."""
    hi = (byte >> 4) & 0x0F
    lo = byte & 0x0F
    return ((table[hi] & 0x0F) << 4) | (table[lo] & 0x0F)


def apply_sbox(data: bytes, sbox: Sequence[int]) -> bytes:
    """Apply the forward S-box to every nibble."""
    return bytes(sub_nibbles(b, sbox) for b in data)


def apply_inv_sbox(data: bytes, inv_sbox: Sequence[int]) -> bytes:
    """Apply an inverse S-box (as returned by :func:`invert_sbox`)."""
    return bytes(sub_nibbles(b, inv_sbox) for b in data)
