"""Key-dependent 64-bit P-box (bit transposition).

``pbox[i]`` is the destination of source bit ``i``. Bits are numbered
MSB-first: bit 0 is the most significant bit of byte 0, bit 63 the least
significant bit of byte 7. The same numbering is used on both the
encrypt and decrypt paths.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .errors import BlockSizeError, TableValidationError
from .keys import KeyMaterial, key_bytes
from .prng import Lcg, fisher_yates, hash32

logger = logging.getLogger(__name__)

PBOX_SIZE = 64

# Mixed into the seed so the P-box shuffle does not track the S-box one.
PBOX_SEED_MIX = 0x6D2B79F5

PBox = Tuple[int, ...]


def generate_pbox(key: KeyMaterial) -> PBox:
    """Generate the 64-entry P-box for ``key``."""
    seed = hash32(key_bytes(key)) ^ PBOX_SEED_MIX
    table = tuple(fisher_yates(PBOX_SIZE, Lcg(seed)))
    logger.debug("P-box generated (seed=%08x)", seed)
    return table


def invert_pbox(pbox: Sequence[int]) -> PBox:
    """Return the positional inverse ``inv[P[i]] = i``.

    Raises:
        TableValidationError: if ``pbox`` is not a permutation of 0..63.
    """
    if len(pbox) != PBOX_SIZE:
        raise TableValidationError(f"P-box must have {PBOX_SIZE} entries, got {len(pbox)}")
    inv = [-1] * PBOX_SIZE
    for i, dst in enumerate(pbox):
        if not 0 <= dst < PBOX_SIZE or inv[dst] != -1:
            raise TableValidationError(f"P-box is not a permutation (bit {i} -> {dst})")
        inv[dst] = i
    return tuple(inv)


def _bits(data: bytes) -> List[int]:
    bits = []
    for byte in data:
        for i in range(8):
            bits.append((byte >> (7 - i)) & 1)
    return bits


def permute_bits(state: bytes, pbox: Sequence[int]) -> bytes:
    """Move source bit ``i`` of an 8-byte state to bit ``pbox[i]``."""
    if len(state) != 8:
        raise BlockSizeError(f"permute_bits requires 8-byte input, got {len(state)}")
    bits = _bits(state)
    result = bytearray(8)
    for i, bit in enumerate(bits):
        dst = pbox[i]
        result[dst // 8] |= bit << (7 - (dst % 8))
    return bytes(result)
