"""One SONATA round and its exact inverse.

Forward stage order: S -> O -> N -> A(subkey) -> T -> A(const)

    S  nibble substitution through the key S-box
    O  ShiftNibbles: row r of the 4x4 nibble matrix rotated left by r
    N  NibbleShuffle: swap hi/lo nibble of byte i when mask bit i is set
    A  XOR with the round subkey
    T  bit transposition through the key P-box
    A  XOR with the round constant

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .keys import xor_bytes
from .pbox import PBox, permute_bits
from .sbox import SBox, apply_inv_sbox, apply_sbox

BLOCK_BYTES = 8


@dataclass(frozen=True)
class RoundParams:
    """Tables and key material for a single round."""
    sbox: SBox
    inv_sbox: SBox
    pbox: PBox
    inv_pbox: PBox
    subkey: bytes
    round_const: bytes
    mask: int


# ---------------------------------------------------------------------------
# ShiftNibbles
# ---------------------------------------------------------------------------

def bytes_to_nibbles(data: bytes) -> List[int]:
    nibbles = []
    for b in data:
        nibbles.append((b >> 4) & 0x0F)
        nibbles.append(b & 0x0F)
    return nibbles


def nibbles_to_bytes(nibbles: List[int]) -> bytes:
    return bytes(((nibbles[2 * i] & 0x0F) << 4) | (nibbles[2 * i + 1] & 0x0F)
                 for i in range(len(nibbles) // 2))


def _shift_rows(state: bytes, direction: int) -> bytes:
    n = bytes_to_nibbles(state)
    out = [0] * 16
    for row in range(4):
        for col in range(4):
            out[row * 4 + (col + direction * row) % 4] = n[row * 4 + col]
    return nibbles_to_bytes(out)


def shift_nibbles_left(state: bytes) -> bytes:
    """Rotate row r of the row-major 4x4 nibble matrix left by r."""
    return _shift_rows(state, -1)


def shift_nibbles_right(state: bytes) -> bytes:
    """Inverse of :func:`shift_nibbles_left`."""
    return _shift_rows(state, 1)


# ---------------------------------------------------------------------------
# NibbleShuffle
# ---------------------------------------------------------------------------

def swap_nibbles(b: int) -> int:
    return ((b << 4) & 0xF0) | ((b >> 4) & 0x0F)


def nibble_shuffle(state: bytes, mask: int) -> bytes:
    """Swap the nibbles of byte i when bit i of ``mask`` is set.

    Applying the same mask twice gives back the input.
    """
    return bytes(swap_nibbles(b) if (mask >> (i & 7)) & 1 else b for i, b in enumerate(state))


# ---------------------------------------------------------------------------
# Rounds
# ---------------------------------------------------------------------------

def encrypt_round(state: bytes, params: RoundParams) -> bytes:
    state = apply_sbox(state, params.sbox)
    state = shift_nibbles_left(state)
    state = nibble_shuffle(state, params.mask)
    state = xor_bytes(state, params.subkey)
    state = permute_bits(state, params.pbox)
    return xor_bytes(state, params.round_const)


def decrypt_round(state: bytes, params: RoundParams) -> bytes:
    state = xor_bytes(state, params.round_const)
    state = permute_bits(state, params.inv_pbox)
    state = xor_bytes(state, params.subkey)
    state = nibble_shuffle(state, params.mask)
    state = shift_nibbles_right(state)
    return apply_inv_sbox(state, params.inv_sbox)
