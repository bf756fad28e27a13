"""SONATA key schedule.

Two independent derivations come out of the user key:

* a stateful 128-bit subkey chain (rotate, nibble-substitute, XOR a round
  constant that depends only on the round index), from which each round
  takes the 8 even-indexed bytes;
* per-round 8-byte constants and 1-byte NibbleShuffle masks from an
  FNV-1a seeded xorshift32 stream.

Keeping the two generators apart stops subkey and constant material from
being trivially correlated.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import ScheduleError
from .keys import KeyMaterial, key_bytes, xor_bytes
from .prng import GOLDEN_RATIO32, MASK32, fnv1a32, lcg_step, xorshift32
from .sbox import apply_sbox, generate_sbox

logger = logging.getLogger(__name__)

KEY_BYTES = 16
SUBKEY_BYTES = 8
MASK_SALT = 0xA5


def _check_rounds(rounds: int) -> None:
    if isinstance(rounds, bool) or not isinstance(rounds, int) or rounds <= 0:
        raise ScheduleError(f"rounds must be a positive integer, got {rounds!r}")


def normalize_key(key: KeyMaterial) -> bytes:
    """Tile or truncate the key bytes to exactly 16 bytes (zeros if empty)."""
    raw = key_bytes(key)
    if not raw:
        return bytes(KEY_BYTES)
    reps = -(-KEY_BYTES // len(raw))
    return (raw * reps)[:KEY_BYTES]


def rotl128(data: bytes, bits: int) -> bytes:
    """Rotate a 16-byte big-endian value left by ``bits`` (mod 128)."""
    r = bits % 128
    x = int.from_bytes(data, "big")
    if r:
        x = ((x << r) | (x >> (128 - r))) & ((1 << 128) - 1)
    return x.to_bytes(KEY_BYTES, "big")


def round_const16(r: int) -> bytes:
    """16-byte constant that depends only on the round index."""
    x = (GOLDEN_RATIO32 ^ r) & MASK32
    out = bytearray(KEY_BYTES)
    for i in range(KEY_BYTES):
        x = lcg_step(x)
        out[i] = (x ^ (r * 29 + i * 17)) & 0xFF
    return bytes(out)


def derive_subkeys(key: KeyMaterial, rounds: int, sbox: Optional[Sequence[int]] = None) -> List[bytes]:
    """Derive one 8-byte subkey per round.

    The 16-byte schedule state starts as the normalized key and carries
    over from round to round.
    """
    _check_rounds(rounds)
    table = sbox if sbox is not None else generate_sbox(key)

    state = normalize_key(key)
    subkeys: List[bytes] = []
    for r in range(rounds):
        state = rotl128(state, (7 * r + 3) % 128)
        state = apply_sbox(state, table)
        state = xor_bytes(state, round_const16(r))
        subkeys.append(state[0::2])
    return subkeys


def derive_round_consts8(key: KeyMaterial, rounds: int) -> List[bytes]:
    """Per-round 8-byte AddConst material."""
    _check_rounds(rounds)
    consts: List[bytes] = []
    s = fnv1a32(key_bytes(key)) ^ GOLDEN_RATIO32
    for r in range(rounds):
        s = xorshift32(s ^ (r + 1))
        t = s
        block = bytearray(SUBKEY_BYTES)
        for i in range(SUBKEY_BYTES):
            t = xorshift32(t ^ ((r + 1) * (i + 1)))
            block[i] = t & 0xFF
        consts.append(bytes(block))
    return consts


def masks_from_consts(consts: Sequence[bytes]) -> List[int]:
    return [(c[0] ^ c[7] ^ MASK_SALT) & 0xFF for c in consts]


def derive_round_masks(key: KeyMaterial, rounds: int) -> List[int]:
    """Per-round NibbleShuffle masks: ``const[0] ^ const[7] ^ 0xA5``."""
    return masks_from_consts(derive_round_consts8(key, rounds))


@dataclass(frozen=True)
class KeySchedule:
    """Everything the round function needs that comes from the key."""
    rounds: int
    subkeys: Tuple[bytes, ...]
    round_consts: Tuple[bytes, ...]
    masks: Tuple[int, ...]


def derive_key_schedule(key: KeyMaterial, rounds: int, sbox: Optional[Sequence[int]] = None) -> KeySchedule:
    subkeys = derive_subkeys(key, rounds, sbox)
    consts = derive_round_consts8(key, rounds)
    logger.debug("Key schedule derived for %d rounds", rounds)
    return KeySchedule(
        rounds=rounds,
        subkeys=tuple(subkeys),
        round_consts=tuple(consts),
        masks=tuple(masks_from_consts(consts)),
    )
