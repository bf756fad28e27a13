"""Deterministic 32-bit generators used to build key-dependent tables.

None of this is cryptographic. Each table or schedule derivation builds
its own generator value from a key-derived seed; nothing here keeps
module-level state.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol

MASK32 = 0xFFFFFFFF

# Numerical Recipes LCG constants
LCG_MUL = 1664525
LCG_INC = 1013904223

FNV_OFFSET = 2166136261
FNV_PRIME = 16777619

GOLDEN_RATIO32 = 0x9E3779B9


class Rng32(Protocol):
    def next_u32(self) -> int:  # pragma: no cover
        ...


def hash32(data: bytes) -> int:
    """Fold bytes through ``h = h*31 + b`` (mod 2^32)."""
    h = 0
    for b in data:
        h = (h * 31 + b) & MASK32
    return h


def fnv1a32(data: bytes) -> int:
    """32-bit FNV-1a hash."""
    h = FNV_OFFSET
    for b in data:
        h ^= b
        h = (h * FNV_PRIME) & MASK32
    return h


def lcg_step(x: int) -> int:
    return (x * LCG_MUL + LCG_INC) & MASK32


def xorshift32(x: int) -> int:
    """One xorshift step with shifts 13/17/5, all to the left."""
    x &= MASK32
    x ^= (x << 13) & MASK32
    x ^= (x << 17) & MASK32
    x ^= (x << 5) & MASK32
    return x


@dataclass
class Lcg:
    """Linear congruential generator; a zero seed is replaced by 1."""
    state: int

    def __post_init__(self) -> None:
        self.state = (self.state & MASK32) or 1

    def next_u32(self) -> int:
        self.state = lcg_step(self.state)
        return self.state


def fisher_yates(n: int, rng: Rng32) -> List[int]:
    """Shuffle ``range(n)`` consuming one generator output per swap."""
    arr = list(range(n))
    for i in range(n - 1, 0, -1):
        j = rng.next_u32() % (i + 1)
        arr[i], arr[j] = arr[j], arr[i]
    return arr
