"""Avalanche measurement for SONATA.

* :func:`measure_avalanche` flips one bit of the plaintext or key and
  compares the two CBC ciphertexts bit by bit.
* :func:`avalanche_trials` repeats that over random inputs and summarizes
  the spread.
* :func:`compute_sac` checks the Strict Avalanche Criterion per input bit
  on single blocks.

Bit numbering: bit 0 is the most significant bit of byte 0, so flipping
bit ``i`` toggles byte ``i // 8`` with mask ``1 << (7 - i % 8)``.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import random
import statistics
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

import numpy as np

from sonatalab.cipher.cbc import encrypt_stream
from sonatalab.cipher.engine import BlockCipher
from sonatalab.cipher.keys import KeyMaterial, key_bytes
from sonatalab.cipher.rounds import BLOCK_BYTES

logger = logging.getLogger(__name__)

FlipTarget = Literal["plaintext", "key"]


def hamming_distance(a: bytes, b: bytes) -> int:
    if len(a) != len(b):
        raise ValueError("hamming distance length mismatch")
    return sum((x ^ y).bit_count() for x, y in zip(a, b))


def per_byte_diff(a: bytes, b: bytes) -> List[int]:
    """Number of differing bits in each byte position (0..8)."""
    if len(a) != len(b):
        raise ValueError("per_byte_diff length mismatch")
    return [(x ^ y).bit_count() for x, y in zip(a, b)]


def flip_bit(data: bytes, bit_index: int) -> bytes:
    byte_i = bit_index // 8
    if bit_index < 0 or byte_i >= len(data):
        raise IndexError("bit_index out of range")
    out = bytearray(data)
    out[byte_i] ^= 1 << (7 - bit_index % 8)
    return bytes(out)


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


# ---------------------------------------------------------------------------
# Single measurement
# ---------------------------------------------------------------------------

@dataclass
class AvalancheResult:
    """Outcome of one single-bit-flip experiment."""
    target: str
    bit_index: int
    rounds: int
    baseline_hex: str
    flipped_hex: str
    diff_bits: int
    total_bits: int
    per_byte: List[int] = field(default_factory=list)

    @property
    def percent(self) -> float:
        return (self.diff_bits / self.total_bits * 100.0) if self.total_bits else 0.0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["percent"] = self.percent
        return d

    def summary(self) -> str:
        return (
            f"flip {self.target} bit {self.bit_index}: "
            f"{self.diff_bits}/{self.total_bits} bits changed ({self.percent:.2f}%)"
        )


def measure_avalanche(
    plaintext: bytes,
    key: KeyMaterial,
    iv: bytes,
    rounds: int,
    *,
    target: FlipTarget = "plaintext",
    bit_index: int = 0,
) -> AvalancheResult:
    """Encrypt baseline and one-bit-flipped inputs and compare ciphertexts.

    Both ciphertexts come from the same CBC path with otherwise identical
    parameters, so they always have the same length and every bit of them
    is compared.
    """
    kb = key_bytes(key)
    if target == "plaintext":
        pt2, key2 = flip_bit(plaintext, bit_index), kb
    elif target == "key":
        pt2, key2 = plaintext, flip_bit(kb, bit_index)
    else:
        raise ValueError(f"target must be 'plaintext' or 'key', got '{target}'")

    base = encrypt_stream(plaintext, kb, iv, rounds)
    alt = encrypt_stream(pt2, key2, iv, rounds)

    return AvalancheResult(
        target=target,
        bit_index=bit_index,
        rounds=rounds,
        baseline_hex=base.hex(),
        flipped_hex=alt.hex(),
        diff_bits=hamming_distance(base, alt),
        total_bits=len(base) * 8,
        per_byte=per_byte_diff(base, alt),
    )


# ---------------------------------------------------------------------------
# Repeated trials
# ---------------------------------------------------------------------------

@dataclass
class AvalancheStats:
    """Spread of avalanche percentages over random trials."""
    target: str
    rounds: int
    trials: int
    mean_percent: float = 0.0
    std_percent: float = 0.0
    min_percent: float = 0.0
    max_percent: float = 0.0
    percents: List[float] = field(default_factory=list)

    @property
    def plausible(self) -> bool:
        """Heuristic: mean change between 20% and 80% of output bits."""
        return 20.0 <= self.mean_percent <= 80.0

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["plausible"] = self.plausible
        return d

    def summary(self) -> str:
        status = "OK" if self.plausible else "WEAK"
        return (
            f"[{status}] avalanche({self.target}, {self.rounds} rounds, {self.trials} trials): "
            f"mean={self.mean_percent:.2f}%, std={self.std_percent:.2f}, "
            f"min={self.min_percent:.2f}%, max={self.max_percent:.2f}%"
        )


def avalanche_trials(
    rounds: int,
    *,
    trials: int = 200,
    target: FlipTarget = "plaintext",
    plaintext_bytes: int = BLOCK_BYTES,
    key_size_bytes: int = 16,
    seed: int = 1337,
) -> AvalancheStats:
    """Run :func:`measure_avalanche` on random plaintext/key/IV/bit choices."""
    rng = random.Random(seed)
    percents: List[float] = []
    for _ in range(trials):
        pt = _rand_bytes(rng, plaintext_bytes)
        key = _rand_bytes(rng, key_size_bytes)
        iv = _rand_bytes(rng, BLOCK_BYTES)
        n_bits = (plaintext_bytes if target == "plaintext" else key_size_bytes) * 8
        res = measure_avalanche(pt, key, iv, rounds, target=target, bit_index=rng.randrange(n_bits))
        percents.append(res.percent)

    arr = np.asarray(percents, dtype=float)
    stats = AvalancheStats(
        target=target,
        rounds=rounds,
        trials=trials,
        mean_percent=round(float(arr.mean()), 4) if arr.size else 0.0,
        std_percent=round(float(arr.std()), 4) if arr.size else 0.0,
        min_percent=round(float(arr.min()), 4) if arr.size else 0.0,
        max_percent=round(float(arr.max()), 4) if arr.size else 0.0,
        percents=percents,
    )
    logger.info(stats.summary())
    return stats


# ---------------------------------------------------------------------------
# Strict Avalanche Criterion
# ---------------------------------------------------------------------------

@dataclass
class SACResult:
    """Strict Avalanche Criterion measurement for one input type."""
    rounds: int
    input_type: str             # "plaintext" or "key"
    num_trials: int
    num_input_bits: int
    num_output_bits: int

    # Per-input-bit mean flip fraction (len = num_input_bits)
    per_input_bit_mean: List[float] = field(default_factory=list)

    global_mean: float = 0.0    # ~0.5 ideal
    global_std: float = 0.0
    min_bit_prob: float = 0.0
    max_bit_prob: float = 0.0
    sac_deviation: float = 0.0  # Mean |per_bit - 0.5|

    @property
    def passes_sac(self) -> bool:
        """Heuristic: SAC deviation < 0.05 and min_bit_prob > 0.35."""
        return self.sac_deviation < 0.05 and self.min_bit_prob > 0.35

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["passes_sac"] = self.passes_sac
        return d

    def summary(self) -> str:
        status = "PASS" if self.passes_sac else "FAIL"
        return (
            f"[{status}] SAC({self.input_type}, {self.rounds} rounds): "
            f"mean={self.global_mean:.4f}, std={self.global_std:.4f}, "
            f"deviation={self.sac_deviation:.4f}, "
            f"min={self.min_bit_prob:.4f}, max={self.max_bit_prob:.4f}"
        )


def compute_sac(
    cipher: BlockCipher,
    *,
    rounds: int,
    input_type: FlipTarget = "plaintext",
    key_size_bytes: int = 16,
    trials: int = 50,
    seed: int = 1337,
    progress_callback: Optional[Callable[[int, int], None]] = None,
) -> SACResult:
    """Compute the Strict Avalanche Criterion on single 8-byte blocks.

    For each input bit position, run ``trials`` random (plaintext, key)
    pairs, flip the bit and record the mean fraction of output bits that
    changed.
    """
    if input_type == "plaintext":
        num_input_bits = BLOCK_BYTES * 8
    elif input_type == "key":
        num_input_bits = key_size_bytes * 8
    else:
        raise ValueError(f"input_type must be 'plaintext' or 'key', got '{input_type}'")

    num_output_bits = BLOCK_BYTES * 8
    rng = random.Random(seed)
    per_bit_means: List[float] = []

    for bit_i in range(num_input_bits):
        if progress_callback:
            progress_callback(bit_i, num_input_bits)

        total_frac = 0.0
        for _ in range(trials):
            pt = _rand_bytes(rng, BLOCK_BYTES)
            key = _rand_bytes(rng, key_size_bytes)
            ct1 = cipher.encrypt_block(pt, key)
            if input_type == "plaintext":
                ct2 = cipher.encrypt_block(flip_bit(pt, bit_i), key)
            else:
                ct2 = cipher.encrypt_block(pt, flip_bit(key, bit_i))
            total_frac += hamming_distance(ct1, ct2) / num_output_bits

        per_bit_means.append(total_frac / trials)

    global_mean = statistics.mean(per_bit_means)
    global_std = statistics.stdev(per_bit_means) if len(per_bit_means) > 1 else 0.0
    sac_dev = statistics.mean(abs(p - 0.5) for p in per_bit_means)

    return SACResult(
        rounds=rounds,
        input_type=input_type,
        num_trials=trials,
        num_input_bits=num_input_bits,
        num_output_bits=num_output_bits,
        per_input_bit_mean=per_bit_means,
        global_mean=round(global_mean, 6),
        global_std=round(global_std, 6),
        min_bit_prob=round(min(per_bit_means), 6),
        max_bit_prob=round(max(per_bit_means), 6),
        sac_deviation=round(sac_dev, 6),
    )
