"""Differential and linear analysis of the key-dependent 4-bit S-box.

A random permutation of 16 nibbles is rarely optimal; these numbers show
how much confusion a particular key's S-box actually provides.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Sequence

from sonatalab.cipher.errors import TableValidationError
from sonatalab.cipher.keys import KeyMaterial
from sonatalab.cipher.sbox import generate_sbox, invert_sbox


@dataclass
class SBoxAnalysisResult:
    """Structured result of S-box differential/linear analysis."""
    label: str
    table: List[int] = field(default_factory=list)
    ddt_max: int = 0              # Max DDT entry (ideal: 4 for 4-bit)
    lat_max_abs: int = 0          # Max |Walsh| over non-trivial masks (lower = better)
    fixed_points: int = 0         # x with S[x] == x
    is_bijective: bool = False
    differential_uniformity: str = ""  # "good" / "fair" / "poor"
    linearity: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        bij = "bijective" if self.is_bijective else "NOT bijective"
        return (
            f"{self.label}: DDT_max={self.ddt_max} ({self.differential_uniformity}), "
            f"LAT_max={self.lat_max_abs} ({self.linearity}), "
            f"fixed_points={self.fixed_points}, {bij}"
        )


def sbox_ddt_max(sbox: Sequence[int]) -> int:
    """Return max entry in DDT excluding dx=0 (counts, not probability)."""
    n = len(sbox)
    max_v = 0
    for dx in range(1, n):
        counts: Dict[int, int] = {}
        for x in range(n):
            dy = sbox[x] ^ sbox[x ^ dx]
            counts[dy] = counts.get(dy, 0) + 1
        max_v = max(max_v, max(counts.values()))
    return max_v


def sbox_lat_max_abs(sbox: Sequence[int]) -> int:
    """Return max absolute Walsh value for non-trivial masks."""
    n = len(sbox)
    m = int(math.log2(n))
    if 2**m != n:
        raise ValueError("sbox size must be power of 2")
    max_abs = 0
    for a in range(1, n):
        for b in range(1, n):
            s = 0
            for x in range(n):
                ax = (a & x).bit_count() % 2
                bx = (b & sbox[x]).bit_count() % 2
                s += 1 if ax == bx else -1
            max_abs = max(max_abs, abs(s))
    return max_abs


def _rate(value: int, good: int, fair: int) -> str:
    if value <= good:
        return "good"
    if value <= fair:
        return "fair"
    return "poor"


def analyze_sbox(table: Sequence[int], label: str = "sbox") -> SBoxAnalysisResult:
    try:
        invert_sbox(table)
        bijective = True
    except TableValidationError:
        bijective = False

    ddt = sbox_ddt_max(table)
    lat = sbox_lat_max_abs(table)
    return SBoxAnalysisResult(
        label=label,
        table=list(table),
        ddt_max=ddt,
        lat_max_abs=lat,
        fixed_points=sum(1 for x, y in enumerate(table) if x == y),
        is_bijective=bijective,
        differential_uniformity=_rate(ddt, 4, 6),
        linearity=_rate(lat, 8, 12),
    )


def analyze_key_sbox(key: KeyMaterial, label: str = "key sbox") -> SBoxAnalysisResult:
    """Generate the S-box for ``key`` and analyze it."""
    return analyze_sbox(generate_sbox(key), label=label)
