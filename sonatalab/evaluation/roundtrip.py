"""Roundtrip verification P = D(E(P, K, IV), K, IV) for CBC streams.

Generates randomized (plaintext, key, IV) vectors, with plaintext lengths
that hit both aligned and unaligned sizes, and checks that decryption
inverts encryption for every one of them.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from sonatalab.cipher.cbc import decrypt_stream, encrypt_stream
from sonatalab.cipher.errors import SonataError
from sonatalab.cipher.rounds import BLOCK_BYTES

logger = logging.getLogger(__name__)


@dataclass
class RoundtripFailure:
    """Details of a single failed roundtrip test vector."""
    vector_index: int
    plaintext_hex: str
    key_hex: str
    iv_hex: str
    ciphertext_hex: str
    decrypted_hex: str       # What decrypt returned (should equal plaintext)
    error: Optional[str]     # Exception message if decrypt/encrypt raised


@dataclass
class RoundtripResult:
    """Aggregate result of roundtrip testing for one round count."""
    rounds: int
    total_vectors: int
    passed: int
    failed: int
    failures: List[RoundtripFailure] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    seed: int = 1337

    @property
    def success_rate(self) -> float:
        return self.passed / self.total_vectors if self.total_vectors > 0 else 0.0

    @property
    def is_perfect(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def summary(self) -> str:
        status = "PASS" if self.is_perfect else "FAIL"
        return (
            f"[{status}] SONATA ({self.rounds} rounds): "
            f"{self.passed}/{self.total_vectors} vectors passed "
            f"({self.elapsed_seconds:.2f}s)"
        )


def _rand_bytes(rng: random.Random, n: int) -> bytes:
    return bytes(rng.randrange(0, 256) for _ in range(n))


def run_roundtrip_tests(
    rounds: int,
    *,
    num_vectors: int = 200,
    seed: int = 1337,
    max_plaintext_bytes: int = 4 * BLOCK_BYTES,
    max_failures_recorded: int = 10,
) -> RoundtripResult:
    """Run CBC roundtrip verification across many random vectors.

    Args:
        rounds: Round count to test.
        num_vectors: Number of random (plaintext, key, IV) triples.
        seed: Random seed for deterministic reproducibility.
        max_plaintext_bytes: Upper bound on random plaintext length.
        max_failures_recorded: Maximum number of failure details to keep.

    Returns:
        RoundtripResult with pass/fail counts and failure details.
    """
    rng = random.Random(seed)
    passed = 0
    failed = 0
    failures: List[RoundtripFailure] = []

    start = time.perf_counter()

    for i in range(num_vectors):
        pt = _rand_bytes(rng, rng.randrange(0, max_plaintext_bytes + 1))
        key = _rand_bytes(rng, rng.randrange(0, 24))
        iv = _rand_bytes(rng, BLOCK_BYTES)

        try:
            ct = encrypt_stream(pt, key, iv, rounds)
            pt2 = decrypt_stream(ct, key, iv, rounds, strict=True)
        except SonataError as exc:
            failed += 1
            if len(failures) < max_failures_recorded:
                failures.append(RoundtripFailure(
                    vector_index=i,
                    plaintext_hex=pt.hex(),
                    key_hex=key.hex(),
                    iv_hex=iv.hex(),
                    ciphertext_hex="<error>",
                    decrypted_hex="<error>",
                    error=str(exc),
                ))
            continue

        if pt == pt2:
            passed += 1
        else:
            failed += 1
            if len(failures) < max_failures_recorded:
                failures.append(RoundtripFailure(
                    vector_index=i,
                    plaintext_hex=pt.hex(),
                    key_hex=key.hex(),
                    iv_hex=iv.hex(),
                    ciphertext_hex=ct.hex(),
                    decrypted_hex=pt2.hex(),
                    error=None,
                ))

    elapsed = time.perf_counter() - start

    result = RoundtripResult(
        rounds=rounds,
        total_vectors=num_vectors,
        passed=passed,
        failed=failed,
        failures=failures,
        elapsed_seconds=round(elapsed, 4),
        seed=seed,
    )
    logger.info(result.summary())
    return result
