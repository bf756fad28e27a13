import random

import pytest

from sonatalab.cipher.cbc import decrypt_stream, encrypt_stream
from sonatalab.cipher.engine import SonataCipher
from sonatalab.evaluation.roundtrip import run_roundtrip_tests


# ---------------------------------------------------------------------------
# Hand-crafted tests
# ---------------------------------------------------------------------------

def test_block_roundtrip():
    cipher = SonataCipher(rounds=8)
    key = b"K" * 16
    pt = bytes(range(8))
    ct = cipher.encrypt_block(pt, key)
    rt = cipher.decrypt_block(ct, key)
    assert rt == pt


def test_text_roundtrip():
    iv = bytes.fromhex("0011223344556677")
    msg = "Hola, ¿qué tal? SONATA".encode("utf-8")
    ct = encrypt_stream(msg, "clave", iv, 10)
    assert decrypt_stream(ct, "clave", iv, 10).decode("utf-8") == "Hola, ¿qué tal? SONATA"


# ---------------------------------------------------------------------------
# Parametrized: every caller-facing round count
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("rounds", range(4, 13))
def test_roundtrip_runner(rounds):
    result = run_roundtrip_tests(rounds, num_vectors=30, seed=1337)
    assert result.is_perfect, result.failures
    assert result.total_vectors == 30
    assert result.success_rate == 1.0
    assert "PASS" in result.summary()


@pytest.mark.parametrize("rounds", [1, 2, 3, 16])
def test_roundtrip_outside_caller_range(rounds):
    rng = random.Random(rounds)
    for _ in range(20):
        pt = bytes(rng.randrange(0, 256) for _ in range(rng.randrange(0, 33)))
        key = bytes(rng.randrange(0, 256) for _ in range(16))
        iv = bytes(rng.randrange(0, 256) for _ in range(8))
        ct = encrypt_stream(pt, key, iv, rounds)
        assert decrypt_stream(ct, key, iv, rounds, strict=True) == pt, (
            f"roundtrip failed. pt={pt.hex()}, key={key.hex()}, ct={ct.hex()}"
        )


def test_roundtrip_result_serializes():
    d = run_roundtrip_tests(4, num_vectors=3).to_dict()
    assert d["rounds"] == 4
    assert d["failed"] == 0
