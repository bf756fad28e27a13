import pytest

from sonatalab.cipher.cbc import encrypt_stream
from sonatalab.cipher.engine import SonataCipher
from sonatalab.evaluation.avalanche import (
    avalanche_trials,
    compute_sac,
    flip_bit,
    hamming_distance,
    measure_avalanche,
    per_byte_diff,
)

IV0 = bytes(8)


def test_flip_bit_msb_first():
    assert flip_bit(bytes(2), 0) == b"\x80\x00"
    assert flip_bit(bytes(2), 7) == b"\x01\x00"
    assert flip_bit(bytes(2), 15) == b"\x00\x01"
    assert flip_bit(flip_bit(b"\x5a", 3), 3) == b"\x5a"


@pytest.mark.parametrize("bit", [-1, 16])
def test_flip_bit_out_of_range(bit):
    with pytest.raises(IndexError):
        flip_bit(bytes(2), bit)


def test_hamming_and_per_byte():
    a, b = b"\x00\xff\x0f", b"\x01\x00\x0f"
    assert hamming_distance(a, b) == 9
    assert per_byte_diff(a, b) == [1, 8, 0]
    with pytest.raises(ValueError):
        hamming_distance(b"\x00", b"\x00\x00")


def test_measure_plaintext_flip():
    res = measure_avalanche(bytes(8), "test1234", IV0, 8, target="plaintext", bit_index=5)
    assert res.baseline_hex == encrypt_stream(bytes(8), "test1234", IV0, 8).hex()
    assert res.flipped_hex == encrypt_stream(flip_bit(bytes(8), 5), "test1234", IV0, 8).hex()
    assert res.total_bits == 128
    assert len(res.per_byte) == 16
    assert sum(res.per_byte) == res.diff_bits
    assert 0 < res.diff_bits <= res.total_bits
    assert res.percent == pytest.approx(res.diff_bits / 128 * 100)
    assert "plaintext bit 5" in res.summary()


def test_measure_key_flip():
    res = measure_avalanche(b"hello", "test1234", IV0, 8, target="key", bit_index=63)
    assert res.target == "key"
    assert res.diff_bits > 0
    assert res.to_dict()["percent"] == res.percent


def test_measure_key_bit_out_of_range():
    with pytest.raises(IndexError):
        measure_avalanche(bytes(8), "abc", IV0, 8, target="key", bit_index=24)


def test_measure_rejects_unknown_target():
    with pytest.raises(ValueError):
        measure_avalanche(bytes(8), "k", IV0, 8, target="iv", bit_index=0)


def test_measure_does_not_mutate_inputs():
    pt = bytearray(8)
    measure_avalanche(bytes(pt), "k", IV0, 4, bit_index=1)
    assert pt == bytearray(8)


@pytest.mark.parametrize("target", ["plaintext", "key"])
def test_avalanche_plausible_after_full_rounds(target):
    stats = avalanche_trials(8, trials=40, target=target, seed=2024)
    assert stats.trials == 40
    assert len(stats.percents) == 40
    assert 20.0 <= stats.mean_percent <= 80.0
    assert stats.plausible
    assert stats.min_percent <= stats.mean_percent <= stats.max_percent


def test_avalanche_trials_reproducible():
    a = avalanche_trials(4, trials=5, seed=9)
    b = avalanche_trials(4, trials=5, seed=9)
    assert a.percents == b.percents


def test_sac_shape():
    res = compute_sac(SonataCipher(rounds=4), rounds=4, trials=2, seed=1)
    assert res.num_input_bits == 64
    assert res.num_output_bits == 64
    assert len(res.per_input_bit_mean) == 64
    assert all(0.0 <= p <= 1.0 for p in res.per_input_bit_mean)
    assert res.min_bit_prob <= res.global_mean <= res.max_bit_prob
    assert "SAC(plaintext" in res.summary()


def test_sac_key_bits_and_bad_input():
    res = compute_sac(SonataCipher(rounds=4), rounds=4, input_type="key", key_size_bytes=2, trials=1)
    assert res.num_input_bits == 16
    with pytest.raises(ValueError):
        compute_sac(SonataCipher(), rounds=8, input_type="iv")
