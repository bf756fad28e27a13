import random

import pytest

from sonatalab.cipher.errors import BlockSizeError, TableValidationError
from sonatalab.cipher.pbox import generate_pbox, invert_pbox, permute_bits
from sonatalab.cipher.sbox import generate_sbox

KEYS = ["", "a", "test1234", "another key", b"\x01\x02\x03"]


@pytest.mark.parametrize("key", KEYS)
def test_generate_is_permutation(key):
    pbox = generate_pbox(key)
    assert sorted(pbox) == list(range(64))


@pytest.mark.parametrize("key", KEYS)
def test_generate_is_deterministic(key):
    assert generate_pbox(key) == generate_pbox(key)


def test_pbox_seed_differs_from_sbox_seed():
    # Same key, different seed mix: the first 16 P-box entries are not
    # just the S-box shuffle over a larger range.
    key = "test1234"
    assert list(generate_pbox(key)[:16]) != list(generate_sbox(key))


@pytest.mark.parametrize("key", KEYS)
def test_invert_is_positional(key):
    pbox = generate_pbox(key)
    inv = invert_pbox(pbox)
    assert all(inv[pbox[i]] == i for i in range(64))


def test_invert_rejects_duplicates():
    bad = list(range(64))
    bad[5] = 6
    with pytest.raises(TableValidationError):
        invert_pbox(bad)


def test_invert_rejects_wrong_size():
    with pytest.raises(TableValidationError):
        invert_pbox(list(range(63)))


def test_identity_permutation():
    state = bytes.fromhex("0123456789abcdef")
    assert permute_bits(state, list(range(64))) == state


def test_bit_order_is_msb_first():
    swap_0_7 = list(range(64))
    swap_0_7[0], swap_0_7[7] = 7, 0
    assert permute_bits(b"\x80" + bytes(7), swap_0_7) == b"\x01" + bytes(7)


def test_reversal_moves_first_bit_to_last():
    reverse = [63 - i for i in range(64)]
    assert permute_bits(b"\x80" + bytes(7), reverse) == bytes(7) + b"\x01"


def test_permute_then_inverse_is_identity():
    rng = random.Random(7)
    pbox = generate_pbox("test1234")
    inv = invert_pbox(pbox)
    for _ in range(50):
        state = bytes(rng.randrange(256) for _ in range(8))
        assert permute_bits(permute_bits(state, pbox), inv) == state


def test_permute_preserves_popcount():
    pbox = generate_pbox("k")
    state = bytes.fromhex("f00f00ff00000001")
    out = permute_bits(state, pbox)
    assert sum(b.bit_count() for b in out) == sum(b.bit_count() for b in state)


def test_permute_rejects_wrong_length():
    with pytest.raises(BlockSizeError):
        permute_bits(bytes(7), list(range(64)))
