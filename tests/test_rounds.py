import random

import pytest

from sonatalab.cipher.engine import build_tables
from sonatalab.cipher.rounds import (
    decrypt_round,
    encrypt_round,
    nibble_shuffle,
    shift_nibbles_left,
    shift_nibbles_right,
)

STATE = bytes.fromhex("0123456789abcdef")


def test_shift_nibbles_left_rotates_row_r_by_r():
    assert shift_nibbles_left(STATE) == bytes.fromhex("01235674ab89fcde")


def test_shift_nibbles_right_inverts_left():
    rng = random.Random(3)
    for _ in range(50):
        s = bytes(rng.randrange(256) for _ in range(8))
        assert shift_nibbles_right(shift_nibbles_left(s)) == s
        assert shift_nibbles_left(shift_nibbles_right(s)) == s


def test_nibble_shuffle_swaps_selected_bytes():
    assert nibble_shuffle(STATE, 0x00) == STATE
    assert nibble_shuffle(STATE, 0x01) == bytes.fromhex("1023456789abcdef")
    assert nibble_shuffle(STATE, 0x80) == bytes.fromhex("0123456789abcdfe")
    assert nibble_shuffle(STATE, 0xFF) == bytes.fromhex("1032547698badcfe")


@pytest.mark.parametrize("mask", [0x00, 0x01, 0x5A, 0xA5, 0xFF])
def test_nibble_shuffle_self_inverse(mask):
    rng = random.Random(mask)
    for _ in range(20):
        s = bytes(rng.randrange(256) for _ in range(8))
        assert nibble_shuffle(nibble_shuffle(s, mask), mask) == s


@pytest.mark.parametrize("key", ["", "test1234", "k3y!"])
def test_single_round_inverse(key):
    tables = build_tables(key, 8)
    rng = random.Random(11)
    for r in range(8):
        params = tables.round_params(r)
        for _ in range(10):
            s = bytes(rng.randrange(256) for _ in range(8))
            assert decrypt_round(encrypt_round(s, params), params) == s


def test_round_changes_state():
    params = build_tables("test1234", 1).round_params(0)
    assert encrypt_round(bytes(8), params) != bytes(8)
