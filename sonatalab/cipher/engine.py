"""Single-block SONATA encryption and decryption.

Every call regenerates the S-box, P-box and key schedule from the key
material, so the engine holds no state between calls. An optional LRU
cache keyed by ``(key bytes, rounds)`` can be switched on through
``SONATA_TABLE_CACHE``; it only saves recomputation.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, List, Optional

from ..config import load_settings
from .errors import BlockSizeError, ScheduleError
from .key_schedule import KeySchedule, derive_key_schedule
from .keys import KeyMaterial, key_bytes
from .pbox import PBox, generate_pbox, invert_pbox
from .rounds import BLOCK_BYTES, RoundParams, decrypt_round, encrypt_round
from .sbox import SBox, generate_sbox, invert_sbox
from .trace import RoundTrace, trace_block

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CipherTables:
    """S-box, P-box, their inverses and the key schedule for one key."""
    sbox: SBox
    inv_sbox: SBox
    pbox: PBox
    inv_pbox: PBox
    schedule: KeySchedule

    @property
    def rounds(self) -> int:
        return self.schedule.rounds

    def round_params(self, r: int) -> RoundParams:
        return RoundParams(
            sbox=self.sbox,
            inv_sbox=self.inv_sbox,
            pbox=self.pbox,
            inv_pbox=self.inv_pbox,
            subkey=self.schedule.subkeys[r],
            round_const=self.schedule.round_consts[r],
            mask=self.schedule.masks[r],
        )

    def all_round_params(self) -> List[RoundParams]:
        return [self.round_params(r) for r in range(self.rounds)]


def build_tables(key: KeyMaterial, rounds: int) -> CipherTables:
    """Generate every key-dependent table once."""
    sbox = generate_sbox(key)
    pbox = generate_pbox(key)
    return CipherTables(
        sbox=sbox,
        inv_sbox=invert_sbox(sbox),
        pbox=pbox,
        inv_pbox=invert_pbox(pbox),
        schedule=derive_key_schedule(key, rounds, sbox),
    )


@lru_cache(maxsize=1)
def _cached_builder(maxsize: int) -> Callable[[bytes, int], CipherTables]:
    return lru_cache(maxsize=maxsize)(build_tables)


def get_tables(key: KeyMaterial, rounds: int, *, use_cache: Optional[bool] = None) -> CipherTables:
    """Return tables for ``(key, rounds)``, through the LRU cache if enabled."""
    settings = load_settings()
    if use_cache is None:
        use_cache = settings.table_cache
    if use_cache:
        return _cached_builder(settings.table_cache_size)(key_bytes(key), rounds)
    return build_tables(key, rounds)


def clear_table_cache() -> None:
    _cached_builder.cache_clear()


def _check_block(block: bytes) -> None:
    if len(block) != BLOCK_BYTES:
        raise BlockSizeError(f"Block must be {BLOCK_BYTES} bytes, got {len(block)}")


def _resolve_tables(key: KeyMaterial, rounds: int, tables: Optional[CipherTables]) -> CipherTables:
    if tables is None:
        return get_tables(key, rounds)
    if tables.rounds != rounds:
        raise ScheduleError(f"Tables hold {tables.rounds} rounds, {rounds} requested")
    return tables


@dataclass
class BlockResult:
    ciphertext: bytes
    sbox: SBox
    pbox: PBox
    traces: List[RoundTrace] = field(default_factory=list)


def encrypt_block(
    block: bytes,
    rounds: int,
    key: KeyMaterial,
    *,
    trace: bool = False,
    tables: Optional[CipherTables] = None,
) -> BlockResult:
    """Encrypt one 8-byte block, rounds 0..R-1.

    With ``trace=True`` the rounds are replayed through
    :func:`sonatalab.cipher.trace.trace_block` to collect one record per
    round; the returned ciphertext always comes from the plain path.
    """
    _check_block(block)
    tables = _resolve_tables(key, rounds, tables)

    state = bytes(block)
    for r in range(rounds):
        state = encrypt_round(state, tables.round_params(r))

    traces: List[RoundTrace] = []
    if trace:
        _, traces = trace_block(block, tables.all_round_params())

    return BlockResult(ciphertext=state, sbox=tables.sbox, pbox=tables.pbox, traces=traces)


def decrypt_block(
    block: bytes,
    rounds: int,
    key: KeyMaterial,
    *,
    tables: Optional[CipherTables] = None,
) -> bytes:
    """Decrypt one 8-byte block, rounds R-1..0."""
    _check_block(block)
    tables = _resolve_tables(key, rounds, tables)

    state = bytes(block)
    for r in reversed(range(rounds)):
        state = decrypt_round(state, tables.round_params(r))
    return state


class BlockCipher:
    def encrypt_block(self, plaintext_block: bytes, key: bytes) -> bytes:  # pragma: no cover
        raise NotImplementedError

    def decrypt_block(self, ciphertext_block: bytes, key: bytes) -> bytes:  # pragma: no cover
        raise NotImplementedError


@dataclass
class SonataCipher(BlockCipher):
    """SONATA with a fixed round count, keyed per call."""
    rounds: int = 8

    def encrypt_block(self, plaintext_block: bytes, key: bytes) -> bytes:
        return encrypt_block(plaintext_block, self.rounds, key).ciphertext

    def decrypt_block(self, ciphertext_block: bytes, key: bytes) -> bytes:
        return decrypt_block(ciphertext_block, self.rounds, key)
