"""CBC chaining over the SONATA block engine.

Plaintext is PKCS-style padded to a multiple of 8 bytes (an aligned
message still gets a full padding block), then each block is XORed with
the previous ciphertext block (the IV for the first) before encryption.

There is no integrity check. Decrypting with the wrong key, IV or round
count yields garbage rather than an error.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from typing import List

from .engine import decrypt_block, encrypt_block, get_tables
from .errors import BlockSizeError, CiphertextFormatError, PaddingError
from .keys import KeyMaterial, xor_bytes
from .rounds import BLOCK_BYTES
from .sbox import SBox
from .pbox import PBox
from .trace import RoundTrace, merge_block_traces

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Padding / IV
# ---------------------------------------------------------------------------

def pad(data: bytes, block_size: int = BLOCK_BYTES) -> bytes:
    """Append 1..block_size bytes, each equal to the pad length."""
    pad_len = block_size - (len(data) % block_size)
    return bytes(data) + bytes([pad_len]) * pad_len


def unpad(data: bytes) -> bytes:
    """Strip PKCS-style padding.

    Raises:
        PaddingError: if the buffer is empty or the last byte is 0 or
            larger than the buffer.
    """
    if not data:
        raise PaddingError("Cannot unpad an empty buffer")
    pad_len = data[-1]
    if pad_len == 0 or pad_len > len(data):
        raise PaddingError(f"Invalid pad length {pad_len} for {len(data)}-byte buffer")
    return bytes(data[:-pad_len])


def random_iv() -> bytes:
    return secrets.token_bytes(BLOCK_BYTES)


def _check_iv(iv: bytes) -> None:
    if len(iv) != BLOCK_BYTES:
        raise BlockSizeError(f"IV must be {BLOCK_BYTES} bytes, got {len(iv)}")


def _blocks(data: bytes) -> List[bytes]:
    return [data[o:o + BLOCK_BYTES] for o in range(0, len(data), BLOCK_BYTES)]


# ---------------------------------------------------------------------------
# Encrypt / decrypt
# ---------------------------------------------------------------------------

@dataclass
class StreamResult:
    """CBC ciphertext plus the per-round traces merged across blocks."""
    ciphertext: bytes
    iv: bytes
    sbox: SBox
    pbox: PBox
    traces: List[RoundTrace] = field(default_factory=list)


def encrypt_stream_traced(plaintext: bytes, key: KeyMaterial, iv: bytes, rounds: int) -> StreamResult:
    """Encrypt ``plaintext`` in CBC mode and collect round traces."""
    _check_iv(iv)
    tables = get_tables(key, rounds)
    padded = pad(plaintext)

    out = bytearray()
    prev = bytes(iv)
    per_block: List[List[RoundTrace]] = []
    for block in _blocks(padded):
        res = encrypt_block(xor_bytes(block, prev), rounds, key, trace=True, tables=tables)
        out += res.ciphertext
        prev = res.ciphertext
        per_block.append(res.traces)

    logger.debug("CBC encrypted %d blocks (%d rounds, traced)", len(per_block), rounds)
    return StreamResult(
        ciphertext=bytes(out),
        iv=bytes(iv),
        sbox=tables.sbox,
        pbox=tables.pbox,
        traces=merge_block_traces(per_block),
    )


def encrypt_stream(plaintext: bytes, key: KeyMaterial, iv: bytes, rounds: int) -> bytes:
    """Encrypt ``plaintext`` in CBC mode; output length is a multiple of 8."""
    _check_iv(iv)
    tables = get_tables(key, rounds)
    padded = pad(plaintext)

    out = bytearray()
    prev = bytes(iv)
    for block in _blocks(padded):
        prev = encrypt_block(xor_bytes(block, prev), rounds, key, tables=tables).ciphertext
        out += prev

    logger.debug("CBC encrypted %d blocks (%d rounds)", len(padded) // BLOCK_BYTES, rounds)
    return bytes(out)


def decrypt_stream(
    ciphertext: bytes,
    key: KeyMaterial,
    iv: bytes,
    rounds: int,
    *,
    strict: bool = False,
) -> bytes:
    """Decrypt CBC ``ciphertext`` and strip the padding.

    With ``strict=False`` an invalid trailing pad byte leaves the
    decrypted buffer as is (and logs a warning); with ``strict=True`` it
    raises :class:`PaddingError`.

    Raises:
        CiphertextFormatError: if the length is not a positive multiple of 8.
    """
    _check_iv(iv)
    if not ciphertext or len(ciphertext) % BLOCK_BYTES:
        raise CiphertextFormatError(
            f"Ciphertext length must be a positive multiple of {BLOCK_BYTES}, got {len(ciphertext)}"
        )
    tables = get_tables(key, rounds)

    out = bytearray()
    prev = bytes(iv)
    for block in _blocks(bytes(ciphertext)):
        out += xor_bytes(decrypt_block(block, rounds, key, tables=tables), prev)
        prev = block

    try:
        return unpad(bytes(out))
    except PaddingError as exc:
        if strict:
            raise
        logger.warning("Returning unpadded buffer: %s", exc)
        return bytes(out)
