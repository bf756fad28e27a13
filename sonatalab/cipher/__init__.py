"""SONATA block cipher core.

Research / education only. Do NOT use in production.
"""

from .cbc import StreamResult, decrypt_stream, encrypt_stream, encrypt_stream_traced, pad, random_iv, unpad
from .engine import BlockResult, CipherTables, SonataCipher, build_tables, decrypt_block, encrypt_block
from .errors import (
    BlockSizeError,
    CiphertextFormatError,
    PaddingError,
    ScheduleError,
    SonataError,
    TableValidationError,
)
from .key_schedule import (
    KeySchedule,
    derive_key_schedule,
    derive_round_consts8,
    derive_round_masks,
    derive_subkeys,
    normalize_key,
    round_const16,
)
from .pbox import generate_pbox, invert_pbox, permute_bits
from .rounds import RoundParams, decrypt_round, encrypt_round, nibble_shuffle
from .sbox import apply_inv_sbox, apply_sbox, generate_sbox, invert_sbox
from .trace import RoundTrace, merge_block_traces, trace_block

__all__ = [
    "StreamResult",
    "decrypt_stream",
    "encrypt_stream",
    "encrypt_stream_traced",
    "pad",
    "random_iv",
    "unpad",
    "BlockResult",
    "CipherTables",
    "SonataCipher",
    "build_tables",
    "decrypt_block",
    "encrypt_block",
    "BlockSizeError",
    "CiphertextFormatError",
    "PaddingError",
    "ScheduleError",
    "SonataError",
    "TableValidationError",
    "KeySchedule",
    "derive_key_schedule",
    "derive_round_consts8",
    "derive_round_masks",
    "derive_subkeys",
    "normalize_key",
    "round_const16",
    "generate_pbox",
    "invert_pbox",
    "permute_bits",
    "RoundParams",
    "decrypt_round",
    "encrypt_round",
    "nibble_shuffle",
    "apply_inv_sbox",
    "apply_sbox",
    "generate_sbox",
    "invert_sbox",
    "RoundTrace",
    "merge_block_traces",
    "trace_block",
]
