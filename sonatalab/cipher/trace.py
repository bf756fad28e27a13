"""Round traces for visualization.

Traces are produced by replaying the forward rounds stage by stage; the
plain encrypt path in :mod:`sonatalab.cipher.rounds` never builds them, so
cipher correctness does not depend on this module.

Presence rules for the optional fields of :class:`RoundTrace`:

* ``after_shift``, ``after_nibble`` and ``round_const`` are always set on
  records produced by :func:`encrypt_round_traced`.
* :func:`merge_block_traces` leaves an optional field as ``None`` when any
  contributing block record lacks it, so a merged record never mixes
  blocks that did and did not report a stage.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .keys import xor_bytes
from .pbox import permute_bits
from .rounds import RoundParams, nibble_shuffle, shift_nibbles_left
from .sbox import apply_sbox


@dataclass(frozen=True)
class RoundTrace:
    """State snapshot after each stage of one forward round (hex strings)."""
    index: int
    state_in: str
    after_sub: str
    subkey: str
    after_permute: str
    state_out: str
    after_shift: Optional[str] = None
    after_nibble: Optional[str] = None
    round_const: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def encrypt_round_traced(state: bytes, params: RoundParams, index: int) -> Tuple[bytes, RoundTrace]:
    """Run one forward round and record every intermediate state."""
    state_in = state.hex()
    state = apply_sbox(state, params.sbox)
    after_sub = state.hex()
    state = shift_nibbles_left(state)
    after_shift = state.hex()
    state = nibble_shuffle(state, params.mask)
    after_nibble = state.hex()
    state = xor_bytes(state, params.subkey)
    state = permute_bits(state, params.pbox)
    after_permute = state.hex()
    state = xor_bytes(state, params.round_const)

    return state, RoundTrace(
        index=index,
        state_in=state_in,
        after_sub=after_sub,
        after_shift=after_shift,
        after_nibble=after_nibble,
        subkey=params.subkey.hex(),
        after_permute=after_permute,
        round_const=params.round_const.hex(),
        state_out=state.hex(),
    )


def trace_block(block: bytes, round_params: Sequence[RoundParams]) -> Tuple[bytes, List[RoundTrace]]:
    """Replay all rounds over one block, returning the output and traces."""
    traces: List[RoundTrace] = []
    state = bytes(block)
    for r, params in enumerate(round_params):
        state, tr = encrypt_round_traced(state, params, r)
        traces.append(tr)
    return state, traces


def _concat_optional(values: List[Optional[str]]) -> Optional[str]:
    if any(v is None for v in values):
        return None
    return "".join(values)  # type: ignore[arg-type]


def merge_block_traces(per_block: Sequence[Sequence[RoundTrace]]) -> List[RoundTrace]:
    """Merge per-block traces into one record per round.

    State fields are concatenated in block order. The subkey and round
    constant are identical for every block of a round, so they are taken
    from the first block.
    """
    if not per_block:
        return []
    merged: List[RoundTrace] = []
    for r in range(len(per_block[0])):
        rows = [block[r] for block in per_block if r < len(block)]
        first = rows[0]
        merged.append(replace(
            first,
            state_in="".join(t.state_in for t in rows),
            after_sub="".join(t.after_sub for t in rows),
            after_shift=_concat_optional([t.after_shift for t in rows]),
            after_nibble=_concat_optional([t.after_nibble for t in rows]),
            after_permute="".join(t.after_permute for t in rows),
            state_out="".join(t.state_out for t in rows),
        ))
    return merged
