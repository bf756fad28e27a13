from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..config import Settings, load_settings
from .keys import key_bytes
from .rounds import BLOCK_BYTES


class CipherParams(BaseModel):
    """Caller-side parameters for one encrypt/decrypt request.

    The core accepts any positive round count; requests coming from the
    command line are held to the configured ``min_rounds..max_rounds``.
    """

    key: bytes = Field(default=b"")
    rounds: int = Field(default=8, ge=1)
    iv: Optional[bytes] = Field(default=None, description="8-byte IV; random on encrypt when omitted")

    @field_validator("key", mode="before")
    @classmethod
    def _key_bytes(cls, v):
        if isinstance(v, (str, bytearray)):
            return key_bytes(v)
        return v

    @field_validator("iv")
    @classmethod
    def _iv_len(cls, v: Optional[bytes]) -> Optional[bytes]:
        if v is not None and len(v) != BLOCK_BYTES:
            raise ValueError(f"iv must be {BLOCK_BYTES} bytes, got {len(v)}")
        return v

    @model_validator(mode="after")
    def _rounds_in_range(self) -> "CipherParams":
        settings = load_settings()
        check_round_range(self.rounds, settings)
        return self


def check_round_range(rounds: int, settings: Settings) -> None:
    if not settings.min_rounds <= rounds <= settings.max_rounds:
        raise ValueError(
            f"rounds must be in {settings.min_rounds}..{settings.max_rounds}, got {rounds}"
        )
