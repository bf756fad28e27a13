from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator


class Settings(BaseModel):
    # Cipher defaults (the core itself only needs rounds > 0)
    default_rounds: int = Field(default=8, ge=1)
    min_rounds: int = Field(default=4, ge=1, description="Smallest round count accepted from callers")
    max_rounds: int = Field(default=12, ge=1, description="Largest round count accepted from callers")

    # Table cache
    table_cache: bool = Field(default=False)
    table_cache_size: int = Field(default=128, ge=1)

    # Evaluation
    avalanche_trials: int = Field(default=200, ge=1)
    sac_trials: int = Field(default=50, ge=1)
    roundtrip_vectors: int = Field(default=200, ge=1)

    # Reproducibility
    global_seed: int = Field(default=1337)

    # Logging / output
    log_level: str = Field(default="INFO")
    runs_dir: str = Field(default="runs")

    @model_validator(mode="after")
    def _round_range(self) -> "Settings":
        if self.min_rounds > self.max_rounds:
            raise ValueError("min_rounds must not exceed max_rounds")
        return self


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    def _bool(name: str, default: bool) -> bool:
        v = os.getenv(name)
        if v is None:
            return default
        return v.strip().lower() in {"1", "true", "yes", "y", "on"}

    return Settings(
        default_rounds=int(os.getenv("SONATA_DEFAULT_ROUNDS", "8")),
        min_rounds=int(os.getenv("SONATA_MIN_ROUNDS", "4")),
        max_rounds=int(os.getenv("SONATA_MAX_ROUNDS", "12")),
        table_cache=_bool("SONATA_TABLE_CACHE", False),
        table_cache_size=int(os.getenv("SONATA_TABLE_CACHE_SIZE", "128")),
        avalanche_trials=int(os.getenv("SONATA_AVALANCHE_TRIALS", "200")),
        sac_trials=int(os.getenv("SONATA_SAC_TRIALS", "50")),
        roundtrip_vectors=int(os.getenv("SONATA_ROUNDTRIP_VECTORS", "200")),
        global_seed=int(os.getenv("GLOBAL_SEED", "1337")),
        log_level=os.getenv("SONATA_LOG_LEVEL", "INFO"),
        runs_dir=os.getenv("SONATA_RUNS_DIR", "runs"),
    )
