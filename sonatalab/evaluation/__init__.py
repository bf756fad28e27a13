"""Evaluation of the SONATA cipher: roundtrip verification, avalanche
statistics, SAC and S-box analysis.

Research / education only. Do NOT use in production.
"""

from .avalanche import (
    AvalancheResult,
    AvalancheStats,
    SACResult,
    avalanche_trials,
    compute_sac,
    flip_bit,
    hamming_distance,
    measure_avalanche,
)
from .report import EvaluationReport
from .roundtrip import RoundtripFailure, RoundtripResult, run_roundtrip_tests
from .sbox_analysis import SBoxAnalysisResult, analyze_key_sbox, analyze_sbox

__all__ = [
    "AvalancheResult",
    "AvalancheStats",
    "SACResult",
    "avalanche_trials",
    "compute_sac",
    "flip_bit",
    "hamming_distance",
    "measure_avalanche",
    "EvaluationReport",
    "RoundtripFailure",
    "RoundtripResult",
    "run_roundtrip_tests",
    "SBoxAnalysisResult",
    "analyze_key_sbox",
    "analyze_sbox",
]
