"""Structured evaluation report builder.

Aggregates roundtrip, avalanche, SAC and S-box results into a single
serializable report for export and terminal display.

Research / education only. Do NOT use in production.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .avalanche import AvalancheStats, SACResult
from .roundtrip import RoundtripResult
from .sbox_analysis import SBoxAnalysisResult


@dataclass
class EvaluationReport:
    """Complete evaluation report aggregating all analysis results."""
    timestamp: str = ""
    roundtrip_results: List[RoundtripResult] = field(default_factory=list)
    avalanche_results: List[AvalancheStats] = field(default_factory=list)
    sac_results: List[SACResult] = field(default_factory=list)
    sbox_result: Optional[SBoxAnalysisResult] = None

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize full report for JSON export."""
        return {
            "timestamp": self.timestamp,
            "roundtrip": [r.to_dict() for r in self.roundtrip_results],
            "avalanche": [a.to_dict() for a in self.avalanche_results],
            "sac": [s.to_dict() for s in self.sac_results],
            "sbox": self.sbox_result.to_dict() if self.sbox_result else None,
            "summary": {
                "roundtrip_all_pass": all(r.is_perfect for r in self.roundtrip_results),
                "avalanche_all_plausible": all(a.plausible for a in self.avalanche_results),
                "sac_all_pass": all(s.passes_sac for s in self.sac_results),
            },
        }

    def to_summary(self) -> str:
        """Human-readable summary."""
        lines = [f"Evaluation Report — {self.timestamp}", "=" * 50]

        if self.roundtrip_results:
            rt_pass = sum(1 for r in self.roundtrip_results if r.is_perfect)
            lines.append(f"\nRoundtrip Tests: {rt_pass}/{len(self.roundtrip_results)} round counts pass")
            for r in self.roundtrip_results:
                lines.append(f"  {r.summary()}")

        if self.avalanche_results:
            lines.append("\nAvalanche:")
            for a in self.avalanche_results:
                lines.append(f"  {a.summary()}")

        if self.sac_results:
            sac_pass = sum(1 for s in self.sac_results if s.passes_sac)
            lines.append(f"\nSAC Analysis: {sac_pass}/{len(self.sac_results)} pass")
            for s in self.sac_results:
                lines.append(f"  {s.summary()}")

        if self.sbox_result:
            lines.append("\nS-box Analysis:")
            lines.append(f"  {self.sbox_result.summary()}")

        return "\n".join(lines)
