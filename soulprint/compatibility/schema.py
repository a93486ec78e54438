"""Compatibility result schema."""

from dataclasses import dataclass, field
from typing import Dict, Any, List

METHODS = ["cosine", "dimensional", "harmony", "complementary"]


@dataclass
class CompatibilityResult:
    """
    Result of scoring two personality vectors.

    Attributes:
        overall: Weighted combination of the method scores [0, 1]
        confidence: Lesser of the two input confidences [0, 1]
        methods: Score of each method (cosine, dimensional, harmony, complementary)
        block_scores: Per-block similarity from the dimensional analysis
        alignments: Blocks with similarity above the alignment threshold, best first
        differences: Blocks with similarity below the difference threshold, worst first
        forces: Attraction, repulsion and the factors behind them
        evidence: Short readable notes explaining the score
        insufficient_data: True when one side had no profile and the result is a default
    """
    overall: float
    confidence: float
    methods: Dict[str, float]
    block_scores: Dict[str, float] = field(default_factory=dict)
    alignments: List[str] = field(default_factory=list)
    differences: List[str] = field(default_factory=list)
    forces: Dict[str, float] = field(default_factory=dict)
    evidence: List[str] = field(default_factory=list)
    insufficient_data: bool = False

    def block(self, name: str, default: float = 0.5) -> float:
        """Dimensional similarity of one block, or default if not scored."""
        return float(self.block_scores.get(name, default))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "overall": float(self.overall),
            "confidence": float(self.confidence),
            "methods": {k: float(v) for k, v in self.methods.items()},
            "block_scores": {k: float(v) for k, v in self.block_scores.items()},
            "alignments": list(self.alignments),
            "differences": list(self.differences),
            "forces": {k: float(v) for k, v in self.forces.items()},
            "evidence": list(self.evidence),
            "insufficient_data": bool(self.insufficient_data)
        }

    def summary(self) -> str:
        """Generate text summary of the result."""
        lines = [
            f"Overall compatibility: {self.overall:.2%} (confidence {self.confidence:.2f})",
        ]
        for name in METHODS:
            if name in self.methods:
                lines.append(f"  {name}: {self.methods[name]:.4f}")
        if self.alignments:
            lines.append(f"  Alignments: {', '.join(self.alignments)}")
        if self.differences:
            lines.append(f"  Differences: {', '.join(self.differences)}")
        return "\n".join(lines)
