"""Routing policy domain entities."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Band(str, Enum):
    """Complexity band derived from a task's complexity score."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    VERY_COMPLEX = "very_complex"


class Decision(str, Enum):
    """Outcome of a routing request."""

    SKIP = "skip"
    SUGGEST = "suggest"
    AUTO_APPROVE = "auto_approve"


class Feedback(str, Enum):
    """Human correction recorded against a band after a suggestion."""

    USER_APPROVE = "user_approve"
    USER_REJECT = "user_reject"


# Logged decisions counted on each side of the approval rate
APPROVING_DECISIONS = (Decision.AUTO_APPROVE.value, Feedback.USER_APPROVE.value)
REJECTING_DECISIONS = (Feedback.USER_REJECT.value,)


@dataclass(frozen=True)
class RoutingDecisionEntity:
    """An immutable routing decision.

    Attributes:
        band: Complexity band the score fell into
        decision: skip, suggest or auto_approve
        reason: Human-readable explanation, includes rate and threshold when the
            approval-rate gate ran
        recorded_at: Unix time the decision was made
        complexity_score: Score the band was derived from
        recommended_pattern: Execution pattern proposed by the analyzer
        estimated_tokens: Token cost estimated by the analyzer
        approval_rate: Approval rate consulted, None if the gate did not run
    """

    band: Band
    decision: Decision
    reason: str
    recorded_at: float
    complexity_score: int = 0
    recommended_pattern: str = "single"
    estimated_tokens: int = 0
    approval_rate: float | None = None

    def event_metadata(self) -> dict[str, Any]:
        """Metadata block written to the metrics log."""
        return {
            "complexity_band": self.band.value,
            "complexity_score": self.complexity_score,
            "recommended_pattern": self.recommended_pattern,
            "estimated_tokens": self.estimated_tokens,
        }
