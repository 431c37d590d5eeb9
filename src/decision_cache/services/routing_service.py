"""Routing policy for the multi-agent analysis path.

Maps a task's complexity score onto a band, then decides whether the
heavier analysis path is skipped, suggested to a human, or auto-approved.
Auto-approval is gated by a per-band config flag and by the historical
approval rate read back from the metrics log, so the policy's own logged
decisions and the human corrections recorded through record_feedback()
steer its future answers.
"""

import logging
import time
from collections.abc import Callable

from decision_cache.config import settings
from decision_cache.dto.store_files import TaskAnalysis
from decision_cache.entities import (
    APPROVING_DECISIONS,
    REJECTING_DECISIONS,
    Band,
    Decision,
    Feedback,
    RoutingDecisionEntity,
)
from decision_cache.exceptions import InvalidArgumentError
from decision_cache.protocols import ConfigStore, MetricsLog, SessionStateStore

logger = logging.getLogger(__name__)

ROUTING_FEATURE = "auto_routing"
AUTO_APPROVE_KEY = "auto_routing.stage2_auto_approve.{band}"
APPROVAL_RATE_THRESHOLD_KEY = "auto_routing.approval_rate_threshold"


class RoutingService:
    """Band-based routing decisions with a learned auto-approval gate.

    Example:
        ```python
        routing = RoutingService(metrics_log=JsonlMetricsLog.create(), config=JsonConfigStore.create())
        decision = routing.decide(TaskAnalysis(complexity_score=42, estimated_tokens=800), token_budget=5000)
        decision.decision  # Decision.SUGGEST until auto-approval is enabled for "moderate"
        ```
    """

    def __init__(
        self,
        metrics_log: MetricsLog,
        config: ConfigStore,
        band_thresholds: tuple[int, ...] | None = None,
        default_rate_threshold: float | None = None,
        session_state: SessionStateStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the routing service.

        Args:
            metrics_log: Decision sink and approval-rate source.
            config: Per-band auto-approve flags and the rate threshold.
            band_thresholds: Lower bounds of moderate, complex and very_complex.
                Defaults to settings.band_thresholds.
            default_rate_threshold: Used when config has no valid threshold.
                Defaults to settings.approval_rate_threshold.
            session_state: Source of the analyzer output for decide_from_session().
            clock: Source of the current Unix time.

        Raises:
            InvalidArgumentError: If thresholds are not three strictly increasing
                values or the rate threshold is outside [0, 1]
        """
        thresholds = tuple(band_thresholds or settings.band_thresholds)
        if len(thresholds) != 3 or any(a >= b for a, b in zip(thresholds, thresholds[1:])):
            raise InvalidArgumentError(
                f"band thresholds must be three strictly increasing values, got {thresholds}"
            )

        rate = settings.approval_rate_threshold if default_rate_threshold is None else default_rate_threshold
        if not 0 <= rate <= 1:
            raise InvalidArgumentError(f"approval rate threshold must be between 0 and 1, got {rate}")

        self._metrics = metrics_log
        self._config = config
        self._thresholds = thresholds
        self._default_rate_threshold = rate
        self._session_state = session_state
        self._clock = clock

    def band_for(self, complexity_score: int) -> Band:
        """Map a complexity score to its band; each lower bound belongs to the higher band."""
        moderate, complex_, very_complex = self._thresholds
        if complexity_score < moderate:
            return Band.SIMPLE
        if complexity_score < complex_:
            return Band.MODERATE
        if complexity_score < very_complex:
            return Band.COMPLEX
        return Band.VERY_COMPLEX

    def rate_threshold(self) -> float:
        """Approval rate needed for auto-approval, read from config on every call."""
        value = self._config.get_float(APPROVAL_RATE_THRESHOLD_KEY, self._default_rate_threshold)
        if not 0 <= value <= 1:
            logger.warning(
                "%s=%s is outside [0, 1]; using %s",
                APPROVAL_RATE_THRESHOLD_KEY,
                value,
                self._default_rate_threshold,
            )
            return self._default_rate_threshold
        return value

    def approval_rate(
        self,
        band: Band | str,
        since: float | None = None,
        until: float | None = None,
    ) -> float:
        """Share of approving outcomes among logged outcomes for a band.

        Approvals are auto_approve and user_approve decisions, rejections are
        user_reject decisions. Skip and suggest decisions are ignored.

        Args:
            band: The complexity band
            since: Only count events at or after this Unix time
            until: Only count events at or before this Unix time

        Returns:
            approvals / (approvals + rejections), 0.0 when there are neither

        Raises:
            InvalidArgumentError: For an unknown band
        """
        try:
            band = Band(band)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e
        approvals = 0
        rejections = 0
        for event in self._metrics.iter_events(
            event_type="decision",
            feature=ROUTING_FEATURE,
            decisions=APPROVING_DECISIONS + REJECTING_DECISIONS,
            band=band.value,
            since=since,
            until=until,
        ):
            if event["data"]["decision"] in APPROVING_DECISIONS:
                approvals += 1
            else:
                rejections += 1

        total = approvals + rejections
        if total == 0:
            return 0.0
        return approvals / total

    def _approval_gate(self, band: Band) -> tuple[Decision, str, float | None]:
        if not self._config.get_bool(AUTO_APPROVE_KEY.format(band=band.value), False):
            noun = "tasks" if band is Band.COMPLEX else "complexity"
            return Decision.SUGGEST, f"Auto-approval disabled for {band.value} {noun}", None

        rate = self.approval_rate(band)
        threshold = self.rate_threshold()
        if rate >= threshold:
            return (
                Decision.AUTO_APPROVE,
                f"Auto-approved based on learning (approval_rate={rate:.2f}, threshold={threshold:.2f})",
                rate,
            )
        return (
            Decision.SUGGEST,
            f"Approval rate ({rate:.2f}) below threshold ({threshold:.2f})",
            rate,
        )

    def decide(self, analysis: TaskAnalysis, token_budget: int = 0) -> RoutingDecisionEntity:
        """Decide how to route a task and log the decision.

        - simple: skip
        - very_complex: suggest
        - complex: suggest when the budget is missing or below the estimate,
          otherwise the auto-approval gate
        - moderate: the auto-approval gate

        Args:
            analysis: Analyzer output (score, pattern, token estimate)
            token_budget: Tokens available; 0 or less means no budget

        Returns:
            The decision, already appended to the metrics log
        """
        score = analysis.complexity_score
        tokens = analysis.estimated_tokens
        band = self.band_for(score)
        approval_rate: float | None = None

        logger.debug(
            "Complexity: %d, Pattern: %s, Cost: %d tokens, Band: %s",
            score,
            analysis.recommended_pattern,
            tokens,
            band.value,
        )

        if band is Band.SIMPLE:
            decision = Decision.SKIP
            reason = f"Complexity too low ({score}), multi-agent not needed"
        elif band is Band.VERY_COMPLEX:
            decision = Decision.SUGGEST
            reason = "Very complex tasks always require user approval"
        elif band is Band.COMPLEX and (token_budget <= 0 or token_budget < tokens):
            decision = Decision.SUGGEST
            reason = f"Insufficient token budget ({token_budget} < {tokens})"
        else:
            decision, reason, approval_rate = self._approval_gate(band)

        result = RoutingDecisionEntity(
            band=band,
            decision=decision,
            reason=reason,
            recorded_at=self._clock(),
            complexity_score=score,
            recommended_pattern=analysis.recommended_pattern,
            estimated_tokens=tokens,
            approval_rate=approval_rate,
        )
        self._metrics.log_decision(ROUTING_FEATURE, decision.value, reason, result.event_metadata())
        logger.debug("Decision: %s (%s)", decision.value, reason)
        return result

    def decide_from_session(self, token_budget: int = 0) -> RoutingDecisionEntity | None:
        """Decide using the analysis stored in the session state file.

        Returns:
            The decision, or None while no analysis is available ("pending_analysis")
        """
        if self._session_state is None:
            raise InvalidArgumentError("RoutingService has no session state repository")

        analysis = self._session_state.load_task_analysis()
        if analysis is None:
            logger.debug("No task analysis available (analyzer not yet invoked)")
            return None
        return self.decide(analysis, token_budget)

    def record_feedback(self, band: Band | str, feedback: Feedback | str, reason: str = "") -> None:
        """Log a human approval or rejection for a band.

        Args:
            band: The band the suggestion was made for
            feedback: user_approve or user_reject
            reason: Optional note stored with the event

        Raises:
            InvalidArgumentError: For an unknown band or feedback value
        """
        try:
            band = Band(band)
            feedback = Feedback(feedback)
        except ValueError as e:
            raise InvalidArgumentError(str(e)) from e

        self._metrics.log_decision(
            ROUTING_FEATURE,
            feedback.value,
            reason or f"User feedback for {band.value} band",
            {"complexity_band": band.value},
        )

    @property
    def band_thresholds(self) -> tuple[int, ...]:
        return self._thresholds
