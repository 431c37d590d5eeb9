"""HTTP handlers for routing decisions."""

from fastapi import HTTPException, status

from decision_cache.dto import (
    ApprovalRateResponse,
    FeedbackRequest,
    RoutingDecideRequest,
    RoutingDecisionResponse,
    TaskAnalysis,
)
from decision_cache.entities import Band, RoutingDecisionEntity
from decision_cache.exceptions import InvalidArgumentError
from decision_cache.services import RoutingService


class RoutingHandler:
    """HTTP handlers delegating to RoutingService."""

    def __init__(self, routing_service: RoutingService) -> None:
        self._routing = routing_service

    @staticmethod
    def _to_response(decision: RoutingDecisionEntity) -> RoutingDecisionResponse:
        return RoutingDecisionResponse(
            band=decision.band,
            decision=decision.decision,
            reason=decision.reason,
            recorded_at=decision.recorded_at,
            complexity_score=decision.complexity_score,
            recommended_pattern=decision.recommended_pattern,
            estimated_tokens=decision.estimated_tokens,
            approval_rate=decision.approval_rate,
        )

    def decide(self, request: RoutingDecideRequest) -> RoutingDecisionResponse:
        """Handle POST /routing/decide requests."""
        analysis = TaskAnalysis.model_validate(request.model_dump(exclude={"token_budget"}))
        try:
            decision = self._routing.decide(analysis, token_budget=request.token_budget)
        except OSError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to log decision: {e}",
            ) from e
        return self._to_response(decision)

    def record_feedback(self, request: FeedbackRequest) -> dict:
        """Handle POST /routing/feedback requests."""
        try:
            self._routing.record_feedback(request.band, request.feedback, request.reason)
        except InvalidArgumentError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        return {
            "success": True,
            "band": request.band.value,
            "feedback": request.feedback.value,
        }

    def approval_rate(self, band: Band) -> ApprovalRateResponse:
        """Handle GET /routing/approval-rate/{band} requests."""
        return ApprovalRateResponse(
            band=band,
            approval_rate=self._routing.approval_rate(band),
            threshold=self._routing.rate_threshold(),
        )
