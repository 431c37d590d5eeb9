"""
Tests for RoutingService: bands, budget gate, learned approval gate, feedback loop.
"""

import json

import pytest

from decision_cache.dto import TaskAnalysis
from decision_cache.entities import Band, Decision
from decision_cache.exceptions import InvalidArgumentError
from decision_cache.repositories import JsonConfigStore
from decision_cache.services import RoutingService


def _analysis(score: int, tokens: int = 500, pattern: str = "parallel") -> TaskAnalysis:
    return TaskAnalysis(complexity_score=score, estimated_tokens=tokens, recommended_pattern=pattern)


def _history(routing: RoutingService, band: str, approvals: int, rejections: int) -> None:
    for _ in range(approvals):
        routing.record_feedback(band, "user_approve")
    for _ in range(rejections):
        routing.record_feedback(band, "user_reject")


@pytest.fixture
def enable_auto_approve(write_config):
    def _enable(*bands: str, **extra) -> None:
        config = {"auto_routing": {"stage2_auto_approve": {band: True for band in bands}}}
        config["auto_routing"].update(extra)
        write_config(config)

    return _enable


class TestBands:
    @pytest.mark.parametrize(
        "score,band",
        [
            (0, Band.SIMPLE),
            (25, Band.SIMPLE),
            (29, Band.SIMPLE),
            (30, Band.MODERATE),
            (49, Band.MODERATE),
            (50, Band.COMPLEX),
            (69, Band.COMPLEX),
            (70, Band.VERY_COMPLEX),
            (100, Band.VERY_COMPLEX),
        ],
    )
    def test_band_boundaries_belong_to_the_higher_band(self, routing_service, score, band):
        assert routing_service.band_for(score) is band

    def test_custom_thresholds(self, metrics_log, config_path):
        routing = RoutingService(metrics_log, JsonConfigStore(config_path), band_thresholds=(10, 20, 90))

        assert routing.band_for(15) is Band.MODERATE
        assert routing.band_for(89) is Band.COMPLEX

    @pytest.mark.parametrize("thresholds", [(30, 50), (30, 50, 50), (70, 50, 30)])
    def test_invalid_thresholds_are_rejected(self, metrics_log, config_path, thresholds):
        with pytest.raises(InvalidArgumentError):
            RoutingService(metrics_log, JsonConfigStore(config_path), band_thresholds=thresholds)


class TestDecide:
    def test_simple_task_is_skipped(self, routing_service):
        decision = routing_service.decide(_analysis(25))

        assert decision.band is Band.SIMPLE
        assert decision.decision is Decision.SKIP
        assert decision.reason == "Complexity too low (25), multi-agent not needed"

    def test_moderate_without_flag_is_suggested(self, routing_service):
        decision = routing_service.decide(_analysis(30))

        assert decision.band is Band.MODERATE
        assert decision.decision is Decision.SUGGEST
        assert decision.reason == "Auto-approval disabled for moderate complexity"
        assert decision.approval_rate is None

    def test_very_complex_always_suggests(self, routing_service, enable_auto_approve):
        enable_auto_approve("very_complex")
        _history(routing_service, "very_complex", approvals=10, rejections=0)

        decision = routing_service.decide(_analysis(85), token_budget=1_000_000)

        assert decision.decision is Decision.SUGGEST
        assert decision.reason == "Very complex tasks always require user approval"

    def test_complex_budget_gate_short_circuits(self, routing_service, enable_auto_approve):
        enable_auto_approve("complex")
        _history(routing_service, "complex", approvals=10, rejections=0)

        decision = routing_service.decide(_analysis(55, tokens=500), token_budget=100)

        assert decision.decision is Decision.SUGGEST
        assert decision.reason == "Insufficient token budget (100 < 500)"

    @pytest.mark.parametrize("budget", [0, -5])
    def test_complex_without_budget_is_suggested(self, routing_service, enable_auto_approve, budget):
        enable_auto_approve("complex")

        decision = routing_service.decide(_analysis(55), token_budget=budget)

        assert decision.decision is Decision.SUGGEST
        assert decision.reason.startswith("Insufficient token budget")

    def test_complex_with_budget_reaches_approval_gate(self, routing_service, enable_auto_approve):
        enable_auto_approve("complex")
        _history(routing_service, "complex", approvals=9, rejections=1)

        decision = routing_service.decide(_analysis(55, tokens=500), token_budget=500)

        assert decision.decision is Decision.AUTO_APPROVE

    def test_moderate_auto_approves_above_rate_threshold(self, routing_service, enable_auto_approve):
        enable_auto_approve("moderate")
        _history(routing_service, "moderate", approvals=8, rejections=2)

        decision = routing_service.decide(_analysis(40))

        assert decision.decision is Decision.AUTO_APPROVE
        assert decision.approval_rate == pytest.approx(0.8)
        assert decision.reason == "Auto-approved based on learning (approval_rate=0.80, threshold=0.70)"

    def test_corrupt_metrics_line_does_not_block_decisions(self, routing_service, enable_auto_approve, metrics_log):
        enable_auto_approve("moderate")
        _history(routing_service, "moderate", approvals=8, rejections=2)
        with open(metrics_log.path, "ab") as f:
            f.write(b"\xff\xfe garbage\n")

        decision = routing_service.decide(_analysis(40))

        assert decision.decision is Decision.AUTO_APPROVE
        assert decision.approval_rate == pytest.approx(0.8)

    def test_moderate_suggests_below_rate_threshold(self, routing_service, enable_auto_approve):
        enable_auto_approve("moderate")
        _history(routing_service, "moderate", approvals=8, rejections=5)

        decision = routing_service.decide(_analysis(40))

        assert decision.decision is Decision.SUGGEST
        assert decision.approval_rate == pytest.approx(8 / 13)
        assert decision.reason == "Approval rate (0.62) below threshold (0.70)"

    def test_no_history_suggests(self, routing_service, enable_auto_approve):
        enable_auto_approve("moderate")

        decision = routing_service.decide(_analysis(40))

        assert decision.decision is Decision.SUGGEST
        assert decision.approval_rate == 0.0

    def test_configured_rate_threshold_is_used(self, routing_service, enable_auto_approve):
        enable_auto_approve("moderate", approval_rate_threshold=0.5)
        _history(routing_service, "moderate", approvals=8, rejections=5)

        assert routing_service.decide(_analysis(40)).decision is Decision.AUTO_APPROVE

    def test_out_of_range_rate_threshold_falls_back_to_default(self, routing_service, enable_auto_approve):
        enable_auto_approve("moderate", approval_rate_threshold=1.5)

        assert routing_service.rate_threshold() == 0.70

    def test_decisions_are_logged(self, routing_service, metrics_log):
        routing_service.decide(_analysis(42, tokens=800, pattern="sequential"))

        (event,) = [json.loads(line) for line in metrics_log.path.read_text().splitlines()]

        assert event["event_type"] == "decision"
        assert event["data"]["feature"] == "auto_routing"
        assert event["data"]["decision"] == "suggest"
        assert event["data"]["metadata"] == {
            "complexity_band": "moderate",
            "complexity_score": 42,
            "recommended_pattern": "sequential",
            "estimated_tokens": 800,
        }

    def test_auto_approvals_feed_the_rate(self, routing_service, enable_auto_approve):
        """Logged auto_approve decisions count as approvals for later decisions."""
        enable_auto_approve("moderate")
        _history(routing_service, "moderate", approvals=1, rejections=0)

        routing_service.decide(_analysis(40))
        routing_service.record_feedback("moderate", "user_reject")

        assert routing_service.approval_rate("moderate") == pytest.approx(2 / 3)


class TestApprovalRate:
    def test_ignores_skip_and_suggest(self, routing_service):
        routing_service.decide(_analysis(10))
        routing_service.decide(_analysis(40))
        _history(routing_service, "moderate", approvals=1, rejections=1)

        assert routing_service.approval_rate("moderate") == 0.5

    def test_bands_are_independent(self, routing_service):
        _history(routing_service, "moderate", approvals=3, rejections=0)
        _history(routing_service, "complex", approvals=0, rejections=2)

        assert routing_service.approval_rate(Band.MODERATE) == 1.0
        assert routing_service.approval_rate(Band.COMPLEX) == 0.0

    def test_time_window(self, routing_service, clock):
        _history(routing_service, "moderate", approvals=0, rejections=3)
        clock.advance(86400)
        since = clock.now
        _history(routing_service, "moderate", approvals=2, rejections=0)

        assert routing_service.approval_rate("moderate", since=since) == 1.0
        assert routing_service.approval_rate("moderate") == pytest.approx(0.4)

    def test_unknown_band_is_rejected(self, routing_service):
        with pytest.raises(InvalidArgumentError):
            routing_service.approval_rate("trivial")


class TestFeedback:
    def test_feedback_event(self, routing_service, metrics_log):
        routing_service.record_feedback("complex", "user_reject", "too expensive")

        (event,) = list(metrics_log.iter_events())

        assert event["data"]["decision"] == "user_reject"
        assert event["data"]["reason"] == "too expensive"
        assert event["data"]["metadata"] == {"complexity_band": "complex"}

    @pytest.mark.parametrize("band,feedback", [("trivial", "user_approve"), ("moderate", "maybe")])
    def test_invalid_feedback_is_rejected(self, routing_service, band, feedback):
        with pytest.raises(InvalidArgumentError):
            routing_service.record_feedback(band, feedback)


class TestSession:
    def test_pending_analysis(self, routing_service):
        assert routing_service.decide_from_session(token_budget=1000) is None

    def test_decides_from_session_state(self, routing_service, session_state_path):
        session_state_path.write_text(
            json.dumps({"task_analysis": {"complexity_score": 60, "estimated_tokens": 2000}})
        )

        decision = routing_service.decide_from_session(token_budget=1000)

        assert decision.band is Band.COMPLEX
        assert decision.reason == "Insufficient token budget (1000 < 2000)"

    def test_requires_session_repository(self, metrics_log, config_path):
        routing = RoutingService(metrics_log, JsonConfigStore(config_path))

        with pytest.raises(InvalidArgumentError):
            routing.decide_from_session()

    def test_accepts_any_session_state_store(self, metrics_log, config_path):
        class InMemorySessionState:
            def load_task_analysis(self):
                return _analysis(20)

        routing = RoutingService(metrics_log, JsonConfigStore(config_path), session_state=InMemorySessionState())

        assert routing.decide_from_session().decision is Decision.SKIP


def test_complex_without_flag_reason(routing_service):
    decision = routing_service.decide(_analysis(55, tokens=100), token_budget=1000)

    assert decision.decision is Decision.SUGGEST
    assert decision.reason == "Auto-approval disabled for complex tasks"
