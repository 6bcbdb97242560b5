"""Tests for CrisisResponder."""
import pytest

from haven.services.crisis_engine.responder import (
    CRISIS_RESOURCES,
    IMMEDIATE_MESSAGE,
    SUPPORTIVE_MESSAGE,
    CrisisResponder,
)


@pytest.fixture
def responder():
    return CrisisResponder()


class TestImmediacy:
    """Threshold behaviour at 0.85."""

    def test_score_at_threshold_is_immediate(self, responder):
        guidance = responder.respond(0.85)

        assert guidance.is_immediate is True
        assert guidance.should_end_session is True
        assert guidance.message == IMMEDIATE_MESSAGE

    def test_score_below_threshold_is_supportive(self, responder):
        guidance = responder.respond(0.84)

        assert guidance.is_immediate is False
        assert guidance.should_end_session is False
        assert guidance.message == SUPPORTIVE_MESSAGE

    def test_immediate_message_mentions_emergency_services(self, responder):
        assert "911" in responder.respond(1.0).message

    def test_custom_threshold(self):
        responder = CrisisResponder(immediate_threshold=0.5)

        assert responder.respond(0.6).is_immediate is True


class TestResources:
    """The four resources are always returned."""

    @pytest.mark.parametrize("score", [0.0, 0.5, 0.85, 1.0])
    def test_all_resources_on_every_branch(self, responder, score):
        guidance = responder.respond(score)

        assert guidance.resources == CRISIS_RESOURCES
        assert len(guidance.resources) == 4

    def test_resource_order_and_numbers(self, responder):
        phones = [resource.phone for resource in responder.resources()]

        assert phones == ["988", "741741", "1-800-662-4357", "911"]

    def test_resources_available_around_the_clock(self, responder):
        assert all(resource.available_24h for resource in responder.resources())


class TestClamping:
    """Out-of-range scores are clamped."""

    def test_score_above_one_is_immediate(self, responder):
        assert responder.respond(3.0).is_immediate is True

    def test_negative_score_is_supportive(self, responder):
        guidance = responder.respond(-1.0)

        assert guidance.is_immediate is False
        assert len(guidance.resources) == 4

    @pytest.mark.parametrize("score", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_score_rejected(self, responder, score):
        with pytest.raises(ValueError):
            responder.respond(score)


class TestWireShape:
    """CrisisGuidance.to_dict uses the client's camelCase keys."""

    def test_to_dict(self, responder):
        data = responder.respond(0.9).to_dict()

        assert data["isImmediate"] is True
        assert data["shouldEndSession"] is True
        assert data["resources"][0] == {
            "name": "988 Suicide & Crisis Lifeline",
            "phone": "988",
            "description": "24/7 crisis support and suicide prevention",
            "available24h": True,
        }
