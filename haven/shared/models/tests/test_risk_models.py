"""Tests for risk domain models."""
import pytest

from haven.shared.models import (
    ConversationContext,
    CrisisResource,
    RiskAssessment,
    RiskLevel,
    SafetyMessage,
    from_percent,
    to_percent,
)


class TestRiskLevel:
    """Ordering and escalation."""

    def test_total_order(self):
        assert RiskLevel.LOW < RiskLevel.MEDIUM < RiskLevel.HIGH < RiskLevel.CRISIS
        assert max(RiskLevel.MEDIUM, RiskLevel.HIGH) == RiskLevel.HIGH

    @pytest.mark.parametrize("current,candidate,expected", [
        (RiskLevel.LOW, RiskLevel.HIGH, RiskLevel.HIGH),
        (RiskLevel.CRISIS, RiskLevel.MEDIUM, RiskLevel.CRISIS),
        (RiskLevel.HIGH, RiskLevel.HIGH, RiskLevel.HIGH),
    ])
    def test_escalate_never_lowers(self, current, candidate, expected):
        assert current.escalate_to(candidate) == expected


class TestScaleConversion:
    def test_from_percent(self):
        assert from_percent(85) == 0.85
        assert from_percent(150) == 1.0
        assert from_percent(-5) == 0.0

    def test_to_percent(self):
        assert to_percent(0.756) == 76
        assert to_percent(1.5) == 100


class TestRiskAssessment:
    def test_rejects_out_of_range_score(self):
        with pytest.raises(ValueError):
            RiskAssessment(overall_score=85, risk_level=RiskLevel.CRISIS)

    def test_wire_shape(self):
        assessment = RiskAssessment(
            overall_score=0.75,
            risk_level=RiskLevel.CRISIS,
            flagged_terms=frozenset({"tonight", "kill myself"}),
            requires_intervention=True,
            contains_harmful_content=True,
            crisis_score=0.75,
        )

        data = assessment.to_dict()

        assert data["riskLevel"] == "crisis"
        assert data["flaggedTerms"] == ["kill myself", "tonight"]
        assert data["categoryScores"] == {"crisis": 0.75, "selfHarm": 0.0, "violence": 0.0}

    def test_from_dict_reads_wire_shape(self):
        original = RiskAssessment(
            overall_score=0.4,
            risk_level=RiskLevel.HIGH,
            flagged_terms=frozenset({"hurt"}),
            requires_intervention=True,
            violence_score=0.4,
        )

        rebuilt = RiskAssessment.from_dict(original.to_dict())

        assert rebuilt.risk_level == RiskLevel.HIGH
        assert rebuilt.flagged_terms == frozenset({"hurt"})
        assert rebuilt.violence_score == 0.4

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            RiskAssessment.from_dict({"overallScore": 0.1})


class TestOtherRecords:
    def test_negative_session_length(self):
        with pytest.raises(ValueError):
            ConversationContext(message_content="hi", session_length=-1)

    def test_safety_message_serializes_resources(self):
        resource = CrisisResource(name="Crisis Text Line", phone="741741", description="Text HOME")
        message = SafetyMessage(kind="sustained_risk", text="...", resources=(resource,), actions=("show_resources",))

        data = message.to_dict()

        assert data["resources"][0]["phone"] == "741741"
        assert data["resources"][0]["available24h"] is True
        assert data["actions"] == ["show_resources"]
