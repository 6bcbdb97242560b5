"""Tests for ContentRiskScanner - safety-critical scoring.

Scores are exact sums of per-match weights, so most assertions check the
precise category score as well as the derived level.
"""
import pytest

from haven.shared.models import RiskLevel
from haven.shared.utils import configure_pii_salt
from haven.services.safety_service.scanner import ContentRiskScanner
from haven.services.safety_service.config import (
    CRISIS_KEYWORDS,
    IMMEDIACY_PHRASES,
    KeywordTables,
    ScannerThresholds,
)


@pytest.fixture(autouse=True)
def setup_pii_salt():
    """Configure PII salt before each test."""
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def scanner():
    """Create a ContentRiskScanner instance for testing."""
    return ContentRiskScanner()


class TestLowRisk:
    """Tests for messages that trigger no category."""

    def test_normal_message_is_low(self, scanner):
        """Everyday conversation should not be flagged."""
        result = scanner.scan("I had a nice walk with my dog")

        assert result.risk_level == RiskLevel.LOW
        assert result.overall_score == 0.0
        assert result.requires_intervention is False
        assert result.contains_harmful_content is False
        assert result.flagged_terms == frozenset()

    def test_empty_message_is_low(self, scanner):
        result = scanner.scan("")

        assert result.risk_level == RiskLevel.LOW
        assert result.contains_harmful_content is False

    def test_none_message_is_low(self, scanner):
        result = scanner.scan(None)

        assert result.risk_level == RiskLevel.LOW

    def test_anxiety_without_risk_language_is_low(self, scanner):
        """Distress words alone are not risk keywords."""
        result = scanner.scan("I'm feeling anxious and worried about work")

        assert result.risk_level == RiskLevel.LOW
        assert result.requires_intervention is False


class TestCrisisCategory:
    """Tests for crisis keyword, method and immediacy scoring."""

    def test_kill_myself_tonight_is_crisis(self, scanner):
        """Keyword (0.45) plus immediacy (0.3) reaches the crisis level."""
        result = scanner.scan("I want to kill myself tonight")

        assert result.crisis_score == pytest.approx(0.75)
        assert result.overall_score == pytest.approx(0.75)
        assert result.risk_level == RiskLevel.CRISIS
        assert result.requires_intervention is True
        assert result.flagged_terms == frozenset({"kill myself", "tonight"})

    def test_single_crisis_keyword_is_medium(self, scanner):
        result = scanner.scan("Sometimes I think about suicide")

        assert result.crisis_score == pytest.approx(0.45)
        assert result.risk_level == RiskLevel.MEDIUM
        assert result.requires_intervention is False

    def test_method_keyword_is_high(self, scanner):
        result = scanner.scan("I keep reading about overdose")

        assert result.crisis_score == pytest.approx(0.5)
        assert result.risk_level == RiskLevel.HIGH
        assert result.requires_intervention is True

    def test_immediacy_alone_is_medium(self, scanner):
        """Immediacy phrases carry weight on their own."""
        result = scanner.scan("I need to finish this right now")

        assert result.crisis_score == pytest.approx(0.3)
        assert result.risk_level == RiskLevel.MEDIUM

    def test_crisis_score_is_capped(self, scanner):
        result = scanner.scan(
            "I am suicidal, I want to die, I have a plan for an overdose tonight"
        )

        assert result.crisis_score == 1.0
        assert result.risk_level == RiskLevel.CRISIS

    def test_case_insensitive(self, scanner):
        result = scanner.scan("I WANT TO END MY LIFE")

        assert "end my life" in result.flagged_terms
        assert result.crisis_score == pytest.approx(0.45)

    def test_every_keyword_with_immediacy_is_crisis(self, scanner):
        """Any crisis keyword paired with any immediacy phrase is crisis."""
        for keyword in sorted(CRISIS_KEYWORDS):
            for phrase in sorted(IMMEDIACY_PHRASES):
                result = scanner.scan(f"{keyword} {phrase}")
                assert result.risk_level == RiskLevel.CRISIS, (keyword, phrase)
                assert result.requires_intervention is True, (keyword, phrase)


class TestSelfHarmCategory:
    """Tests for self-harm language and harm-method words."""

    def test_self_harm_keyword_is_medium(self, scanner):
        result = scanner.scan("I've started cutting again")

        assert result.self_harm_score == pytest.approx(0.25)
        assert result.risk_level == RiskLevel.MEDIUM
        assert result.requires_intervention is False

    def test_method_word_with_myself_is_high(self, scanner):
        """A harm-method word counts when the writer refers to themselves."""
        result = scanner.scan("I want to hurt myself with a razor")

        assert result.self_harm_score == pytest.approx(0.55)
        assert result.risk_level == RiskLevel.HIGH
        assert result.requires_intervention is True
        assert {"hurt myself", "razor"} <= result.flagged_terms

    def test_method_word_without_myself_ignored(self, scanner):
        result = scanner.scan("There is a razor in the bathroom drawer")

        assert result.self_harm_score == 0.0
        assert result.risk_level == RiskLevel.LOW

    def test_myself_must_be_a_whole_word(self, scanner):
        result = scanner.scan("The knife belongs to myselfie club")

        assert result.self_harm_score == 0.0


class TestViolenceCategory:
    """Tests for violence toward others and explicit threats."""

    def test_violence_keyword_is_medium(self, scanner):
        result = scanner.scan("I keep having violent thoughts")

        assert result.violence_score == pytest.approx(0.3)
        assert result.risk_level == RiskLevel.MEDIUM

    def test_threat_is_high(self, scanner):
        result = scanner.scan("I'm going to hurt him")

        assert result.violence_score == pytest.approx(0.4)
        assert result.risk_level == RiskLevel.HIGH
        assert result.requires_intervention is True

    def test_threat_phrase_scored_once(self, scanner):
        """'make them pay' is a threat only, not also a violence keyword."""
        result = scanner.scan("I want revenge, I will make them pay")

        assert result.violence_score == pytest.approx(0.7)
        assert result.flagged_terms == frozenset({"revenge", "make them pay"})

    def test_threat_alone(self, scanner):
        result = scanner.scan("I will make them pay")

        assert result.violence_score == pytest.approx(0.4)
        assert result.risk_level == RiskLevel.HIGH


class TestLevelDerivation:
    """Tests for combining category levels."""

    def test_level_never_downgraded_by_later_category(self, scanner):
        """A crisis result stays crisis when violence adds a lower level."""
        result = scanner.scan("I want to kill myself tonight after the attack")

        assert result.violence_score == pytest.approx(0.3)
        assert result.risk_level == RiskLevel.CRISIS

    def test_overall_score_is_max_category(self, scanner):
        result = scanner.scan("I've been cutting and thinking about revenge")

        assert result.overall_score == max(
            result.crisis_score, result.self_harm_score, result.violence_score
        )

    def test_repeated_keyword_counts_once(self, scanner):
        result = scanner.scan("suicide suicide suicide")

        assert result.crisis_score == pytest.approx(0.45)
        assert sorted(result.flagged_terms) == ["suicide"]

    def test_to_dict_has_no_duplicate_flagged_terms(self, scanner):
        data = scanner.scan("make them pay, make them pay tonight").to_dict()

        assert len(data["flaggedTerms"]) == len(set(data["flaggedTerms"]))

    def test_custom_thresholds(self):
        """Thresholds are injectable."""
        scanner = ContentRiskScanner(
            thresholds=ScannerThresholds(CRISIS_CRISIS_MIN=0.4),
        )
        result = scanner.scan("suicide")

        assert result.risk_level == RiskLevel.CRISIS

    def test_custom_tables(self):
        """Keyword tables are injectable."""
        tables = KeywordTables(crisis_keywords=frozenset({"vanish forever"}))
        scanner = ContentRiskScanner(tables=tables)

        assert scanner.scan("I want to vanish forever").crisis_score == pytest.approx(0.45)
        assert scanner.scan("suicide").crisis_score == 0.0


class TestDeterminism:
    """Identical input always yields identical output."""

    def test_same_input_same_result(self, scanner):
        message = "I can't go on, I have a plan"
        first = scanner.scan(message)
        second = scanner.scan(message)

        assert first.overall_score == second.overall_score
        assert first.risk_level == second.risk_level
        assert first.flagged_terms == second.flagged_terms
