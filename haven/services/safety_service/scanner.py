"""Content risk scanner - deterministic keyword scoring.

Every user message is scored here before a reply strategy is chosen, and
every generated reply is re-scored by the sanitizer before delivery.

Three categories are scored independently:
- Crisis: explicit crisis language, suicidal methods, immediacy phrases
- Self-harm: self-harm language, harm-method words next to "myself"
- Violence: violence toward others, explicit threats

The risk level is the maximum triggered across categories. It only ever
moves upward within one scan.
"""
import logging
import re
import time
from typing import Iterable, Optional, Set, Tuple

from haven.shared.models import RiskAssessment, RiskLevel
from haven.shared.utils import hash_text_for_audit
from .config import (
    KeywordTables,
    RiskWeights,
    SafetyConfig,
    ScannerThresholds,
)

logger = logging.getLogger(__name__)


class ContentRiskScanner:
    """Stateless keyword scanner producing a RiskAssessment per message.

    Holds only read-only tables after construction, so one instance can be
    shared across threads and requests.
    """

    def __init__(
        self,
        tables: Optional[KeywordTables] = None,
        weights: Optional[RiskWeights] = None,
        thresholds: Optional[ScannerThresholds] = None,
        config: Optional[SafetyConfig] = None,
    ):
        """Initialize scanner with injected tables.

        Args:
            tables: Keyword tables (defaults to the built-in lists)
            weights: Per-match score contributions
            thresholds: Category thresholds for level derivation
            config: Scanner behavior configuration
        """
        self.tables = tables or KeywordTables()
        self.weights = weights or RiskWeights()
        self.thresholds = thresholds or ScannerThresholds()
        self.config = config or SafetyConfig()

        # Sorted so flagged-term order and logs are reproducible
        self._crisis_keywords = sorted(self.tables.crisis_keywords)
        self._method_keywords = sorted(self.tables.suicidal_method_keywords)
        self._immediacy_phrases = sorted(self.tables.immediacy_phrases)
        self._self_harm_keywords = sorted(self.tables.self_harm_keywords)
        self._harm_methods = sorted(self.tables.harm_method_words)
        self._violence_keywords = sorted(self.tables.violence_keywords)
        self._threat_patterns = sorted(self.tables.threat_patterns)
        self._self_reference = re.compile(
            rf"\b{re.escape(self.config.self_reference_token)}\b"
        )

        logger.info(
            "RISK_SCANNER_INITIALIZED",
            extra={
                "pattern_version": self.config.pattern_version,
                "crisis_keyword_count": len(self._crisis_keywords),
                "self_harm_keyword_count": len(self._self_harm_keywords),
                "violence_keyword_count": len(self._violence_keywords),
            }
        )

    def scan(self, message: str) -> RiskAssessment:
        """Score a message for crisis, self-harm and violence risk.

        Args:
            message: Raw message text

        Returns:
            Immutable RiskAssessment

        Logs:
            - RISK_SCAN_INTERVENTION: If intervention is required (critical)
            - RISK_SCAN_COMPLETED: After every scan
        """
        start_time = time.perf_counter()
        text = (message or "").lower()
        flagged: Set[str] = set()

        crisis_score = self._crisis_score(text, flagged)
        self_harm_score = self._self_harm_score(text, flagged)
        violence_score = self._violence_score(text, flagged)

        risk_level, requires_intervention = self._derive_level(
            crisis_score, self_harm_score, violence_score
        )

        assessment = RiskAssessment(
            overall_score=max(crisis_score, self_harm_score, violence_score),
            risk_level=risk_level,
            flagged_terms=frozenset(flagged),
            requires_intervention=requires_intervention,
            contains_harmful_content=(
                crisis_score > 0 or self_harm_score > 0 or violence_score > 0
            ),
            crisis_score=crisis_score,
            self_harm_score=self_harm_score,
            violence_score=violence_score,
        )

        latency_ms = (time.perf_counter() - start_time) * 1000

        if requires_intervention:
            logger.critical(
                "RISK_SCAN_INTERVENTION",
                extra={
                    "text_hash": hash_text_for_audit(text),
                    "risk_level": risk_level.value,
                    "crisis_score": crisis_score,
                    "self_harm_score": self_harm_score,
                    "violence_score": violence_score,
                    "flagged_count": len(flagged),
                }
            )

        logger.info(
            "RISK_SCAN_COMPLETED",
            extra={
                "risk_level": risk_level.value,
                "overall_score": assessment.overall_score,
                "flagged_count": len(flagged),
                "latency_ms": latency_ms,
                "pattern_version": self.config.pattern_version,
            }
        )

        return assessment

    def _crisis_score(self, text: str, flagged: Set[str]) -> float:
        score = 0.0
        score += self.weights.crisis_keyword * self._collect(text, self._crisis_keywords, flagged)
        score += self.weights.suicidal_method * self._collect(text, self._method_keywords, flagged)
        score += self.weights.immediacy_phrase * self._collect(text, self._immediacy_phrases, flagged)
        return _clamp(score)

    def _self_harm_score(self, text: str, flagged: Set[str]) -> float:
        score = self.weights.self_harm_keyword * self._collect(
            text, self._self_harm_keywords, flagged
        )
        # Method words only count when the writer refers to themselves
        if self._self_reference.search(text):
            score += self.weights.harm_method_with_self * self._collect(
                text, self._harm_methods, flagged
            )
        return _clamp(score)

    def _violence_score(self, text: str, flagged: Set[str]) -> float:
        score = 0.0
        score += self.weights.violence_keyword * self._collect(text, self._violence_keywords, flagged)
        score += self.weights.threat_pattern * self._collect(text, self._threat_patterns, flagged)
        return _clamp(score)

    @staticmethod
    def _collect(text: str, phrases: Iterable[str], flagged: Set[str]) -> int:
        """Count phrases present in text and add them to ``flagged``.

        Each phrase counts once however often it appears.
        """
        matches = [phrase for phrase in phrases if phrase in text]
        flagged.update(matches)
        return len(matches)

    def _derive_level(
        self,
        crisis_score: float,
        self_harm_score: float,
        violence_score: float,
    ) -> Tuple[RiskLevel, bool]:
        """Map category scores to a risk level.

        Every rule can only raise the level; evaluation order does not matter.

        Returns:
            (risk_level, requires_intervention)
        """
        t = self.thresholds
        level = RiskLevel.LOW
        intervention = False

        for score, rules in (
            (crisis_score, (
                (t.CRISIS_CRISIS_MIN, RiskLevel.CRISIS, True),
                (t.CRISIS_HIGH_MIN, RiskLevel.HIGH, True),
                (t.CRISIS_MEDIUM_MIN, RiskLevel.MEDIUM, False),
            )),
            (self_harm_score, (
                (t.SELF_HARM_HIGH_MIN, RiskLevel.HIGH, True),
                (t.SELF_HARM_MEDIUM_MIN, RiskLevel.MEDIUM, False),
            )),
            (violence_score, (
                (t.VIOLENCE_HIGH_MIN, RiskLevel.HIGH, True),
                (t.VIOLENCE_MEDIUM_MIN, RiskLevel.MEDIUM, False),
            )),
        ):
            for minimum, candidate, needs_intervention in rules:
                if score >= minimum:
                    level = level.escalate_to(candidate)
                    intervention = intervention or needs_intervention
                    break

        return level, intervention


def _clamp(score: float) -> float:
    return min(1.0, round(score, 6))
