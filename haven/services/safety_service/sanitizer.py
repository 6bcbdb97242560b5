"""Response sanitizer - post-generation guardrail.

Every reply produced by the external language model passes through here
before it is shown to the user. Stages run in order, each over the previous
stage's output:

1. Harmful phrase replacement (static map)
2. Rescan; if still harmful, the whole reply is replaced by the fallback
3. Medical advice and diagnostic language deflected to a professional
4. Dismissive phrases replaced with validating equivalents
5. Empathetic opener prepended if no empathetic marker is present

The finished text is scanned once more. A reply that fails that check, or
any error inside the pipeline, yields the fixed fallback reply. Raw model
output is never returned unsanitized.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple

from haven.shared.utils import hash_text_for_audit
from .config import KeywordTables
from .scanner import ContentRiskScanner

logger = logging.getLogger(__name__)


STAGE_HARMFUL_REPLACEMENT = "harmful_replacement"
STAGE_SAFE_FALLBACK = "safe_fallback"
STAGE_MEDICAL_DEFLECTION = "medical_deflection"
STAGE_SUPPORTIVE_TONE = "supportive_tone"
STAGE_EMPATHETIC_OPENER = "empathetic_opener"
STAGE_FINAL_FALLBACK = "final_fallback"
STAGE_ERROR_FALLBACK = "error_fallback"


@dataclass(frozen=True)
class SanitizationResult:
    """Sanitized reply plus the stages that changed it."""
    text: str
    stages_applied: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def fell_back(self) -> bool:
        return any(
            stage in self.stages_applied
            for stage in (STAGE_SAFE_FALLBACK, STAGE_FINAL_FALLBACK, STAGE_ERROR_FALLBACK)
        )


def _phrase_pattern(phrase: str) -> Pattern:
    return re.compile(re.escape(phrase), re.IGNORECASE)


class ResponseSanitizer:
    """Cleans generated replies so they never carry harmful content."""

    def __init__(
        self,
        scanner: Optional[ContentRiskScanner] = None,
        tables: Optional[KeywordTables] = None,
    ):
        """Initialize sanitizer.

        Args:
            scanner: Scanner used for the rescans (shares its tables by default)
            tables: Replacement maps; defaults to the scanner's tables

        Raises:
            ValueError: If the configured fallback reply itself scans as harmful
        """
        self.scanner = scanner or ContentRiskScanner(tables=tables)
        self.tables = tables or self.scanner.tables

        self._harmful = self._compile_pairs(self.tables.harmful_replacements)
        self._medical = [
            re.compile(pattern, re.IGNORECASE)
            for pattern in self.tables.medical_advice_patterns
        ]
        self._diagnostic = self._compile_pairs(self.tables.diagnostic_replacements)
        self._dismissive = self._compile_pairs(self.tables.dismissive_replacements)
        self._fallback = self.tables.safe_fallback_reply

        if self.scanner.scan(self._fallback).contains_harmful_content:
            raise ValueError("Configured safe fallback reply is flagged by the scanner")

    @staticmethod
    def _compile_pairs(pairs) -> List[Tuple[Pattern, str]]:
        return [(_phrase_pattern(phrase), replacement) for phrase, replacement in pairs]

    def sanitize(self, candidate_reply: str) -> str:
        """Return a safe version of ``candidate_reply``."""
        return self.sanitize_with_report(candidate_reply).text

    def sanitize_with_report(self, candidate_reply: str) -> SanitizationResult:
        """Run the full pipeline and report which stages changed the text.

        Logs:
            - SANITIZER_FALLBACK_USED: When the reply was replaced entirely
            - SANITIZER_FAILED: On any unexpected error (fallback returned)
        """
        stages: List[str] = []
        try:
            text = self._run_pipeline(candidate_reply or "", stages)

            if self.scanner.scan(text).contains_harmful_content:
                stages.append(STAGE_FINAL_FALLBACK)
                text = self._fallback
        except Exception as e:
            logger.error(
                "SANITIZER_FAILED",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "RETURNING_SAFE_FALLBACK",
                }
            )
            return SanitizationResult(
                text=self._fallback,
                stages_applied=tuple(stages) + (STAGE_ERROR_FALLBACK,),
            )

        result = SanitizationResult(text=text, stages_applied=tuple(stages))
        if result.fell_back:
            logger.warning(
                "SANITIZER_FALLBACK_USED",
                extra={
                    "reply_hash": hash_text_for_audit(candidate_reply or ""),
                    "stages": list(stages),
                }
            )
        return result

    def _run_pipeline(self, text: str, stages: List[str]) -> str:
        replaced = self.replace_harmful_content(text)
        if replaced != text:
            stages.append(STAGE_HARMFUL_REPLACEMENT)
        text = replaced

        if self.scanner.scan(text).contains_harmful_content:
            stages.append(STAGE_SAFE_FALLBACK)
            text = self._fallback

        deflected = self.filter_medical_advice(text)
        if deflected != text:
            stages.append(STAGE_MEDICAL_DEFLECTION)
        text = deflected

        supportive = self.replace_dismissive_language(text)
        if supportive != text:
            stages.append(STAGE_SUPPORTIVE_TONE)
        text = supportive

        if not self.contains_empathetic_language(text):
            stages.append(STAGE_EMPATHETIC_OPENER)
            text = f"{self.tables.empathetic_opener} {text}".rstrip()

        return text

    def replace_harmful_content(self, text: str) -> str:
        for pattern, replacement in self._harmful:
            text = pattern.sub(lambda _match, r=replacement: r, text)
        return text

    def filter_medical_advice(self, text: str) -> str:
        """Replace dosage instructions and diagnostic assertions."""
        for pattern in self._medical:
            text = pattern.sub(lambda _match: self.tables.medical_deflection, text)
        for pattern, replacement in self._diagnostic:
            text = pattern.sub(lambda _match, r=replacement: r, text)
        return text

    def replace_dismissive_language(self, text: str) -> str:
        for pattern, replacement in self._dismissive:
            text = pattern.sub(lambda _match, r=replacement: r, text)
        return text

    def contains_empathetic_language(self, text: str) -> bool:
        lowered = text.lower()
        return any(marker in lowered for marker in self.tables.empathetic_markers)
