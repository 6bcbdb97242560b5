"""Crisis responder - maps a risk score to crisis guidance.

Pure function of the score. The resource list is static reference data and
is returned in full on every branch; only the framing message and the
end-session decision depend on immediacy.
"""
import logging
import math
from typing import Optional, Tuple

from haven.shared.models import CrisisGuidance, CrisisResource

logger = logging.getLogger(__name__)


IMMEDIATE_THRESHOLD = 0.85

CRISIS_RESOURCES: Tuple[CrisisResource, ...] = (
    CrisisResource(
        name="988 Suicide & Crisis Lifeline",
        phone="988",
        description="24/7 crisis support and suicide prevention",
        available_24h=True,
    ),
    CrisisResource(
        name="Crisis Text Line",
        phone="741741",
        description="Text HOME for 24/7 crisis support via text",
        available_24h=True,
    ),
    CrisisResource(
        name="SAMHSA National Helpline",
        phone="1-800-662-4357",
        description="Treatment referral and information service",
        available_24h=True,
    ),
    CrisisResource(
        name="Emergency Services",
        phone="911",
        description="For immediate life-threatening emergencies",
        available_24h=True,
    ),
)

IMMEDIATE_MESSAGE = (
    "I'm very concerned about your safety right now. Please reach out for "
    "immediate help. You don't have to go through this alone, and there are "
    "people who want to help you.\n\n"
    "If you're in immediate danger, please call 911 or go to your nearest "
    "emergency room.\n\n"
    "For crisis support, you can also contact:"
)

SUPPORTIVE_MESSAGE = (
    "I notice you might be going through a difficult time. It's important to "
    "have professional support when dealing with these feelings. Here are some "
    "resources that might help:"
)


class CrisisResponder:
    """Builds CrisisGuidance for a risk score on the 0.0-1.0 scale."""

    def __init__(
        self,
        immediate_threshold: float = IMMEDIATE_THRESHOLD,
        resources: Optional[Tuple[CrisisResource, ...]] = None,
    ):
        self.immediate_threshold = immediate_threshold
        self._resources = tuple(resources) if resources is not None else CRISIS_RESOURCES

    def resources(self) -> Tuple[CrisisResource, ...]:
        return self._resources

    def respond(self, risk_score: float) -> CrisisGuidance:
        """Map a risk score to crisis guidance.

        Scores outside 0.0-1.0 are clamped.

        Raises:
            ValueError: If the score is NaN or infinite

        Logs:
            - CRISIS_GUIDANCE_IMMEDIATE: When the session should end (critical)
        """
        score = float(risk_score)
        if not math.isfinite(score):
            raise ValueError(f"risk_score must be finite, got {risk_score}")
        score = min(1.0, max(0.0, score))
        is_immediate = score >= self.immediate_threshold

        if is_immediate:
            logger.critical(
                "CRISIS_GUIDANCE_IMMEDIATE",
                extra={
                    "risk_score": score,
                    "threshold": self.immediate_threshold,
                    "action": "END_SESSION_AND_SHOW_RESOURCES",
                }
            )

        return CrisisGuidance(
            is_immediate=is_immediate,
            resources=self._resources,
            message=IMMEDIATE_MESSAGE if is_immediate else SUPPORTIVE_MESSAGE,
            should_end_session=is_immediate,
        )
