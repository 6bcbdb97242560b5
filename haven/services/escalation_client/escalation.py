"""Escalation scheduler - periodic evaluation of the session risk trend.

Each cycle looks at the last three scores:
- non-decreasing and mean above 0.60 -> escalation check-in
- mean above 0.80 -> sustained-risk message with crisis resources

The two checks are independent, so both messages can fire in one cycle.
By default a message is re-emitted every cycle while its condition holds.
``cooldown_cycles`` and ``acknowledge()`` suppress repeats.
"""
import logging
import math
from typing import Callable, Dict, List, Optional, Sequence

from haven.shared.models import SafetyMessage
from haven.services.crisis_engine import CrisisResponder
from .config import EscalationConfig
from .trend_monitor import RiskTrendMonitor

logger = logging.getLogger(__name__)


KIND_CHECK_IN = "escalation_check_in"
KIND_SUSTAINED = "sustained_risk"
KIND_ASSESSMENT_UNAVAILABLE = "assessment_unavailable"

CHECK_IN_TEXT = (
    "I've noticed our conversation has been getting heavier. "
    "How are you doing right now?"
)
CHECK_IN_SUGGESTIONS = (
    "I'm okay, let's keep talking",
    "I could use some coping strategies",
    "Show me crisis resources",
)

SUSTAINED_TEXT = (
    "It sounds like things have been really hard for a while now. "
    "You don't have to carry this alone. These services are available any time:"
)


class EscalationScheduler:
    """Evaluates a RiskTrendMonitor and produces safety messages."""

    def __init__(
        self,
        monitor: RiskTrendMonitor,
        responder: Optional[CrisisResponder] = None,
        config: Optional[EscalationConfig] = None,
        on_message: Optional[Callable[[SafetyMessage], None]] = None,
    ):
        self.monitor = monitor
        self.responder = responder or CrisisResponder()
        self.config = config or EscalationConfig()
        self.on_message = on_message

        self._cycle = 0
        self._last_emitted: Dict[str, int] = {}
        self._acknowledged: Dict[str, int] = {}

    def evaluate(self) -> List[SafetyMessage]:
        """Run one evaluation cycle.

        Returns:
            Messages to inject, check-in first. Empty with fewer than
            ``lookback`` scores.
        """
        self._cycle += 1
        recent = self.monitor.last(self.config.lookback)
        if len(recent) < self.config.lookback:
            return []

        mean = _mean(recent)
        messages: List[SafetyMessage] = []

        if _non_decreasing(recent) and mean > self.config.check_in_threshold:
            if self._should_emit(KIND_CHECK_IN, mean):
                messages.append(self._check_in_message())

        if mean > self.config.sustained_threshold:
            if self._should_emit(KIND_SUSTAINED, mean):
                messages.append(self._sustained_message())

        return messages

    def run_cycle(self) -> List[SafetyMessage]:
        """Evaluate and hand each message to ``on_message``."""
        messages = self.evaluate()
        if self.on_message is not None:
            for message in messages:
                self.on_message(message)
        return messages

    def acknowledge(self, kind: str) -> None:
        """Suppress ``kind`` until a new score is recorded."""
        self._acknowledged[kind] = self.monitor.version
        logger.info("ESCALATION_ACKNOWLEDGED", extra={"kind": kind})

    def reset(self) -> None:
        self._cycle = 0
        self._last_emitted.clear()
        self._acknowledged.clear()

    def _should_emit(self, kind: str, mean: float) -> bool:
        if self._acknowledged.get(kind) == self.monitor.version:
            logger.debug(
                "ESCALATION_SUPPRESSED",
                extra={"kind": kind, "reason": "acknowledged"}
            )
            return False

        last = self._last_emitted.get(kind)
        cooldown = self.config.cooldown_cycles
        if last is not None and cooldown and self._cycle - last <= cooldown:
            logger.debug(
                "ESCALATION_SUPPRESSED",
                extra={"kind": kind, "reason": "cooldown", "cycles_since": self._cycle - last}
            )
            return False

        if last is not None:
            logger.warning(
                "ESCALATION_REPEAT",
                extra={"kind": kind, "cycles_since": self._cycle - last, "mean_score": mean}
            )
        else:
            logger.warning(
                "ESCALATION_TRIGGERED",
                extra={"kind": kind, "mean_score": mean}
            )

        self._last_emitted[kind] = self._cycle
        return True

    def _check_in_message(self) -> SafetyMessage:
        return SafetyMessage(
            kind=KIND_CHECK_IN,
            text=CHECK_IN_TEXT,
            suggestions=CHECK_IN_SUGGESTIONS,
        )

    def _sustained_message(self) -> SafetyMessage:
        return SafetyMessage(
            kind=KIND_SUSTAINED,
            text=SUSTAINED_TEXT,
            resources=self.responder.resources(),
            actions=("show_resources",),
        )


def _non_decreasing(scores: Sequence[float]) -> bool:
    return all(earlier <= later for earlier, later in zip(scores, scores[1:]))


def _mean(scores: Sequence[float]) -> float:
    # Rounded so a mean sitting exactly on a threshold does not exceed it
    # through float error, e.g. (0.8 + 0.8 + 0.8) / 3 == 0.8000000000000002.
    return round(math.fsum(scores) / len(scores), 9)
