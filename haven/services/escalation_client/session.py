"""Chat safety session - wires assessment, trend monitoring and timers.

One ChatSafetySession exists per active chat. While active it runs three
periodic tasks: message polling (2s), backend health (30s) and safety
evaluation (10s). ``end()`` cancels all three and discards the window.
"""
import logging
from typing import Any, Awaitable, Callable, List, Optional

from haven.shared.models import SafetyMessage
from haven.shared.utils import hash_pii
from haven.services.crisis_engine import CrisisResponder
from .assessment_client import AssessmentClient, AssessmentOutcome, AssessmentUnavailableError
from .config import EscalationConfig
from .escalation import EscalationScheduler, KIND_ASSESSMENT_UNAVAILABLE
from .scheduler import SessionScheduler
from .trend_monitor import RiskTrendMonitor

logger = logging.getLogger(__name__)


POLL_TASK = "message_poll"
HEALTH_TASK = "health_check"
SAFETY_TASK = "safety_evaluation"

ASSESSMENT_UNAVAILABLE_TEXT = (
    "I'm having trouble checking in on how you're doing right now. "
    "If you're struggling, please reach out to one of these services:"
)


class ChatSafetySession:
    """Client-side safety state and timers for one chat session."""

    def __init__(
        self,
        session_id: str,
        client: Optional[AssessmentClient] = None,
        config: Optional[EscalationConfig] = None,
        responder: Optional[CrisisResponder] = None,
        on_message: Optional[Callable[[SafetyMessage], None]] = None,
        poller: Optional[Callable[[], Awaitable[Any]]] = None,
    ):
        """Initialize session.

        Args:
            session_id: Chat session identifier
            client: Assessment API client
            config: Window and timer settings
            responder: Source of crisis resources
            on_message: Receives every injected safety message
            poller: Coroutine function fetching new chat messages
        """
        self.session_id = session_id
        self.session_id_hash = hash_pii(session_id)
        self.client = client or AssessmentClient()
        self.config = config or EscalationConfig()
        self.responder = responder or CrisisResponder()
        self.on_message = on_message
        self.poller = poller

        self.monitor = RiskTrendMonitor(window_size=self.config.window_size)
        self.escalation = EscalationScheduler(
            monitor=self.monitor,
            responder=self.responder,
            config=self.config,
            on_message=self._emit,
        )
        self.scheduler = SessionScheduler()
        self.messages: List[SafetyMessage] = []
        self.backend_healthy = True
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    async def start(self) -> None:
        """Start the poll, health and safety timers."""
        if self._active:
            raise RuntimeError("Session already started")

        self.scheduler.start(POLL_TASK, self.config.poll_interval_seconds, self._poll)
        self.scheduler.start(HEALTH_TASK, self.config.health_interval_seconds, self._check_health)
        self.scheduler.start(SAFETY_TASK, self.config.safety_interval_seconds, self.escalation.run_cycle)
        self._active = True

        logger.info("CHAT_SAFETY_SESSION_STARTED", extra={"session_id_hash": self.session_id_hash})

    async def end(self) -> None:
        """Cancel all timers and discard the trend window."""
        await self.scheduler.cancel_all()
        self.monitor.clear()
        self.escalation.reset()
        self._active = False

        logger.info("CHAT_SAFETY_SESSION_ENDED", extra={"session_id_hash": self.session_id_hash})

    async def assess_message(
        self,
        content: str,
        message_id: Optional[str] = None,
    ) -> Optional[AssessmentOutcome]:
        """Assess a user message and record its score.

        On failure the fail-safe message is injected and nothing is
        recorded.

        Returns:
            The outcome, or None if the assessment was unavailable
        """
        try:
            outcome = await self.client.assess(self.session_id, content, message_id=message_id)
        except AssessmentUnavailableError as e:
            logger.error(
                "SESSION_ASSESSMENT_FAILSAFE",
                extra={
                    "session_id_hash": self.session_id_hash,
                    "attempts": e.attempts,
                }
            )
            self._emit(SafetyMessage(
                kind=KIND_ASSESSMENT_UNAVAILABLE,
                text=ASSESSMENT_UNAVAILABLE_TEXT,
                resources=self.responder.resources(),
                actions=("retry",),
            ))
            return None

        self.monitor.record(outcome.assessment.overall_score)
        return outcome

    def acknowledge(self, kind: str) -> None:
        self.escalation.acknowledge(kind)

    async def _poll(self) -> None:
        if self.poller is not None:
            await self.poller()

    async def _check_health(self) -> None:
        healthy = await self.client.health()
        if healthy != self.backend_healthy:
            logger.warning(
                "BACKEND_HEALTH_CHANGED",
                extra={"session_id_hash": self.session_id_hash, "healthy": healthy}
            )
        self.backend_healthy = healthy

    def _emit(self, message: SafetyMessage) -> None:
        self.messages.append(message)
        if self.on_message is not None:
            self.on_message(message)

    async def __aenter__(self) -> "ChatSafetySession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.end()
