"""Escalation Client: session-side risk trend monitoring.

Runs inside the chat client. Records each assessed score in a rolling
window and periodically injects check-in or sustained-risk messages.
Assessment failures surface as a fail-safe resource message, never as
silence.
"""

from .assessment_client import (
    AssessmentClient,
    AssessmentOutcome,
    AssessmentUnavailableError,
)
from .config import ClientConfig, EscalationConfig
from .escalation import (
    EscalationScheduler,
    KIND_ASSESSMENT_UNAVAILABLE,
    KIND_CHECK_IN,
    KIND_SUSTAINED,
)
from .scheduler import PeriodicTask, SessionScheduler
from .session import ChatSafetySession
from .trend_monitor import RiskTrendMonitor

__all__ = [
    "AssessmentClient",
    "AssessmentOutcome",
    "AssessmentUnavailableError",
    "ClientConfig",
    "EscalationConfig",
    "EscalationScheduler",
    "KIND_ASSESSMENT_UNAVAILABLE",
    "KIND_CHECK_IN",
    "KIND_SUSTAINED",
    "PeriodicTask",
    "SessionScheduler",
    "ChatSafetySession",
    "RiskTrendMonitor",
]
