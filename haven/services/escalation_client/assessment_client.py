"""Async client for the risk assessment API.

Every request has a 30 second total timeout. Timeouts, transport errors
and retryable statuses (408, 429, 5xx) are retried with exponential
backoff. Malformed bodies are not retried. Either way the caller gets
AssessmentUnavailableError so the session can show its fail-safe message.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from haven.shared.models import RiskAssessment
from haven.shared.utils import hash_pii_if_configured
from .config import ClientConfig

logger = logging.getLogger(__name__)


RETRYABLE_STATUSES = frozenset({408, 429})


class AssessmentUnavailableError(Exception):
    """Raised when no usable assessment could be obtained."""

    def __init__(self, message: str, attempts: int = 0, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class TransientStatusError(Exception):
    """Response status worth retrying."""

    def __init__(self, status: int):
        super().__init__(f"Retryable status {status}")
        self.status = status


# ClientResponseError (4xx, non-JSON body) subclasses ClientError, so the
# malformed clause must be tried first.
_MALFORMED_ERRORS = (aiohttp.ClientResponseError, KeyError, TypeError, ValueError, AttributeError)
_TRANSIENT_ERRORS = (asyncio.TimeoutError, aiohttp.ClientError, TransientStatusError)


@dataclass(frozen=True)
class AssessmentOutcome:
    """Parsed response of the assess endpoint."""
    assessment: RiskAssessment
    requires_referral: bool
    crisis_guidance: Optional[Dict[str, Any]] = None

    @property
    def should_end_session(self) -> bool:
        return bool(self.crisis_guidance and self.crisis_guidance.get("shouldEndSession"))


class AssessmentClient:
    """Calls POST /risk-assessment/assess with bounded retries."""

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()

    async def assess(
        self,
        session_id: str,
        content: str,
        message_id: Optional[str] = None,
    ) -> AssessmentOutcome:
        """Assess one message.

        Raises:
            AssessmentUnavailableError: After retries are exhausted, or on a
                malformed or degraded response

        Logs:
            - ASSESSMENT_RETRY: Before each retry (warning)
            - ASSESSMENT_UNAVAILABLE: When giving up (error)
        """
        payload: Dict[str, Any] = {"sessionId": session_id, "content": content}
        if message_id:
            payload["messageId"] = message_id

        attempts = self.config.max_retries + 1
        last_error: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            try:
                body = await self._post_once("/risk-assessment/assess", payload)
                return self._parse(body)
            except AssessmentUnavailableError as e:
                self._log_unavailable(session_id, attempt, e)
                raise
            except _MALFORMED_ERRORS as e:
                self._log_unavailable(session_id, attempt, e)
                raise AssessmentUnavailableError(
                    "Malformed assessment response", attempts=attempt, last_error=e
                ) from e
            except _TRANSIENT_ERRORS as e:
                last_error = e
                if attempt < attempts:
                    delay = self.config.backoff_base_seconds * (2 ** (attempt - 1))
                    logger.warning(
                        "ASSESSMENT_RETRY",
                        extra={
                            "attempt": attempt,
                            "delay_seconds": delay,
                            "error_type": type(e).__name__,
                        }
                    )
                    await asyncio.sleep(delay)

        self._log_unavailable(session_id, attempts, last_error)
        raise AssessmentUnavailableError(
            "Risk assessment unavailable after retries",
            attempts=attempts,
            last_error=last_error,
        ) from last_error

    async def health(self) -> bool:
        """One health request; False on any transport failure or odd body."""
        try:
            body = await self._get_once("/health")
        except (asyncio.TimeoutError, aiohttp.ClientError, TransientStatusError) as e:
            logger.warning(
                "HEALTH_CHECK_FAILED",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
            return False
        return isinstance(body, dict) and body.get("status") == "healthy"

    async def _post_once(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                self._url(path),
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            ) as response:
                _check_status(response)
                return await response.json()

    async def _get_once(self, path: str) -> Dict[str, Any]:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                self._url(path),
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            ) as response:
                _check_status(response)
                return await response.json()

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}{path}"

    @staticmethod
    def _parse(body: Dict[str, Any]) -> AssessmentOutcome:
        if not isinstance(body, dict):
            raise TypeError(f"Expected JSON object, got {type(body).__name__}")
        if body.get("degraded"):
            raise AssessmentUnavailableError("Assessment service returned a degraded result")
        guidance = body.get("crisisGuidance")
        if guidance is not None and not isinstance(guidance, dict):
            raise TypeError(f"Expected crisisGuidance object, got {type(guidance).__name__}")
        return AssessmentOutcome(
            assessment=RiskAssessment.from_dict(body["riskScore"]),
            requires_referral=bool(body["requiresReferral"]),
            crisis_guidance=guidance,
        )

    @staticmethod
    def _log_unavailable(session_id: str, attempts: int, error: Optional[BaseException]) -> None:
        logger.error(
            "ASSESSMENT_UNAVAILABLE",
            extra={
                "session_id_hash": hash_pii_if_configured(session_id),
                "attempts": attempts,
                "error_type": type(error).__name__ if error else None,
                "action": "SHOWING_FAILSAFE_RESOURCES",
            }
        )


def _check_status(response: aiohttp.ClientResponse) -> None:
    if response.status in RETRYABLE_STATUSES or response.status >= 500:
        raise TransientStatusError(response.status)
    response.raise_for_status()
