"""Intervention event publisher for the Safety Service.

When an assessment requires intervention, an event is put on a Kinesis
stream so downstream responders can follow up without sitting on the
request path. Publishing never blocks or fails the assessment response:
every failure path returns False and leaves a CRITICAL log carrying the
full record for manual follow-up.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import uuid

from haven.shared.models import RiskAssessment

logger = logging.getLogger(__name__)


INTERVENTION_EVENT_TYPE = "safety.intervention.required"
EVENT_SOURCE = "safety-service"


@dataclass(frozen=True)
class RiskInterventionEvent:
    """Immutable intervention record put on the stream."""
    event_id: str
    event_type: str = INTERVENTION_EVENT_TYPE
    message_id: str = ""
    session_id_hash: str = ""
    risk_level: str = "high"
    overall_score: float = 0.0
    category_scores: Dict[str, float] = field(default_factory=dict)
    flagged_terms: List[str] = field(default_factory=list)
    pattern_version: str = ""
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_assessment(
        cls,
        assessment: RiskAssessment,
        message_id: str,
        session_id_hash: str,
        pattern_version: str,
    ) -> "RiskInterventionEvent":
        return cls(
            event_id=f"evt_{uuid.uuid4().hex[:12]}",
            message_id=message_id,
            session_id_hash=session_id_hash,
            risk_level=assessment.risk_level.value,
            overall_score=round(assessment.overall_score, 3),
            category_scores={
                "crisis": round(assessment.crisis_score, 3),
                "selfHarm": round(assessment.self_harm_score, 3),
                "violence": round(assessment.violence_score, 3),
            },
            flagged_terms=sorted(assessment.flagged_terms),
            pattern_version=pattern_version,
        )

    def to_kinesis_payload(self) -> Dict[str, Any]:
        """Envelope plus data section, JSON-serializable."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat() + "Z",
            "source": EVENT_SOURCE,
            "data": {
                "message_id": self.message_id,
                "session_id_hash": self.session_id_hash,
                "risk_level": self.risk_level,
                "overall_score": self.overall_score,
                "category_scores": dict(self.category_scores),
                "flagged_terms": list(self.flagged_terms),
                "pattern_version": self.pattern_version,
            },
        }


class CrisisEventPublisher:
    """Puts intervention events on a Kinesis stream.

    The boto3 client is created on first use. Records for one session share
    a partition key so they land on the same shard in order.
    """

    def __init__(
        self,
        stream_name: str = "haven-intervention-events",
        enabled: bool = True,
        region: Optional[str] = None,
    ):
        """
        Args:
            stream_name: Kinesis stream name
            enabled: False in local development; events are then only logged
            region: AWS region, falls back to the AWS_REGION env var
        """
        self.stream_name = stream_name
        self.enabled = enabled
        self.region = region or os.getenv("AWS_REGION", "us-east-1")
        self._kinesis_client = None

        logger.info(
            "INTERVENTION_PUBLISHER_READY",
            extra={"stream_name": stream_name, "enabled": enabled, "region": self.region}
        )

    @property
    def kinesis_client(self):
        if self._kinesis_client is not None or not self.enabled:
            return self._kinesis_client
        try:
            import boto3
            self._kinesis_client = boto3.client("kinesis", region_name=self.region)
        except Exception as e:
            # Left as None; publish_intervention logs the record instead.
            logger.error(
                "INTERVENTION_STREAM_CLIENT_FAILED",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
        return self._kinesis_client

    def publish_intervention(
        self,
        message_id: str,
        session_id_hash: str,
        assessment: RiskAssessment,
        pattern_version: str,
    ) -> bool:
        """Publish an intervention event for ``assessment``.

        Returns:
            True once the stream accepted the record
        """
        if not self.enabled:
            logger.info(
                "INTERVENTION_EVENT_NOT_PUBLISHED",
                extra={"message_id": message_id, "reason": "publishing_disabled"}
            )
            return False

        event = RiskInterventionEvent.from_assessment(
            assessment,
            message_id=message_id,
            session_id_hash=session_id_hash,
            pattern_version=pattern_version,
        )
        record = json.dumps(event.to_kinesis_payload())

        client = self.kinesis_client
        if client is None:
            self._log_unpublished(event, record, reason="stream_client_unavailable")
            return False

        try:
            response = client.put_record(
                StreamName=self.stream_name,
                Data=record,
                PartitionKey=session_id_hash,
            )
        except Exception as e:
            self._log_unpublished(event, record, reason=type(e).__name__, error=str(e))
            return False

        logger.critical(
            "INTERVENTION_EVENT_PUBLISHED",
            extra={
                "event_id": event.event_id,
                "message_id": message_id,
                "session_id_hash": session_id_hash,
                "risk_level": event.risk_level,
                "shard_id": response.get("ShardId"),
                "sequence_number": response.get("SequenceNumber"),
            }
        )
        return True

    def _log_unpublished(self, event: RiskInterventionEvent, record: str, reason: str, error: str = "") -> None:
        logger.critical(
            "INTERVENTION_EVENT_PUBLISH_FAILED",
            extra={
                "event_id": event.event_id,
                "message_id": event.message_id,
                "session_id_hash": event.session_id_hash,
                "stream_name": self.stream_name,
                "reason": reason,
                "error": error,
                "action": "MANUAL_FOLLOW_UP_REQUIRED",
                "record": record,
            }
        )
