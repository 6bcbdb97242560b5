"""Tests for CrisisEventPublisher.

Intervention events go to Kinesis; publishing failures must never raise
into the assessment request.
"""
import json
import pytest
from unittest.mock import patch, MagicMock

from haven.shared.models import RiskAssessment, RiskLevel
from haven.services.safety_service.crisis_publisher import (
    CrisisEventPublisher,
    RiskInterventionEvent,
)


@pytest.fixture
def assessment():
    return RiskAssessment(
        overall_score=0.75,
        risk_level=RiskLevel.CRISIS,
        flagged_terms=frozenset({"tonight", "kill myself"}),
        requires_intervention=True,
        contains_harmful_content=True,
        crisis_score=0.75,
    )


class TestRiskInterventionEvent:
    """Tests for RiskInterventionEvent dataclass."""

    def test_event_defaults(self):
        event = RiskInterventionEvent(event_id="evt_123")

        assert event.event_type == "safety.intervention.required"
        assert event.risk_level == "high"
        assert event.flagged_terms == []

    def test_event_to_kinesis_payload(self):
        event = RiskInterventionEvent(
            event_id="evt_123",
            message_id="msg_456",
            session_id_hash="hash_abc",
            risk_level="crisis",
            overall_score=0.75,
            flagged_terms=["kill myself", "tonight"],
            pattern_version="2026.10.19",
        )

        payload = event.to_kinesis_payload()

        assert payload["event_id"] == "evt_123"
        assert payload["source"] == "safety-service"
        assert payload["timestamp"].endswith("Z")
        assert payload["data"]["session_id_hash"] == "hash_abc"
        assert payload["data"]["risk_level"] == "crisis"
        assert payload["data"]["flagged_terms"] == ["kill myself", "tonight"]

    def test_event_is_immutable(self):
        event = RiskInterventionEvent(event_id="evt_123")

        with pytest.raises(Exception):  # FrozenInstanceError
            event.risk_level = "low"


class TestCrisisEventPublisher:
    """Tests for CrisisEventPublisher."""

    def test_publisher_initialization(self):
        publisher = CrisisEventPublisher(
            stream_name="test-stream",
            enabled=True,
            region="us-west-2",
        )

        assert publisher.stream_name == "test-stream"
        assert publisher.enabled is True
        assert publisher.region == "us-west-2"

    def test_region_from_environment(self, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "eu-west-1")

        assert CrisisEventPublisher().region == "eu-west-1"

    def test_publish_disabled_returns_false(self, assessment):
        publisher = CrisisEventPublisher(enabled=False)

        result = publisher.publish_intervention(
            message_id="msg_123",
            session_id_hash="hash_abc",
            assessment=assessment,
            pattern_version="2026.10.19",
        )

        assert result is False
        assert publisher.kinesis_client is None

    @patch('boto3.client')
    def test_publish_success(self, mock_boto_client, assessment):
        mock_kinesis = MagicMock()
        mock_kinesis.put_record.return_value = {
            "ShardId": "shard-001",
            "SequenceNumber": "12345",
        }
        mock_boto_client.return_value = mock_kinesis

        publisher = CrisisEventPublisher(stream_name="test-stream", enabled=True)
        publisher._kinesis_client = mock_kinesis

        result = publisher.publish_intervention(
            message_id="msg_123",
            session_id_hash="hash_abc",
            assessment=assessment,
            pattern_version="2026.10.19",
        )

        assert result is True
        mock_kinesis.put_record.assert_called_once()

        call_kwargs = mock_kinesis.put_record.call_args.kwargs
        assert call_kwargs["StreamName"] == "test-stream"
        assert call_kwargs["PartitionKey"] == "hash_abc"

        payload = json.loads(call_kwargs["Data"])
        assert payload["event_type"] == "safety.intervention.required"
        assert payload["data"]["message_id"] == "msg_123"
        assert payload["data"]["risk_level"] == "crisis"
        assert payload["data"]["flagged_terms"] == ["kill myself", "tonight"]
        assert payload["data"]["pattern_version"] == "2026.10.19"
        assert payload["data"]["category_scores"] == {"crisis": 0.75, "selfHarm": 0.0, "violence": 0.0}

    @patch('boto3.client')
    def test_client_created_lazily(self, mock_boto_client):
        publisher = CrisisEventPublisher(enabled=True, region="us-east-2")
        mock_boto_client.assert_not_called()

        client = publisher.kinesis_client

        mock_boto_client.assert_called_once_with("kinesis", region_name="us-east-2")
        assert client is mock_boto_client.return_value

    @patch('boto3.client')
    def test_publish_failure_returns_false(self, mock_boto_client, assessment):
        """Failed publish should return False, not raise."""
        mock_kinesis = MagicMock()
        mock_kinesis.put_record.side_effect = Exception("Kinesis error")
        mock_boto_client.return_value = mock_kinesis

        publisher = CrisisEventPublisher(stream_name="test-stream", enabled=True)
        publisher._kinesis_client = mock_kinesis

        result = publisher.publish_intervention(
            message_id="msg_123",
            session_id_hash="hash_abc",
            assessment=assessment,
            pattern_version="2026.10.19",
        )

        assert result is False

    @patch('boto3.client')
    def test_publish_without_client_logs_fallback(self, mock_boto_client, assessment):
        """Client construction failure falls back to a critical log."""
        mock_boto_client.side_effect = Exception("no credentials")
        publisher = CrisisEventPublisher(stream_name="test-stream", enabled=True)

        result = publisher.publish_intervention(
            message_id="msg_123",
            session_id_hash="hash_abc",
            assessment=assessment,
            pattern_version="2026.10.19",
        )

        assert result is False


class TestFromAssessment:
    def test_builds_event_from_assessment(self, assessment):
        event = RiskInterventionEvent.from_assessment(
            assessment,
            message_id="msg_1",
            session_id_hash="hash_abc",
            pattern_version="2026.10.19",
        )

        assert event.event_id.startswith("evt_")
        assert event.risk_level == "crisis"
        assert event.flagged_terms == ["kill myself", "tonight"]
        assert event.category_scores["crisis"] == 0.75
