"""Safety Service HTTP handler - risk assessment and reply guardrail endpoints.

Every user message is assessed through /risk-assessment/assess before a
reply strategy is chosen, and every generated reply passes through
/safety/sanitize before it reaches the user.

Session identifiers are hashed with hash_pii() before logging. Message text
is never logged.
"""
import logging
import os
from typing import Optional
from flask import Flask, request, jsonify

from haven.shared.models import ConversationContext, RiskAssessment, RiskLevel
from haven.shared.utils import hash_pii, configure_pii_salt
from haven.services.crisis_engine import CrisisResponder
from haven.services.template_service import TemplateSelector
from .config import SafetyConfig, load_keyword_tables
from .scanner import ContentRiskScanner
from .sanitizer import ResponseSanitizer
from .crisis_publisher import CrisisEventPublisher

logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

# Configure PII salt from environment
pii_salt = os.getenv("PII_HASH_SALT", "default_dev_salt_change_in_production_32chars")
configure_pii_salt(pii_salt)

config = SafetyConfig(
    pattern_version=os.getenv("PATTERN_VERSION", SafetyConfig.pattern_version),
)
scanner = ContentRiskScanner(tables=load_keyword_tables(), config=config)
sanitizer = ResponseSanitizer(scanner=scanner)
crisis_responder = CrisisResponder()
template_selector = TemplateSelector()

crisis_publisher = CrisisEventPublisher(
    stream_name=os.getenv("KINESIS_STREAM_NAME", "haven-intervention-events"),
    enabled=os.getenv("CRISIS_PUBLISHING_ENABLED", "false").lower() == "true",
)

# Served when the scanner fails; assumes elevated risk rather than none
DEGRADED_SCORE = 0.5


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        200 with service status
    """
    return jsonify({
        "status": "healthy",
        "service": "safety-service",
        "scanner_version": config.pattern_version,
    }), 200


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check - verifies scanner and sanitizer are initialized.

    Returns:
        200 if ready, 503 if not
    """
    if scanner is None or sanitizer is None:
        return jsonify({"status": "not_ready", "reason": "scanner_not_initialized"}), 503
    return jsonify({"status": "ready"}), 200


@app.route("/risk-assessment/assess", methods=["POST"])
def assess_message():
    """Assess a user message for crisis, self-harm and violence risk.

    Request Body:
        {
            "sessionId": "sess_456",
            "messageId": "msg_123" (optional),
            "content": "User message text"
        }

    Response:
        {
            "riskScore": {RiskAssessment wire shape},
            "requiresReferral": true | false,
            "crisisGuidance": {...} (only if referral is required)
        }

    Error Handling:
        On ANY scanner error, returns a degraded high-risk assessment with
        crisis guidance. We never fail open.
    """
    data = _json_object()
    if not data:
        logger.warning("ASSESS_REQUEST_INVALID", extra={"reason": "not_a_json_object"})
        return jsonify({"error": "Request body must be a non-empty JSON object"}), 400

    session_id = data.get("sessionId")
    content = data.get("content")
    if not isinstance(session_id, str) or not session_id.strip():
        logger.warning("ASSESS_REQUEST_INVALID", extra={"reason": "missing_session_id"})
        return jsonify({"error": "Missing required field: sessionId"}), 400
    if not isinstance(content, str) or not content.strip():
        logger.warning("ASSESS_REQUEST_INVALID", extra={"reason": "missing_content"})
        return jsonify({"error": "Missing required field: content"}), 400

    message_id = data.get("messageId") or "unknown"
    session_id_hash = hash_pii(session_id)

    logger.info(
        "ASSESS_REQUESTED",
        extra={
            "message_id": message_id,
            "session_id_hash": session_id_hash,
            "message_length": len(content),
        }
    )

    try:
        assessment = scanner.scan(content)
    except Exception as e:
        # CRITICAL: On error, assume risk (safe failure mode)
        logger.error(
            "ASSESS_ERROR",
            extra={
                "message_id": message_id,
                "session_id_hash": session_id_hash,
                "error": str(e),
                "error_type": type(e).__name__,
                "action": "DEFAULTING_TO_HIGH",
            }
        )
        return jsonify(_degraded_response()), 200  # 200 so the chat continues with caution

    response = {
        "riskScore": assessment.to_dict(),
        "requiresReferral": assessment.requires_intervention,
    }

    if assessment.requires_intervention:
        _handle_intervention(
            assessment=assessment,
            message_id=message_id,
            session_id_hash=session_id_hash,
        )
        response["crisisGuidance"] = crisis_responder.respond(
            assessment.overall_score
        ).to_dict()

    return jsonify(response), 200


@app.route("/risk-assessment/test", methods=["POST"])
def test_assessment():
    """Assess sample content without a session.

    Request Body:
        {"content": "Sample text"}

    Response:
        {"testContent", "riskScore", "interpretation"}
    """
    data = _json_object() or {}
    content = data.get("content")
    if not isinstance(content, str) or not content:
        return jsonify({"error": "Content is required for testing"}), 400

    assessment = scanner.scan(content)
    return jsonify({
        "testContent": content,
        "riskScore": assessment.to_dict(),
        "interpretation": {
            "riskLevel": assessment.risk_level.value,
            "scoreBand": _score_band(assessment.overall_score),
            "requiresReferral": assessment.requires_intervention,
        },
    }), 200


@app.route("/safety/scan", methods=["POST"])
def scan_content():
    """Scan arbitrary text and return its safety flags.

    Request Body:
        {"message": "Text to scan"}

    Response:
        {"safetyFlags": {RiskAssessment wire shape}}
    """
    data = _json_object() or {}
    message = data.get("message")
    if not isinstance(message, str) or not message:
        return jsonify({"error": "Message is required"}), 400

    return jsonify({"safetyFlags": scanner.scan(message).to_dict()}), 200


@app.route("/safety/sanitize", methods=["POST"])
def sanitize_reply():
    """Sanitize a generated reply before it is shown to the user.

    Request Body:
        {"reply": "Candidate reply text"}

    Response:
        {"reply": "Safe reply", "stagesApplied": ["harmful_replacement", ...]}

    Error Handling:
        The sanitizer never raises; internal failures yield the fixed
        fallback reply.
    """
    data = _json_object() or {}
    reply = data.get("reply")
    if not isinstance(reply, str):
        return jsonify({"error": "Missing required field: reply"}), 400

    result = sanitizer.sanitize_with_report(reply)

    logger.info(
        "REPLY_SANITIZED",
        extra={
            "stages": list(result.stages_applied),
            "fell_back": result.fell_back,
        }
    )

    return jsonify({
        "reply": result.text,
        "stagesApplied": list(result.stages_applied),
    }), 200


@app.route("/templates/select", methods=["POST"])
def select_template():
    """Pick the counselling template for a message.

    Request Body:
        {
            "messageContent": "User message text",
            "riskLevel": 0.0-1.0,
            "sessionLength": 3
        }

    Response:
        {Template wire shape}
    """
    data = _json_object() or {}
    message_content = data.get("messageContent")
    if not isinstance(message_content, str):
        return jsonify({"error": "Missing required field: messageContent"}), 400

    try:
        context = ConversationContext(
            message_content=message_content,
            risk_level=float(data.get("riskLevel", 0.0)),
            session_length=int(data.get("sessionLength", 0)),
        )
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(template_selector.select(context).to_dict()), 200


def _handle_intervention(
    assessment: RiskAssessment,
    message_id: str,
    session_id_hash: str,
) -> None:
    """Publish an intervention event for a flagged message.

    Args:
        assessment: The assessment requiring intervention
        message_id: Message identifier
        session_id_hash: Hashed session identifier
    """
    logger.critical(
        "INTERVENTION_REQUIRED",
        extra={
            "message_id": message_id,
            "session_id_hash": session_id_hash,
            "risk_level": assessment.risk_level.value,
            "flagged_count": len(assessment.flagged_terms),
        }
    )

    published = crisis_publisher.publish_intervention(
        message_id=message_id,
        session_id_hash=session_id_hash,
        assessment=assessment,
        pattern_version=config.pattern_version,
    )

    if not published and crisis_publisher.enabled:
        logger.error(
            "INTERVENTION_PUBLISH_FAILED",
            extra={
                "message_id": message_id,
                "session_id_hash": session_id_hash,
                "action": "MANUAL_REVIEW_REQUIRED",
            }
        )


def _json_object() -> Optional[dict]:
    """Request body if it parsed to a JSON object, else None."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _degraded_response() -> dict:
    """Fail-safe assessment served when the scanner cannot run."""
    assessment = RiskAssessment(
        overall_score=DEGRADED_SCORE,
        risk_level=RiskLevel.HIGH,
        requires_intervention=True,
    )
    return {
        "riskScore": assessment.to_dict(),
        "requiresReferral": True,
        "crisisGuidance": crisis_responder.respond(DEGRADED_SCORE).to_dict(),
        "degraded": True,
        "error": "Scanner error - defaulting to high risk",
    }


def _score_band(score: float) -> str:
    if score < 0.25:
        return "low"
    if score < 0.5:
        return "moderate"
    if score < 0.75:
        return "high"
    return "critical"


if __name__ == "__main__":
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Run development server
    port = int(os.getenv("PORT", "8001"))
    app.run(host="0.0.0.0", port=port, debug=False)
