"""Crisis Engine HTTP handler - crisis guidance endpoints.

Serves the static crisis resource list and per-score crisis guidance to
the chat client.
"""
import logging
import os
from flask import Flask, request, jsonify

from haven.shared.models import resources_to_list
from .responder import CrisisResponder

logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)

crisis_responder = CrisisResponder()


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({
        "status": "healthy",
        "service": "crisis-engine",
    }), 200


@app.route("/crisis/resources", methods=["GET"])
def get_crisis_resources():
    """Return the fixed crisis resource list.

    Response:
        [{"name", "phone", "description", "available24h"}, ...]
    """
    return jsonify(resources_to_list(crisis_responder.resources())), 200


@app.route("/crisis/respond", methods=["POST"])
def respond_to_score():
    """Build crisis guidance for a risk score.

    Request Body:
        {"riskScore": 0.0-1.0}

    Response:
        {"isImmediate", "resources", "message", "shouldEndSession"}

    Error Handling:
        An unparseable or non-finite score (including NaN) still returns
        the resource list, framed as immediate guidance, rather than an
        empty error.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or "riskScore" not in data:
        return jsonify({"error": "Missing required field: riskScore"}), 400

    try:
        guidance = crisis_responder.respond(data["riskScore"])
    except (TypeError, ValueError):
        logger.error(
            "CRISIS_RESPOND_INVALID_SCORE",
            extra={"action": "RETURNING_IMMEDIATE_GUIDANCE"}
        )
        guidance = crisis_responder.respond(1.0)
        return jsonify({**guidance.to_dict(), "error": "Invalid riskScore"}), 400

    logger.info(
        "CRISIS_GUIDANCE_SERVED",
        extra={
            "risk_score": data["riskScore"],
            "is_immediate": guidance.is_immediate,
        }
    )

    return jsonify(guidance.to_dict()), 200


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("PORT", "8003"))
    app.run(host="0.0.0.0", port=port, debug=False)
