"""Crisis Engine: crisis guidance and static crisis resources.

Maps a risk score to CrisisGuidance. At or above 0.85 the guidance is
immediate and the chat session should end; below it the same four
resources are offered with supportive framing.

Endpoints:
- GET /crisis/resources - Fixed four-entry resource list
- POST /crisis/respond - Guidance for a risk score
"""

from .responder import CrisisResponder, CRISIS_RESOURCES, IMMEDIATE_THRESHOLD

__all__ = [
    "CrisisResponder",
    "CRISIS_RESOURCES",
    "IMMEDIATE_THRESHOLD",
]
