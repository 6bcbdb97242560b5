"""Risk level and assessment domain models.

This file defines the core enums and data structures for risk assessment.
All scores are on the canonical 0.0-1.0 scale, both server and client side.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Tuple


class RiskLevel(Enum):
    """Severity of detected risk in a single message.

    Totally ordered: LOW < MEDIUM < HIGH < CRISIS.
    """
    LOW = "low"             # No category triggered
    MEDIUM = "medium"       # Concerning language, no intervention yet
    HIGH = "high"           # Intervention required
    CRISIS = "crisis"       # Immediate safety concern

    @property
    def rank(self) -> int:
        return _RISK_RANK[self]

    def __lt__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "RiskLevel") -> bool:
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank >= other.rank

    def escalate_to(self, candidate: "RiskLevel") -> "RiskLevel":
        """Return the higher of this level and ``candidate``.

        A level is never lowered by this operation.
        """
        return candidate if candidate.rank > self.rank else self


_RISK_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRISIS: 3,
}


def from_percent(value: float) -> float:
    """Convert a legacy 0-100 client score to the canonical 0-1 scale."""
    return min(1.0, max(0.0, float(value) / 100.0))


def to_percent(score: float) -> int:
    """Render a canonical 0-1 score as a whole percentage for display."""
    return int(round(min(1.0, max(0.0, score)) * 100))


@dataclass(frozen=True)
class RiskAssessment:
    """Result of scanning one message.

    Immutable - produced per message and never persisted by this subsystem.
    """
    overall_score: float
    risk_level: RiskLevel
    flagged_terms: FrozenSet[str] = field(default_factory=frozenset)
    requires_intervention: bool = False
    contains_harmful_content: bool = False
    crisis_score: float = 0.0
    self_harm_score: float = 0.0
    violence_score: float = 0.0
    assessed_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        for name in ("overall_score", "crisis_score", "self_harm_score", "violence_score"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be 0.0-1.0, got {value}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire shape used by the chat client."""
        return {
            "overallScore": round(self.overall_score, 3),
            "riskLevel": self.risk_level.value,
            "flaggedTerms": sorted(self.flagged_terms),
            "requiresIntervention": self.requires_intervention,
            "containsHarmfulContent": self.contains_harmful_content,
            "categoryScores": {
                "crisis": round(self.crisis_score, 3),
                "selfHarm": round(self.self_harm_score, 3),
                "violence": round(self.violence_score, 3),
            },
            "assessedAt": self.assessed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskAssessment":
        """Rebuild an assessment from the wire shape.

        Raises:
            KeyError, ValueError, TypeError: If the payload is malformed
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected assessment object, got {type(data).__name__}")
        categories = data.get("categoryScores") or {}
        if not isinstance(categories, dict):
            raise TypeError(f"Expected categoryScores object, got {type(categories).__name__}")
        return cls(
            overall_score=float(data["overallScore"]),
            risk_level=RiskLevel(data["riskLevel"]),
            flagged_terms=frozenset(data.get("flaggedTerms", [])),
            requires_intervention=bool(data["requiresIntervention"]),
            contains_harmful_content=bool(data.get("containsHarmfulContent", False)),
            crisis_score=float(categories.get("crisis", 0.0)),
            self_harm_score=float(categories.get("selfHarm", 0.0)),
            violence_score=float(categories.get("violence", 0.0)),
        )


@dataclass(frozen=True)
class CrisisResource:
    """Static crisis contact shown to the user."""
    name: str
    phone: str
    description: str
    available_24h: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "phone": self.phone,
            "description": self.description,
            "available24h": self.available_24h,
        }


@dataclass(frozen=True)
class CrisisGuidance:
    """Decision on whether to end the session and which resources to show."""
    is_immediate: bool
    resources: Tuple[CrisisResource, ...]
    message: str
    should_end_session: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isImmediate": self.is_immediate,
            "resources": [r.to_dict() for r in self.resources],
            "message": self.message,
            "shouldEndSession": self.should_end_session,
        }


@dataclass(frozen=True)
class Template:
    """Named response strategy handed to the external reply generator."""
    name: str
    description: str
    system_prompt: str
    techniques: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "systemPrompt": self.system_prompt,
            "techniques": list(self.techniques),
        }


@dataclass(frozen=True)
class ConversationContext:
    """Input to template selection."""
    message_content: str
    risk_level: float = 0.0     # 0.0 to 1.0
    session_length: int = 0     # messages so far in the session

    def __post_init__(self):
        if self.session_length < 0:
            raise ValueError(f"session_length must be >= 0, got {self.session_length}")
        if not math.isfinite(self.risk_level):
            raise ValueError(f"risk_level must be finite, got {self.risk_level}")


@dataclass(frozen=True)
class SafetyMessage:
    """Safety message injected into the chat by the client."""
    kind: str
    text: str
    suggestions: Tuple[str, ...] = ()
    resources: Tuple[CrisisResource, ...] = ()
    actions: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "text": self.text,
            "suggestions": list(self.suggestions),
            "resources": [r.to_dict() for r in self.resources],
            "actions": list(self.actions),
            "createdAt": self.created_at.isoformat(),
        }


def resources_to_list(resources: Tuple[CrisisResource, ...]) -> List[Dict[str, Any]]:
    """Serialize a resource tuple to the JSON array shape."""
    return [r.to_dict() for r in resources]
