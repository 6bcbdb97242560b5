"""Shared domain models for Haven."""
from .risk import (
    RiskLevel,
    RiskAssessment,
    CrisisResource,
    CrisisGuidance,
    Template,
    ConversationContext,
    SafetyMessage,
    from_percent,
    to_percent,
    resources_to_list,
)

__all__ = [
    "RiskLevel",
    "RiskAssessment",
    "CrisisResource",
    "CrisisGuidance",
    "Template",
    "ConversationContext",
    "SafetyMessage",
    "from_percent",
    "to_percent",
    "resources_to_list",
]
