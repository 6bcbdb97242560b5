"""Safety Service: deterministic risk scoring and reply guardrails.

Every user message is scored before a reply strategy is chosen, and every
generated reply is sanitized before it is shown.

Components:
- scanner.py: ContentRiskScanner keyword scoring across three categories
- sanitizer.py: ResponseSanitizer post-generation pipeline
- config.py: Weights, thresholds and data-driven keyword tables
- handler.py: Flask HTTP endpoints (/risk-assessment/assess, /safety/...)
- crisis_publisher.py: Kinesis intervention events

Usage:
    from haven.services.safety_service import ContentRiskScanner
    scanner = ContentRiskScanner()
    assessment = scanner.scan("message text")
"""

from .scanner import ContentRiskScanner
from .sanitizer import ResponseSanitizer, SanitizationResult
from .config import (
    KeywordConfigError,
    KeywordTables,
    RiskWeights,
    SafetyConfig,
    ScannerThresholds,
    load_keyword_tables,
)
from .crisis_publisher import CrisisEventPublisher, RiskInterventionEvent

__all__ = [
    "ContentRiskScanner",
    "ResponseSanitizer",
    "SanitizationResult",
    "KeywordConfigError",
    "KeywordTables",
    "RiskWeights",
    "SafetyConfig",
    "ScannerThresholds",
    "load_keyword_tables",
    "CrisisEventPublisher",
    "RiskInterventionEvent",
]
