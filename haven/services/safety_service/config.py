"""Safety Service configuration: scoring weights, thresholds and keyword tables.

Keyword tables are data. The defaults below can be overridden, in whole or
per table, from a JSON document (see ``KeywordTables.from_file``) so word
lists and replacement maps can be tuned without touching the scanner.
"""
import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union

logger = logging.getLogger(__name__)

KEYWORD_TABLES_ENV = "HAVEN_KEYWORD_TABLES"


class KeywordConfigError(ValueError):
    """Raised when a keyword table document is malformed."""


@dataclass(frozen=True)
class RiskWeights:
    """Per-match score contributions for each category."""
    crisis_keyword: float = 0.45
    suicidal_method: float = 0.5
    immediacy_phrase: float = 0.3
    self_harm_keyword: float = 0.25
    harm_method_with_self: float = 0.3
    violence_keyword: float = 0.3
    threat_pattern: float = 0.4


@dataclass(frozen=True)
class ScannerThresholds:
    """Category score thresholds that raise the risk level."""
    CRISIS_CRISIS_MIN: float = 0.7      # crisis level, intervention
    CRISIS_HIGH_MIN: float = 0.5        # high level, intervention
    CRISIS_MEDIUM_MIN: float = 0.3      # medium level
    SELF_HARM_HIGH_MIN: float = 0.5     # at least high, intervention
    SELF_HARM_MEDIUM_MIN: float = 0.25  # at least medium
    VIOLENCE_HIGH_MIN: float = 0.4      # at least high, intervention
    VIOLENCE_MEDIUM_MIN: float = 0.2    # at least medium


@dataclass(frozen=True)
class SafetyConfig:
    """Configuration for safety scanning behavior."""

    # Version tracking for audit trail
    pattern_version: str = "2026.10.19"

    # Token whose presence turns a harm-method word into a self-harm signal
    self_reference_token: str = "myself"


# =============================================================================
# DEFAULT KEYWORD TABLES
# =============================================================================

CRISIS_KEYWORDS: FrozenSet[str] = frozenset({
    "kill myself",
    "end my life",
    "suicide",
    "suicidal",
    "want to die",
    "better off dead",
    "end it all",
    "can't go on",
    "no point living",
    "planning to die",
    "goodbye forever",
    "final goodbye",
})

SUICIDAL_METHOD_KEYWORDS: FrozenSet[str] = frozenset({
    "suicide methods",
    "how to kill",
    "ways to die",
    "painless death",
    "overdose",
    "hanging",
    "jumping",
    "pills to die",
})

IMMEDIACY_PHRASES: FrozenSet[str] = frozenset({
    "right now",
    "tonight",
    "today",
    "this moment",
    "can't wait",
    "have a plan",
    "ready to",
    "going to do it",
})

SELF_HARM_KEYWORDS: FrozenSet[str] = frozenset({
    "hurt myself",
    "self harm",
    "self-harm",
    "cut myself",
    "cutting",
    "burn myself",
    "punish myself",
    "deserve pain",
    "harm myself",
    "self injury",
    "self-injury",
})

HARM_METHOD_WORDS: FrozenSet[str] = frozenset({
    "razor",
    "blade",
    "knife",
    "scissors",
    "glass",
    "lighter",
    "matches",
    "cigarette",
    "burning",
})

VIOLENCE_KEYWORDS: FrozenSet[str] = frozenset({
    "hurt others",
    "hurt someone",
    "kill someone",
    "murder",
    "violence",
    "attack",
    "harm others",
    "harm someone",
    "revenge",
    "get back at",
    "violent thoughts",
})

THREAT_PATTERNS: FrozenSet[str] = frozenset({
    "going to hurt",
    "will kill",
    "plan to attack",
    "get revenge",
    "make them suffer",
    "they deserve to die",
    "make them pay",
})

# Ordered: longer phrases first so "just kill yourself" wins over "kill yourself"
HARMFUL_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    ("just kill yourself", "seek professional support"),
    ("kill yourself", "seek professional support"),
    ("end your life", "seek professional support"),
    ("hurt yourself", "practice self-care"),
    ("you should die", "you deserve support"),
    ("give up", "seek help"),
    ("it's hopeless", "there is hope and help available"),
    ("no one cares", "people do care about you"),
    ("you're worthless", "you have value"),
)

MEDICAL_ADVICE_PATTERNS: Tuple[str, ...] = (
    r"you should take \w+ medication",
    r"should take \d+ ?mg",
    r"i recommend \w+ pills",
    r"you need \w+ therapy",
    r"you have \w+ disorder",
    r"you are diagnosed with",
    r"take \d+ ?mg of",
)

MEDICAL_DEFLECTION = "it might be helpful to discuss this with a healthcare professional"

DIAGNOSTIC_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    ("you have depression", "you might be experiencing symptoms that could benefit from professional evaluation"),
    ("you are bipolar", "these experiences might warrant professional assessment"),
    ("you have anxiety disorder", "these feelings might benefit from professional support"),
)

DISMISSIVE_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    ("just get over it", "healing takes time, and that's okay"),
    ("get over it", "healing takes time, and that's okay"),
    ("stop being sad", "it's natural to feel sad sometimes"),
    ("think positive", "it's okay to acknowledge difficult feelings"),
    ("you're overreacting", "your feelings are valid"),
    ("just calm down", "take your time to process these feelings"),
    ("calm down", "take your time to process these feelings"),
    ("don't worry", "it's understandable to feel worried"),
)

EMPATHETIC_MARKERS: FrozenSet[str] = frozenset({
    "i understand",
    "i hear you",
    "that sounds",
    "i can imagine",
    "it makes sense",
    "you're not alone",
    "that must be",
    "i appreciate you sharing",
    "thank you for",
    "it's okay to feel",
})

EMPATHETIC_OPENER = "I hear you, and I want you to know that your feelings are valid."

SAFE_FALLBACK_REPLY = (
    "I understand you're going through a difficult time. It's important to reach "
    "out for professional support when dealing with these feelings. Would you like "
    "me to help you find mental health resources in your area?"
)


@dataclass(frozen=True)
class KeywordTables:
    """All word lists and replacement maps used by scanner and sanitizer."""
    crisis_keywords: FrozenSet[str] = CRISIS_KEYWORDS
    suicidal_method_keywords: FrozenSet[str] = SUICIDAL_METHOD_KEYWORDS
    immediacy_phrases: FrozenSet[str] = IMMEDIACY_PHRASES
    self_harm_keywords: FrozenSet[str] = SELF_HARM_KEYWORDS
    harm_method_words: FrozenSet[str] = HARM_METHOD_WORDS
    violence_keywords: FrozenSet[str] = VIOLENCE_KEYWORDS
    threat_patterns: FrozenSet[str] = THREAT_PATTERNS
    harmful_replacements: Tuple[Tuple[str, str], ...] = HARMFUL_REPLACEMENTS
    medical_advice_patterns: Tuple[str, ...] = MEDICAL_ADVICE_PATTERNS
    medical_deflection: str = MEDICAL_DEFLECTION
    diagnostic_replacements: Tuple[Tuple[str, str], ...] = DIAGNOSTIC_REPLACEMENTS
    dismissive_replacements: Tuple[Tuple[str, str], ...] = DISMISSIVE_REPLACEMENTS
    empathetic_markers: FrozenSet[str] = EMPATHETIC_MARKERS
    empathetic_opener: str = EMPATHETIC_OPENER
    safe_fallback_reply: str = SAFE_FALLBACK_REPLY

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["KeywordTables"] = None) -> "KeywordTables":
        """Build tables from a mapping, overriding ``base`` (or the defaults).

        Word lists are JSON arrays of strings, replacement maps are JSON
        objects ({"phrase": "replacement"}, applied in document order),
        single phrases are strings.

        Raises:
            KeywordConfigError: On unknown keys or values of the wrong shape
        """
        if not isinstance(data, dict):
            raise KeywordConfigError("Keyword table document must be a JSON object")

        base = base or cls()
        known = {f.name: f for f in fields(cls)}
        overrides: Dict[str, Any] = {}

        for key, value in data.items():
            if key not in known:
                raise KeywordConfigError(f"Unknown keyword table: {key}")
            current = getattr(base, key)
            if isinstance(current, str):
                if not isinstance(value, str) or not value.strip():
                    raise KeywordConfigError(f"{key} must be a non-empty string")
                overrides[key] = value
            elif isinstance(current, frozenset):
                overrides[key] = frozenset(_string_list(key, value, lower=True))
            elif key in ("harmful_replacements", "diagnostic_replacements", "dismissive_replacements"):
                overrides[key] = _replacement_pairs(key, value)
            else:
                overrides[key] = _string_list(key, value, lower=False)

        return replace(base, **overrides)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "KeywordTables":
        """Load tables from a JSON file, overriding the defaults.

        Raises:
            KeywordConfigError: If the file cannot be parsed or is malformed
        """
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            raise KeywordConfigError(f"Cannot load keyword tables from {path}: {e}") from e

        tables = cls.from_dict(data)
        logger.info(
            "KEYWORD_TABLES_LOADED",
            extra={"path": str(path), "overridden_tables": sorted(data.keys())}
        )
        return tables


def _string_list(key: str, value: Any, lower: bool) -> Tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(v, str) and v.strip() for v in value):
        raise KeywordConfigError(f"{key} must be a list of non-empty strings")
    return tuple(v.lower() if lower else v for v in value)


def _replacement_pairs(key: str, value: Any) -> Tuple[Tuple[str, str], ...]:
    if not isinstance(value, dict):
        raise KeywordConfigError(f"{key} must be an object of phrase -> replacement")
    pairs = []
    for phrase, replacement in value.items():
        if not phrase.strip() or not isinstance(replacement, str):
            raise KeywordConfigError(f"{key} has an invalid entry for {phrase!r}")
        pairs.append((phrase.lower(), replacement))
    return tuple(pairs)


def load_keyword_tables(path: Optional[str] = None) -> KeywordTables:
    """Resolve keyword tables from ``path``, the environment, or defaults."""
    path = path or os.getenv(KEYWORD_TABLES_ENV)
    if not path:
        return KeywordTables()
    return KeywordTables.from_file(path)
