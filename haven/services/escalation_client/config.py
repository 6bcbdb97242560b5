"""Escalation client configuration.

Scores are on the canonical 0.0-1.0 scale. Intervals are in seconds.
"""
import os
from dataclasses import dataclass, field


API_URL_ENV = "HAVEN_API_URL"
DEFAULT_API_URL = "http://localhost:8001"


@dataclass(frozen=True)
class EscalationConfig:
    """Trend window and periodic task settings for one chat session."""
    window_size: int = 10
    lookback: int = 3
    check_in_threshold: float = 0.60    # mean above this on a rising trend
    sustained_threshold: float = 0.80   # mean above this regardless of trend
    cooldown_cycles: int = 0            # 0 re-emits every cycle

    poll_interval_seconds: float = 2.0
    health_interval_seconds: float = 30.0
    safety_interval_seconds: float = 10.0

    def __post_init__(self):
        if self.lookback < 1 or self.lookback > self.window_size:
            raise ValueError(
                f"lookback must be between 1 and window_size ({self.window_size}), "
                f"got {self.lookback}"
            )
        for name in ("check_in_threshold", "sustained_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be 0.0-1.0, got {value}")
        if self.cooldown_cycles < 0:
            raise ValueError(f"cooldown_cycles must be >= 0, got {self.cooldown_cycles}")
        for name in ("poll_interval_seconds", "health_interval_seconds", "safety_interval_seconds"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")


@dataclass(frozen=True)
class ClientConfig:
    """Assessment API client settings."""
    base_url: str = field(default_factory=lambda: os.getenv(API_URL_ENV, DEFAULT_API_URL))
    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_base_seconds: float = 1.0

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
