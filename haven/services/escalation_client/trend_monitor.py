"""Rolling window of recent per-message risk scores for one session."""
from collections import deque
from typing import Deque, Tuple

from .config import EscalationConfig


class RiskTrendMonitor:
    """Append-only bounded window of risk scores.

    Oldest scores fall off once ``window_size`` is reached. Lives only in
    session memory and is discarded when the session ends.
    """

    def __init__(self, window_size: int = EscalationConfig.window_size):
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        self._scores: Deque[float] = deque(maxlen=window_size)
        self._version = 0

    def record(self, score: float) -> None:
        """Append a score on the 0.0-1.0 scale.

        Raises:
            ValueError: If score is outside 0.0-1.0
        """
        score = float(score)
        if not 0.0 <= score <= 1.0:
            raise ValueError(f"score must be 0.0-1.0, got {score}")
        self._scores.append(score)
        self._version += 1

    def last(self, n: int) -> Tuple[float, ...]:
        """Most recent ``n`` scores, oldest first."""
        if n <= 0:
            return ()
        return tuple(self._scores)[-n:]

    @property
    def scores(self) -> Tuple[float, ...]:
        return tuple(self._scores)

    @property
    def version(self) -> int:
        """Increments on every change to the window."""
        return self._version

    def clear(self) -> None:
        self._scores.clear()
        self._version += 1

    def __len__(self) -> int:
        return len(self._scores)
