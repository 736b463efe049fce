from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence
from .config import ROLLING_WINDOW_SIZE


@dataclass
class ScoreHistory:
    """Append-only attempt scores for one user, oldest first."""

    user_id: Optional[str] = None
    _scores: List[float] = field(default_factory=list)

    @classmethod
    def from_scores(cls, scores: Iterable[float], user_id: Optional[str] = None) -> "ScoreHistory":
        return cls(user_id=user_id, _scores=[float(s) for s in scores])

    def append(self, score: float) -> None:
        self._scores.append(float(score))

    @property
    def scores(self) -> tuple[float, ...]:
        return tuple(self._scores)

    def __len__(self) -> int:
        return len(self._scores)

    def last_n(self, n: int = ROLLING_WINDOW_SIZE) -> List[float]:
        return last_n(self._scores, n)


def last_n(history: Sequence[float] | ScoreHistory, n: int = ROLLING_WINDOW_SIZE) -> List[float]:
    scores = history.scores if isinstance(history, ScoreHistory) else history
    if n <= 0:
        return []
    return list(scores[-n:])


def rolling_average(history: Sequence[float] | ScoreHistory, n: int = ROLLING_WINDOW_SIZE) -> Optional[float]:
    window = last_n(history, n)
    if not window:
        return None
    return sum(window) / len(window)
