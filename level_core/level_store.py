"""Level store boundary and the default-on-malformed read policy.

The core never persists anything itself. Callers hand it a store that maps a
user id to whatever was last written (an int from this package, or a legacy
string such as ``"5"`` or a self-report tier name written by older clients),
and read it back through :func:`coerce_level` before calling an evaluator.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol

from .config import (
    DEFAULT_LEVEL,
    LEVEL_MIN,
    PLACEMENT_LEVEL_MAX,
    PLACEMENT_LEVEL_MIN,
    TIER_TO_LEVEL,
)


class LevelStore(Protocol):
    def get_level(self, user_id: str) -> Optional[object]: ...

    def set_level(self, user_id: str, level: int) -> None: ...


class InMemoryLevelStore:
    """Dict-backed store used by the CLI, the smoke run and tests."""

    def __init__(self, initial: Optional[Dict[str, object]] = None):
        self._levels: Dict[str, object] = dict(initial or {})

    def get_level(self, user_id: str) -> Optional[object]:
        return self._levels.get(user_id)

    def set_level(self, user_id: str, level: int) -> None:
        self._levels[user_id] = int(level)


def coerce_level(raw: object, default: int = DEFAULT_LEVEL) -> int:
    """Stored value -> level in [0, 8]; absent or malformed values fall back to ``default``."""

    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        num: Optional[int] = raw
    elif isinstance(raw, float):
        num = int(raw) if raw.is_integer() else None
    elif isinstance(raw, str):
        text = raw.strip()
        if text in TIER_TO_LEVEL:
            return TIER_TO_LEVEL[text]
        try:
            num = int(text)
        except ValueError:
            num = None
    else:
        num = None
    if num is not None and PLACEMENT_LEVEL_MIN <= num <= PLACEMENT_LEVEL_MAX:
        return num
    return default


def level_for_promotion(raw: object, default: int = DEFAULT_LEVEL) -> int:
    """Promotion/demotion works on L1-L8; a placement result of 0 enters at 1."""

    return max(LEVEL_MIN, coerce_level(raw, default))


def read_level(store: LevelStore, user_id: str, default: int = DEFAULT_LEVEL) -> int:
    return coerce_level(store.get_level(user_id), default)
