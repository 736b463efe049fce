# level_core/promotion.py
from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence

from .config import (
    DEFAULT_PROMOTION_CONFIG,
    DEMOTION_LEVELS,
    LEVEL_MAX,
    LEVEL_MIN,
    PRO_ENTRY_LEVEL,
    ROLLING_WINDOW_SIZE,
    DEBUG_TRACE,
    TRACE_FIELDS,
    PromotionConfig,
)
from .scores import ScoreHistory, last_n, rolling_average
from .types import LevelChangeResult


log = logging.getLogger(__name__)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


def _clamp_level(level: int) -> int:
    return max(LEVEL_MIN, min(LEVEL_MAX, int(level)))


def check_promotion(
    current_level: int,
    last5: Sequence[float],
    config: PromotionConfig = DEFAULT_PROMOTION_CONFIG,
) -> bool:
    """avg(last 5) >= promotion_threshold below the top level."""

    if len(last5) < ROLLING_WINDOW_SIZE:
        return False
    if current_level >= LEVEL_MAX:
        return False
    if current_level == PRO_ENTRY_LEVEL and config.gate_top_level_on_exam:
        return False
    avg = rolling_average(last5)
    return avg is not None and avg >= config.promotion_threshold


def check_demotion(
    current_level: int,
    last5: Sequence[float],
    config: PromotionConfig = DEFAULT_PROMOTION_CONFIG,
) -> bool:
    """Only L6-L7 demote on a low average; L8 only when the config allows it."""

    if len(last5) < ROLLING_WINDOW_SIZE:
        return False
    if current_level <= LEVEL_MIN:
        return False
    if current_level == LEVEL_MAX:
        if not config.allow_top_level_auto_demote:
            return False
    elif current_level not in DEMOTION_LEVELS:
        return False
    avg = rolling_average(last5)
    return avg is not None and avg < config.demotion_threshold


def evaluate_after_attempt(
    current_level: int,
    history: Sequence[float] | ScoreHistory,
    config: PromotionConfig = DEFAULT_PROMOTION_CONFIG,
    *,
    user_id: Optional[str] = None,
) -> LevelChangeResult:
    """Decide promote/demote/hold once per appended score; at most one step."""

    window = last_n(history, ROLLING_WINDOW_SIZE)
    if len(window) < ROLLING_WINDOW_SIZE:
        log.debug("level_eval user=%s level=%d window=%d too short", user_id, current_level, len(window))
        return LevelChangeResult(new_level=current_level, change="same")

    if check_promotion(current_level, window, config):
        result = LevelChangeResult(new_level=_clamp_level(current_level + 1), change="promoted")
    elif check_demotion(current_level, window, config):
        result = LevelChangeResult(new_level=_clamp_level(current_level - 1), change="demoted")
    else:
        result = LevelChangeResult(new_level=current_level, change="same")

    avg = rolling_average(window)
    log.debug(
        "level_eval user=%s level=%d->%d avg=%.2f window=%s change=%s",
        user_id,
        current_level,
        result.new_level,
        avg,
        window,
        result.change,
    )
    _emit_trace(
        user_id=user_id,
        source="attempt",
        rolling_avg=round(avg, 2),
        level_before=current_level,
        level_after=result.new_level,
        change=result.change,
    )
    return result


def window_summary(history: Sequence[float] | ScoreHistory) -> Dict[str, object]:
    """Rolling-window snapshot returned alongside level decisions."""

    window = last_n(history, ROLLING_WINDOW_SIZE)
    avg = rolling_average(window)
    return {
        "window": window,
        "window_size": len(window),
        "rolling_avg": None if avg is None else round(avg, 2),
        "evaluated": len(window) >= ROLLING_WINDOW_SIZE,
    }
