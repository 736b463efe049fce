from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from .config import (
    DEFAULT_PROMOTION_CONFIG,
    PRO_ENTRY_LEVEL,
    PRO_LEVEL,
    ROLLING_WINDOW_SIZE,
    PromotionConfig,
)
from .scores import ScoreHistory, last_n, rolling_average
from .types import ExamSubmission, ProExamResult


log = logging.getLogger(__name__)


def check_pro_eligibility(
    current_level: int,
    history: Sequence[float] | ScoreHistory,
    config: PromotionConfig = DEFAULT_PROMOTION_CONFIG,
) -> bool:
    """L7 with a full window averaging at least pro_entry_avg_threshold.

    Eligibility only unlocks the exam; it never changes the level and does not
    look at earlier exam attempts or cooldowns.
    """

    if current_level != PRO_ENTRY_LEVEL:
        return False
    window = last_n(history, ROLLING_WINDOW_SIZE)
    if len(window) < ROLLING_WINDOW_SIZE:
        return False
    avg = rolling_average(window)
    return avg is not None and avg >= config.pro_entry_avg_threshold


def _failed() -> ProExamResult:
    return ProExamResult(new_level=PRO_ENTRY_LEVEL, certified=False)


def process_pro_exam_result(
    submission: ExamSubmission,
    config: PromotionConfig = DEFAULT_PROMOTION_CONFIG,
) -> ProExamResult:
    """Pass: overall >= pass score and no sub-score under the floor -> L8 certified."""

    if not submission.passed:
        log.debug("pro_exam fail reason=not_passed")
        return _failed()
    overall = submission.overall_score
    if overall is not None and overall < config.pro_exam_pass_score:
        log.debug("pro_exam fail reason=overall overall=%.1f need=%.1f", overall, config.pro_exam_pass_score)
        return _failed()
    subs = list(submission.sub_scores or [])
    low = [s for s in subs if s < config.pro_exam_min_sub_score]
    if low:
        log.debug("pro_exam fail reason=sub_score low=%s floor=%.1f", low, config.pro_exam_min_sub_score)
        return _failed()
    log.debug("pro_exam pass overall=%s subs=%s", overall, subs)
    return ProExamResult(new_level=PRO_LEVEL, certified=True)


def exam_retry_at(failed_at: datetime, config: PromotionConfig = DEFAULT_PROMOTION_CONFIG) -> datetime:
    return failed_at + timedelta(days=int(config.pro_retry_cooldown_days))


def in_cooldown(
    failed_at: Optional[datetime],
    now: datetime,
    config: PromotionConfig = DEFAULT_PROMOTION_CONFIG,
) -> bool:
    if failed_at is None:
        return False
    return now < exam_retry_at(failed_at, config)
