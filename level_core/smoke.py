from __future__ import annotations

import logging
from dataclasses import replace
from typing import List

from .certification import check_pro_eligibility, process_pro_exam_result
from .config import DEBUG_SEED, DEBUG_TRACE, DEFAULT_PROMOTION_CONFIG, TRACE_FIELDS
from .interview import PlacementInterview
from .level_store import InMemoryLevelStore, level_for_promotion, read_level
from .promotion import evaluate_after_attempt
from .scores import ScoreHistory
from .types import ExamSubmission


def _maybe_enable_trace() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    if DEBUG_TRACE:
        logging.getLogger("level_core.promotion").setLevel(logging.INFO)


def _scripted_placement(sess: PlacementInterview) -> None:
    """Walk every step with the answers of a mid-level learner."""

    while not sess.is_complete:
        step = sess.current
        if step.kind == "why":
            sess.answer(["work"])
        elif step.kind == "occupation":
            sess.answer({"category": "office", "job": "analyst"})
        elif step.kind == "tier":
            sess.answer("smalltalk")
        elif step.kind == "statement":
            sess.answer("partially")
        elif step.kind == "lexical" and step.tier == "B":
            sess.answer([sess.content.get_vocabulary("B")[0]])
        elif step.kind == "goal":
            sess.answer("20")
        elif step.kind == "listening":
            sess.answer(sess.content.get_listening_item(step.index).tokens)
        elif step.kind == "speaking":
            sess.record_speech(None)
        sess.advance()


SCORE_STREAM: List[float] = [82, 85, 90, 88, 84, 91, 93, 95, 90, 92, 96, 94, 97, 95, 93]


def run_smoke_session() -> None:
    _maybe_enable_trace()
    logging.info("Starting scripted placement with DEBUG_SEED=%s", DEBUG_SEED)
    logging.info("Trace fields: %s", ", ".join(TRACE_FIELDS))

    store = InMemoryLevelStore()
    user = "smoke-user"
    sess = PlacementInterview()
    _scripted_placement(sess)
    outcome = sess.finalize()
    store.set_level(user, outcome.level)
    logging.info("Placement: band=%d final_band=%d level=%d", outcome.band, outcome.final_band, outcome.level)

    # hold at L7 so the run exercises the Pro exam
    cfg = replace(DEFAULT_PROMOTION_CONFIG, gate_top_level_on_exam=True)
    history = ScoreHistory(user_id=user)
    for score in SCORE_STREAM:
        history.append(score)
        current = level_for_promotion(store.get_level(user))
        res = evaluate_after_attempt(current, history, cfg, user_id=user)
        store.set_level(user, res.new_level)
        logging.info("  score=%.0f level=%d -> %d (%s)", score, current, res.new_level, res.change)

    level = read_level(store, user)
    if check_pro_eligibility(level, history, cfg):
        exam = process_pro_exam_result(ExamSubmission(passed=True, overall_score=90, sub_scores=[80, 75, 92]), cfg)
        store.set_level(user, exam.new_level)
        logging.info("Pro exam: level=%d certified=%s", exam.new_level, exam.certified)
    logging.info("Final level: %d", read_level(store, user))


if __name__ == "__main__":  # pragma: no cover
    run_smoke_session()
