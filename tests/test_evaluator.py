from __future__ import annotations

import random

from level_core.evaluator import (
    UnavailableCapture,
    capture_speech,
    evaluate_band,
    listen_correct,
    shuffled_tokens,
)


class _Recognizer:
    available = True

    def __init__(self, result: bool = True, boom: bool = False):
        self.result = result
        self.boom = boom
        self.heard: list[str] = []

    def capture(self, sentence: str) -> bool:
        self.heard.append(sentence)
        if self.boom:
            raise RuntimeError("mic unplugged")
        return self.result


def test_listening_requires_exact_order(content):
    item = content.get_listening_item(1)
    assert listen_correct(item, list(item.tokens))
    swapped = list(item.tokens)
    swapped[0], swapped[1] = swapped[1], swapped[0]
    assert not listen_correct(item, swapped)
    assert not listen_correct(item, item.tokens[:-1])


def test_shuffle_is_a_permutation_and_leaves_item_alone(content):
    item = content.get_listening_item(2)
    before = list(item.tokens)
    out = shuffled_tokens(item, random.Random(3))
    assert sorted(out) == sorted(before)
    assert item.tokens == before


def test_band_drops_one_step_when_either_task_fails():
    assert evaluate_band(2, True, True) == 2
    assert evaluate_band(2, False, True) == 1
    assert evaluate_band(2, True, False) == 1
    assert evaluate_band(1, False, False) == 0
    assert evaluate_band(0, False, False) == 0


def test_missing_recognizer_fails_open_but_is_flagged():
    attempt = capture_speech(None, "Yes, I can do that.", 0)
    assert attempt.completed and not attempt.capability_available

    attempt = capture_speech(UnavailableCapture(), "Yes, I can do that.", 0)
    assert attempt.completed and not attempt.capability_available


def test_recognizer_result_is_passed_through():
    rec = _Recognizer(result=False)
    attempt = capture_speech(rec, "Let me check.", 1)
    assert rec.heard == ["Let me check."]
    assert attempt.capability_available and not attempt.completed


def test_recognizer_error_counts_as_completed():
    attempt = capture_speech(_Recognizer(boom=True), "Let me check.", 1)
    assert attempt.completed and attempt.capability_available
