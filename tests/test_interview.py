from __future__ import annotations

import pytest

from level_core.interview import PlacementInterview, build_steps

from tests.conftest import walk_interview


def _go_to(sess: PlacementInterview, step_id: str) -> None:
    while sess.current.id != step_id:
        step = sess.current
        if step.kind == "why":
            sess.answer(["study"])
        elif step.kind == "occupation":
            sess.answer({"category": "health", "job": "nurse"})
        elif step.kind == "tier":
            sess.answer("basic")
        elif step.kind == "statement":
            sess.answer("yes")
        elif step.kind == "goal":
            sess.answer("10")
        assert sess.advance(), f"stuck at {step.id}"


def test_step_table_order():
    ids = [s.id for s in build_steps()]
    assert ids[:4] == ["language", "why", "occupation", "tier"]
    assert ids[4:10] == [f"statement{i}" for i in range(6)]
    assert ids[10:13] == ["lexicalA", "lexicalB", "lexicalC"]
    assert ids[13:] == ["goal", "notification", "listening", "speaking", "results"]


def test_statement_step_blocks_until_answered(interview):
    _go_to(interview, "statement0")
    assert not interview.can_advance()
    assert interview.advance() is False
    assert interview.current.id == "statement0"

    interview.answer("no")
    assert interview.can_advance()
    assert interview.advance() is True
    assert interview.current.id == "statement1"


def test_profile_steps_have_their_own_gates(interview):
    assert interview.current.id == "language" and interview.can_advance()
    interview.advance()
    assert not interview.can_advance()
    interview.answer(["work", "study"])
    interview.advance()
    interview.answer({"category": "office", "job": ""})
    assert not interview.can_advance(), "occupation needs both category and job"
    interview.answer({"category": "office", "job": "clerk"})
    assert interview.advance()
    assert not interview.can_advance(), "self-report tier is required"


def test_lexical_steps_always_advance(interview):
    _go_to(interview, "lexicalA")
    for _ in range(3):
        assert interview.current.kind == "lexical"
        assert interview.can_advance()
        interview.advance()
    assert interview.current.id == "goal"


def test_back_never_validates(interview):
    _go_to(interview, "statement2")
    interview.answer(None)
    assert interview.back()
    assert interview.current.id == "statement1"
    while interview.back():
        pass
    assert interview.index == 0
    assert interview.back() is False


def test_answers_are_checked_against_the_step(interview):
    _go_to(interview, "statement0")
    with pytest.raises(ValueError):
        interview.answer("sometimes")
    _go_to(interview, "goal")
    with pytest.raises(ValueError):
        interview.answer("45")


def test_words_outside_the_tier_catalog_are_dropped(interview):
    _go_to(interview, "lexicalB")
    interview.answer(["deadline", "scope", "not-a-word"])
    assert interview.answers.lexical.B == ["deadline"]


def test_listening_and_speaking_bind_to_lexical_band(interview):
    _go_to(interview, "lexicalC")
    assert interview.band is None
    interview.answer(["stakeholder"])
    interview.advance()
    assert interview.band == 2
    ids = [s.id for s in interview.steps]
    assert "listening2" in ids and "speaking2" in ids


def test_going_back_and_changing_words_rebinds(interview):
    _go_to(interview, "lexicalC")
    interview.answer(["stakeholder"])
    interview.advance()
    assert interview.band == 2

    interview.back()
    interview.answer([])
    interview.back()
    interview.answer(["feedback"])
    interview.advance()
    interview.advance()
    assert interview.band == 1
    assert [s.id for s in interview.steps][-3:] == ["listening1", "speaking1", "results"]


def test_presented_tokens_are_stable_within_a_session(interview):
    _go_to(interview, "listening0")
    first = interview.presented_tokens()
    assert sorted(first) == sorted(interview.content.get_listening_item(0).tokens)
    assert interview.presented_tokens() == first
    assert interview.step_payload()["tokens"] == first


def test_results_step_is_terminal(interview):
    walk_interview(interview)
    assert interview.is_complete
    assert not interview.can_advance()
    assert interview.advance() is False


def test_finalize_before_results_is_an_error(interview):
    with pytest.raises(RuntimeError):
        interview.finalize()


def test_end_to_end_middle_band_smalltalk_is_level_four(interview):
    walk_interview(
        interview,
        tier="smalltalk",
        statement="partially",
        lexical={"A": ["dog"], "B": ["deadline"], "C": []},
    )
    outcome = interview.finalize()
    assert outcome.band == 1
    assert outcome.listen_correct and outcome.speak_done
    assert outcome.final_band == 1
    assert outcome.level == 4
    assert [s.answer for s in outcome.statements] == ["partially"] * 6
    assert [s.id for s in outcome.statements] == ["s1", "s2", "s3", "s4", "s5", "s6"]
    assert outcome.profile["goal"] == "20"


def test_failed_listening_drops_one_band(interview):
    walk_interview(
        interview,
        tier="smalltalk",
        lexical={"B": ["deadline"]},
        listen_correct=False,
    )
    outcome = interview.finalize()
    assert outcome.band == 1 and outcome.final_band == 0
    assert outcome.level == 1


def test_unanswered_speaking_counts_as_not_done(interview):
    walk_interview(interview, tier="present", lexical={"C": ["scope"]}, speak=None)
    outcome = interview.finalize()
    assert not outcome.speak_done
    assert outcome.final_band == 1
    assert outcome.level == 5


def test_fail_open_capture_is_reported(content):
    sess = PlacementInterview(content, seed=1)
    walk_interview(sess, tier="meeting", lexical={"C": ["align"]}, speak=None)
    sess.back()
    assert sess.current.kind == "speaking"
    attempt = sess.record_speech()
    assert attempt.completed and not attempt.capability_available
    sess.advance()
    outcome = sess.finalize()
    assert outcome.speak_done and not outcome.speech_capability_available
    assert outcome.level == 7


def test_unknown_tier_uses_middle_offset(interview):
    walk_interview(interview, tier="mystery", lexical={})
    assert interview.finalize().level == 1


def test_speaking_answer_without_capture_fails_open(interview):
    walk_interview(interview, tier="meeting", lexical={"C": ["align"]}, speak=None)
    interview.back()
    interview.answer({"completed": False, "available": False})
    attempt = interview.answers.speaking[2]
    assert attempt.completed and not attempt.capability_available
    interview.advance()
    outcome = interview.finalize()
    assert outcome.speak_done and outcome.final_band == 2
    assert outcome.level == 7
