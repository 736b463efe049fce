from __future__ import annotations

import pytest

from level_core.content import PlacementContent, load_content
from level_core.interview import PlacementInterview


def walk_interview(
    sess: PlacementInterview,
    *,
    tier: str = "smalltalk",
    statement: str = "partially",
    lexical: dict[str, list[str]] | None = None,
    listen_correct: bool = True,
    speak: bool | None = True,
) -> PlacementInterview:
    """Drive a session to the results step with fixed answers.

    ``speak=None`` leaves the speaking step unanswered.
    """

    lexical = lexical or {}
    while not sess.is_complete:
        step = sess.current
        if step.kind == "why":
            sess.answer(["work"])
        elif step.kind == "occupation":
            sess.answer({"category": "office", "job": "analyst"})
        elif step.kind == "tier":
            sess.answer(tier)
        elif step.kind == "statement":
            sess.answer(statement)
        elif step.kind == "lexical":
            sess.answer(lexical.get(step.tier, []))
        elif step.kind == "goal":
            sess.answer("20")
        elif step.kind == "listening":
            tokens = list(sess.content.get_listening_item(step.index).tokens)
            if not listen_correct:
                tokens = list(reversed(tokens))
            sess.answer(tokens)
        elif step.kind == "speaking" and speak is not None:
            sess.answer(speak)
        assert sess.advance(), f"stuck at {step.id}"
    return sess


@pytest.fixture
def content() -> PlacementContent:
    return load_content()


@pytest.fixture
def interview(content) -> PlacementInterview:
    return PlacementInterview(content, seed=7)
