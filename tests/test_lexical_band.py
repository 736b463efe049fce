from __future__ import annotations

from itertools import product

from level_core.lexical import classify, classify_phrases


def test_any_c_word_wins_over_lower_tiers():
    assert classify([], [], ["scope"]) == 2
    assert classify(["dog"], ["deadline"], ["scope"]) == 2


def test_b_word_without_c_gives_middle_band():
    assert classify(["dog", "run"], ["deadline"], []) == 1


def test_a_words_alone_never_raise_the_band():
    assert classify([], [], []) == 0
    assert classify(["dog", "run", "sky"], [], []) == 0


def test_adding_a_c_word_never_lowers_the_band():
    samples = [[], ["x"], ["x", "y"]]
    for a, b, c in product(samples, repeat=3):
        before = classify(a, b, c)
        after = classify(a, b, c + ["scope"])
        assert after >= before
        assert after == 2


def test_phrase_picker_uses_hardest_known_phrase(content):
    catalog = content.phrases
    assert classify_phrases([], catalog) == 0
    assert classify_phrases(["v1", "v2"], catalog) == 0
    assert classify_phrases(["v1", "v6"], catalog) == 1
    assert classify_phrases(["v6", "v11"], catalog) == 2
    assert classify_phrases(["nope"], catalog) == 0
