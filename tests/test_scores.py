from __future__ import annotations

from level_core.scores import ScoreHistory, last_n, rolling_average


def test_history_keeps_insertion_order():
    history = ScoreHistory(user_id="u1")
    for s in (10, 20, 30):
        history.append(s)
    assert history.scores == (10.0, 20.0, 30.0)
    assert len(history) == 3


def test_last_n_takes_the_newest():
    history = ScoreHistory.from_scores(range(1, 9))
    assert history.last_n() == [4.0, 5.0, 6.0, 7.0, 8.0]
    assert last_n([1, 2], 5) == [1, 2]
    assert last_n([1, 2, 3], 0) == []


def test_rolling_average():
    assert rolling_average([]) is None
    assert rolling_average([70, 80]) == 75
    assert rolling_average(ScoreHistory.from_scores([0, 100, 100, 100, 100, 100])) == 100
