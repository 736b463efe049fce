from __future__ import annotations

import logging

from level_core.config import DEFAULT_PROMOTION_CONFIG
from level_core.smoke import run_smoke_session
from tools.replay_scores import _read_scores, replay


def test_replay_trajectory():
    rows = replay([80] * 5 + [40] * 5, 6, DEFAULT_PROMOTION_CONFIG)
    assert len(rows) == 10
    assert (rows[4]["level_after"], rows[4]["change"]) == (7, "promoted")
    assert [r["change"] for r in rows[5:]] == ["same", "same", "demoted", "demoted", "same"]
    assert rows[-1]["level_after"] == 5
    assert rows[0]["avg5"] == 80.0


def test_replay_reads_csv_and_json(tmp_path):
    csv_path = tmp_path / "scores.csv"
    csv_path.write_text("score\n81\n79.5\n\n90\n", encoding="utf-8")
    assert _read_scores(csv_path) == [81.0, 79.5, 90.0]

    json_path = tmp_path / "scores.json"
    json_path.write_text('{"scores": [70, 75]}', encoding="utf-8")
    assert _read_scores(json_path) == [70.0, 75.0]


def test_smoke_session_reaches_certification(caplog):
    caplog.set_level(logging.INFO)
    run_smoke_session()
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("Placement: band=1 final_band=1 level=4") for m in messages)
    assert "Pro exam: level=8 certified=True" in messages
    assert messages[-1] == "Final level: 8"
