from __future__ import annotations

import json
from dataclasses import asdict

from level_core.config import DEFAULT_PROMOTION_CONFIG, load_config, promotion_config_from


def test_empty_config_gives_defaults():
    assert asdict(promotion_config_from(None)) == asdict(DEFAULT_PROMOTION_CONFIG)
    assert asdict(promotion_config_from({})) == asdict(DEFAULT_PROMOTION_CONFIG)


def test_nested_section_and_flat_keys():
    cfg = promotion_config_from({
        "promotion": {"promotion_threshold": 75, "demotion_threshold": 55},
        "demotion_threshold": "50",
        "allow_top_level_auto_demote": "yes",
    })
    assert cfg.promotion_threshold == 75.0
    assert cfg.demotion_threshold == 50.0, "flat keys override the nested section"
    assert cfg.allow_top_level_auto_demote is True


def test_bad_values_keep_defaults():
    cfg = promotion_config_from({"promotion_threshold": "high", "pro_retry_cooldown_days": None})
    assert cfg.promotion_threshold == DEFAULT_PROMOTION_CONFIG.promotion_threshold
    assert cfg.pro_retry_cooldown_days == 30


def test_configs_are_fresh_per_call():
    a = promotion_config_from({"promotion_threshold": 70})
    b = promotion_config_from({})
    assert a.promotion_threshold == 70.0
    assert b.promotion_threshold == 80.0


def test_load_config_reads_file_then_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in ("PROMOTION_THRESHOLD", "GATE_TOP_LEVEL_ON_EXAM", "PRO_RETRY_COOLDOWN_DAYS"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / "config.json").write_text(
        json.dumps({"promotion_threshold": 70, "pro_retry_cooldown_days": 14}), encoding="utf-8"
    )
    monkeypatch.setenv("PROMOTION_THRESHOLD", "82.5")
    monkeypatch.setenv("GATE_TOP_LEVEL_ON_EXAM", "1")

    cfg = promotion_config_from(load_config())
    assert cfg.promotion_threshold == 82.5
    assert cfg.pro_retry_cooldown_days == 14
    assert cfg.gate_top_level_on_exam is True


def test_load_config_survives_broken_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PROMOTION_THRESHOLD", raising=False)
    (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
    assert promotion_config_from(load_config()).promotion_threshold == 80.0
