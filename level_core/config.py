from __future__ import annotations
import os, json, pathlib
from dataclasses import dataclass, fields
from typing import Any, Dict


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


# promotion domain
LEVEL_MIN: int = 1
LEVEL_MAX: int = 8
# placement output range
PLACEMENT_LEVEL_MIN: int = 0
PLACEMENT_LEVEL_MAX: int = 8

DEFAULT_LEVEL: int = 4
ROLLING_WINDOW_SIZE: int = 5

DEMOTION_LEVELS: tuple[int, int] = (6, 7)
PRO_ENTRY_LEVEL: int = 7
PRO_LEVEL: int = 8

BAND_MIN: int = 0
BAND_MAX: int = 2
BAND_WIDTH: int = 3
TIER_OFFSETS: dict[str, int] = {
    "freeze": 0,
    "basic": 0,
    "smalltalk": 1,
    "meeting": 1,
    "present": 2,
}
TIER_OFFSET_DEFAULT: int = 1
OFFSET_MAX: int = 2

# stored tier names from older clients map straight to a level
TIER_TO_LEVEL: dict[str, int] = {
    "freeze": 0,
    "basic": 2,
    "smalltalk": 4,
    "meeting": 6,
    "present": 8,
}

AUDIT_EXPORT_ENABLED: bool = True

DEBUG_TRACE: bool = False
DEBUG_SEED: int | None = None
TRACE_FIELDS: tuple[str, ...] = (
    "user_id",
    "source",
    "band",
    "final_band",
    "tier",
    "rolling_avg",
    "level_before",
    "level_after",
    "change",
)

# // env overrides for staging/ops; defaults remain conservative.
AUDIT_EXPORT_ENABLED = _env_bool("AUDIT_EXPORT_ENABLED", AUDIT_EXPORT_ENABLED)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
_seed_raw = os.getenv("DEBUG_SEED")
DEBUG_SEED = _env_int("DEBUG_SEED", 0) if _seed_raw else None


@dataclass(frozen=True)
class PromotionConfig:
    """Thresholds for the rolling-window ladder and the Pro exam."""

    promotion_threshold: float = 80.0
    demotion_threshold: float = 60.0
    pro_entry_avg_threshold: float = 85.0
    pro_exam_pass_score: float = 85.0
    pro_exam_min_sub_score: float = 70.0
    pro_retry_cooldown_days: int = 30
    allow_top_level_auto_demote: bool = False
    # off: a rolling average alone may lift L7 to L8
    gate_top_level_on_exam: bool = False


DEFAULT_PROMOTION_CONFIG = PromotionConfig()

_ENV_KEYS: dict[str, str] = {
    "promotion_threshold": "PROMOTION_THRESHOLD",
    "demotion_threshold": "DEMOTION_THRESHOLD",
    "pro_entry_avg_threshold": "PRO_ENTRY_AVG_THRESHOLD",
    "pro_exam_pass_score": "PRO_EXAM_PASS_SCORE",
    "pro_exam_min_sub_score": "PRO_EXAM_MIN_SUB_SCORE",
    "pro_retry_cooldown_days": "PRO_RETRY_COOLDOWN_DAYS",
    "allow_top_level_auto_demote": "ALLOW_TOP_LEVEL_AUTO_DEMOTE",
    "gate_top_level_on_exam": "GATE_TOP_LEVEL_ON_EXAM",
}


def _coerce_field(raw: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(raw, str):
            return raw.strip().lower() in {"1", "true", "yes", "on"}
        return bool(raw)
    try:
        return int(raw) if isinstance(default, int) else float(raw)
    except (TypeError, ValueError):
        return default


def promotion_config_from(cfg: Dict[str, Any] | None) -> PromotionConfig:
    """Build a fresh PromotionConfig from a config dict; unknown or bad values keep defaults."""

    cfg = cfg or {}
    section: Dict[str, Any] = dict(cfg.get("promotion") or {}) if isinstance(cfg.get("promotion"), dict) else {}
    section.update({k: v for k, v in cfg.items() if k in _ENV_KEYS})
    values: Dict[str, Any] = {}
    for f in fields(PromotionConfig):
        default = getattr(DEFAULT_PROMOTION_CONFIG, f.name)
        if f.name in section:
            values[f.name] = _coerce_field(section[f.name], default)
    return PromotionConfig(**values)


def _env_true(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1","true","yes","on")
def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    for key, env_name in _ENV_KEYS.items():
        if e.get(env_name):
            cfg[key] = _env_true(env_name) if key in ("allow_top_level_auto_demote", "gate_top_level_on_exam") else e.get(env_name)
    if e.get("DEBUG_SEED"): cfg["DEBUG_SEED"] = _env_int("DEBUG_SEED", 0)
    return cfg
