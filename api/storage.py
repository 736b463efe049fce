"""Utility helpers for persisting levels, attempt scores and level events.

The production deployment should ideally swap this module for a proper
database-backed implementation.  For now we use simple JSON files stored on
disk so the level a user earned survives restarts.  Every read-modify-write
goes through one process-wide lock, which also makes "append a score, then
evaluate the window, then write the level" a single serialized step per call.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from level_core.level_store import coerce_level


log = logging.getLogger(__name__)

DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
SCORES_DIR = DATA_ROOT / "scores"
USERS_PATH = DATA_ROOT / "users.json"
EVENTS_PATH = DATA_ROOT / "level_events.json"
ACTIVE_SESSIONS_PATH = DATA_ROOT / "sessions_active.json"

_LOCK = threading.RLock()


def _ensure_dirs() -> None:
    SCORES_DIR.mkdir(parents=True, exist_ok=True)
    DATA_ROOT.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        log.warning("unreadable json at %s; using default", path)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _safe_user_file(user_id: str) -> Path:
    # readable prefix is lossy; the digest keeps one file per distinct id
    safe = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in user_id)[:40]
    digest = hashlib.sha256(user_id.encode("utf-8")).hexdigest()
    return SCORES_DIR / f"{safe}-{digest}.json"


# ---- user level records ----
def _load_users() -> Dict[str, Dict[str, Any]]:
    return _read_json(USERS_PATH, {})


def load_user(user_id: str) -> Dict[str, Any]:
    return dict(_load_users().get(user_id) or {})


def update_user(user_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    with _LOCK:
        users = _load_users()
        record = dict(users.get(user_id) or {})
        record.update(updates)
        record["updated_at"] = utcnow_iso()
        users[user_id] = record
        _write_json(USERS_PATH, users)
    return record


class JsonLevelStore:
    """LevelStore backed by users.json.

    ``get_level`` returns the raw stored value; callers coerce it.  The working
    level wins over the placement result once one has been written.
    """

    def get_level(self, user_id: str) -> Optional[object]:
        record = load_user(user_id)
        if record.get("level") is not None:
            return record["level"]
        return record.get("placement_level")

    def set_level(self, user_id: str, level: int) -> None:
        update_user(user_id, {"level": int(level)})


# ---- score history ----
def load_scores(user_id: str) -> List[float]:
    raw = _read_json(_safe_user_file(user_id), {})
    if not isinstance(raw, dict) or raw.get("user_id", user_id) != user_id:
        log.warning("score file for user=%s belongs to another id; ignoring", user_id)
        return []
    scores = raw.get("scores")
    return [float(s) for s in (scores or [])]


def append_score(user_id: str, score: float) -> List[float]:
    """Append one attempt score; returns the full history including it."""

    _ensure_dirs()
    with _LOCK:
        scores = load_scores(user_id)
        scores.append(float(score))
        _write_json(_safe_user_file(user_id), {"user_id": user_id, "scores": scores})
    return scores


def record_attempt(
    user_id: str,
    score: float,
    evaluate: Callable[[int, List[float]], Tuple[int, str]],
    default_level: int,
    on_level_write: Optional[Callable[[int, int, str, List[float]], None]] = None,
) -> Tuple[int, int, str, List[float]]:
    """Append + evaluate + write the level as one serialized unit.

    ``evaluate`` receives the stored level (already coerced) and the full
    history that includes ``score``; it returns ``(new_level, change)``.
    ``on_level_write`` runs inside the same lock whenever the stored level
    changes, so level events land in evaluation order.
    """

    store = JsonLevelStore()
    with _LOCK:
        history = append_score(user_id, score)
        before = coerce_level(store.get_level(user_id), default_level)
        new_level, change = evaluate(before, history)
        if new_level != before or store.get_level(user_id) is None:
            store.set_level(user_id, new_level)
        if new_level != before and on_level_write is not None:
            on_level_write(before, new_level, change, history)
    return before, new_level, change, history


# ---- level events ----
def append_event(event: Dict[str, Any]) -> None:
    with _LOCK:
        events: List[Dict[str, Any]] = _read_json(EVENTS_PATH, [])
        events.append(event)
        _write_json(EVENTS_PATH, events)


def events_for_user(user_id: str) -> List[Dict[str, Any]]:
    events: List[Dict[str, Any]] = _read_json(EVENTS_PATH, [])
    return [e for e in events if e.get("user_id") == user_id]


# ---- placement sessions in progress ----
def _load_sessions() -> Dict[str, Dict[str, Any]]:
    return _read_json(ACTIVE_SESSIONS_PATH, {})


def record_active_session(session_id: str, payload: Dict[str, Any]) -> None:
    if not payload.get("userId"):
        return
    with _LOCK:
        sessions = _load_sessions()
        sessions[session_id] = payload
        _write_json(ACTIVE_SESSIONS_PATH, sessions)


def update_active_session(session_id: str, updates: Dict[str, Any]) -> None:
    with _LOCK:
        sessions = _load_sessions()
        if session_id not in sessions:
            return
        sessions[session_id].update(updates)
        _write_json(ACTIVE_SESSIONS_PATH, sessions)


def clear_active_session(session_id: str) -> None:
    with _LOCK:
        sessions = _load_sessions()
        if session_id in sessions:
            sessions.pop(session_id, None)
            _write_json(ACTIVE_SESSIONS_PATH, sessions)


def active_sessions_for_user(user_id: str) -> List[Dict[str, Any]]:
    sessions = _load_sessions()
    out: List[Dict[str, Any]] = []
    for payload in sessions.values():
        if payload.get("userId") == user_id:
            out.append(payload)
    out.sort(key=lambda r: r.get("startedAt", ""), reverse=True)
    return out
