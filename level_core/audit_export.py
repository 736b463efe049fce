"""Helpers to export level-change events in JSON/CSV formats."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, List, Dict, Any, Optional
import csv
import io

_FIELDS: tuple[str, ...] = (
    "t",
    "user_id",
    "source",
    "level_before",
    "level_after",
    "change",
    "rolling_avg",
    "window_size",
)
_NULLABLE = frozenset({"level_before", "rolling_avg"})


def level_event(
    user_id: str,
    source: str,
    level_before: Optional[int],
    level_after: int,
    change: str,
    *,
    rolling_avg: Optional[float] = None,
    window_size: int = 0,
    t: Optional[str] = None,
) -> Dict[str, Any]:
    """One audit row per level write (placement result, attempt evaluation or exam)."""

    return {
        "t": t or datetime.now(timezone.utc).isoformat(),
        "user_id": user_id,
        "source": source,
        "level_before": level_before,
        "level_after": level_after,
        "change": change,
        "rolling_avg": rolling_avg,
        "window_size": window_size,
    }


def _normalize_event(event: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val = event.get(key)
        if key in _NULLABLE and val is None:
            # no prior level or no window: empty cell, not a real 0
            out[key] = None
        elif key in {"level_before", "level_after", "window_size"}:
            try:
                out[key] = int(val)
            except (TypeError, ValueError):
                out[key] = None if key in _NULLABLE else 0
        elif key == "rolling_avg":
            try:
                out[key] = float(val)
            except (TypeError, ValueError):
                out[key] = None
        else:
            out[key] = "" if val is None else str(val)
    return out


def to_json(events: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a JSON-safe payload for audit export."""

    normalized: List[Dict[str, Any]] = [_normalize_event(evt or {}) for evt in events]
    return {"events": normalized}


def to_csv(events: Iterable[Dict[str, Any]]) -> str:
    """Render audit events as CSV with a fixed header."""

    normalized = [_normalize_event(evt or {}) for evt in events]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["level_event", "to_json", "to_csv"]
