from __future__ import annotations
from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from datetime import datetime, timezone
from dataclasses import asdict
import uuid, logging, typing as t

# ---- Engine imports ----
from level_core.audit_export import level_event, to_json as audit_to_json, to_csv as audit_to_csv
from level_core.certification import check_pro_eligibility, exam_retry_at, in_cooldown, process_pro_exam_result
from level_core.config import AUDIT_EXPORT_ENABLED, DEFAULT_LEVEL, load_config, promotion_config_from
from level_core.interview import PlacementInterview
from level_core.level_store import coerce_level, level_for_promotion
from level_core.promotion import evaluate_after_attempt, window_summary
from level_core.types import ExamSubmission
from .storage import (
    JsonLevelStore,
    active_sessions_for_user,
    append_event,
    clear_active_session,
    events_for_user,
    load_scores,
    load_user,
    record_active_session,
    record_attempt,
    update_active_session,
    update_user,
    utcnow_iso,
)

log = logging.getLogger(__name__)

SESS: dict[str, PlacementInterview] = {}
SESSION_INFO: dict[str, dict[str, t.Any]] = {}

app = FastAPI(title="WorkSpeak Level API")

@app.get("/")
def root():
    return {"status": "ok", "service": "workspeak-level-api"}

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,  # keep False unless you use cookies
)

# ---- Schemas ----
class StartReq(BaseModel):
    user_id: str | None = None
    seed: int | None = None

class StepAnswerReq(BaseModel):
    value: t.Any = None

class AttemptReq(BaseModel):
    score: float

class ExamReq(BaseModel):
    passed: bool
    overall_score: float | None = None
    sub_scores: list[float] | None = None

# ---- Helpers ----
def _now_iso() -> str:
    return utcnow_iso()


def _promotion_config():
    return promotion_config_from(load_config())


def _session(sid: str) -> PlacementInterview:
    sess = SESS.get(sid)
    if not sess: raise HTTPException(404, "session not found")
    return sess


def _parse_ts(raw: t.Any) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        return None


def _serialize_outcome(outcome) -> dict[str, t.Any]:
    return {
        "band": outcome.band,
        "listen_correct": outcome.listen_correct,
        "speak_done": outcome.speak_done,
        "speech_capability_available": outcome.speech_capability_available,
        "final_band": outcome.final_band,
        "tier": outcome.tier,
        "level": outcome.level,
        "statements": [{"id": s.id, "answer": s.answer} for s in outcome.statements],
        "profile": outcome.profile,
    }

# ---- Health ----
@app.get("/health")
def health():
    cfg = _promotion_config()
    return {
        "audit_export_enabled": AUDIT_EXPORT_ENABLED,
        "active_sessions": len(SESS),
        "promotion_config": asdict(cfg),
    }

# ---- Placement interview ----
@app.post("/placement/start")
def placement_start(req: StartReq | None = None):
    req = req or StartReq()
    sid = str(uuid.uuid4())
    sess = PlacementInterview(seed=req.seed)
    SESS[sid] = sess
    started_at = _now_iso()
    SESSION_INFO[sid] = {"user_id": req.user_id, "started_at": started_at}
    if req.user_id:
        record_active_session(
            sid,
            {
                "sessionId": sid,
                "userId": req.user_id,
                "startedAt": started_at,
                "lastUpdated": started_at,
                "lastStep": sess.current.id,
            },
        )
    return {"session_id": sid, "step": sess.step_payload()}

@app.get("/placement/{sid}")
def placement_state(sid: str):
    sess = _session(sid)
    return {"session_id": sid, "step": sess.step_payload()}

@app.post("/placement/{sid}/answer")
def placement_answer(sid: str, req: StepAnswerReq):
    sess = _session(sid)
    try:
        sess.answer(req.value)
    except ValueError as e:
        raise HTTPException(422, str(e))
    return {"session_id": sid, "step": sess.step_payload()}

@app.post("/placement/{sid}/next")
def placement_next(sid: str):
    sess = _session(sid)
    if not sess.advance():
        raise HTTPException(409, f"step {sess.current.id} cannot advance yet")
    meta = SESSION_INFO.get(sid, {})
    if meta.get("user_id"):
        update_active_session(sid, {"lastUpdated": _now_iso(), "lastStep": sess.current.id})
    return {"session_id": sid, "step": sess.step_payload()}

@app.post("/placement/{sid}/back")
def placement_back(sid: str):
    sess = _session(sid)
    sess.back()
    return {"session_id": sid, "step": sess.step_payload()}

@app.post("/placement/{sid}/finish")
def placement_finish(sid: str):
    sess = _session(sid)
    if not sess.is_complete:
        raise HTTPException(409, f"placement not finished; current step is {sess.current.id}")
    outcome = sess.finalize()
    info = SESSION_INFO.get(sid, {})
    user_id = info.get("user_id")
    if user_id:
        before = load_user(user_id).get("level")
        update_user(
            user_id,
            {
                "placement_level": outcome.level,
                "level": outcome.level,
                "placement_statements": [s.answer for s in outcome.statements],
                "placed_at": _now_iso(),
            },
        )
        append_event(level_event(
            user_id, "placement",
            None if before is None else coerce_level(before),
            outcome.level, "same",
        ))
        clear_active_session(sid)
        log.info("placement stored user=%s level=%d", user_id, outcome.level)
    SESS.pop(sid, None)
    SESSION_INFO.pop(sid, None)
    return {"session_id": sid, "user_id": user_id, "outcome": _serialize_outcome(outcome)}

# ---- Levels ----
@app.get("/users/{user_id}/level")
def get_level(user_id: str):
    raw = JsonLevelStore().get_level(user_id)
    record = load_user(user_id)
    return {
        "user_id": user_id,
        "level": coerce_level(raw, DEFAULT_LEVEL),
        "stored": raw is not None,
        "certified": bool(record.get("certified", False)),
    }

@app.post("/users/{user_id}/attempts")
def post_attempt(user_id: str, req: AttemptReq):
    cfg = _promotion_config()

    def _evaluate(level: int, history: list[float]) -> tuple[int, str]:
        res = evaluate_after_attempt(level_for_promotion(level), history, cfg, user_id=user_id)
        return res.new_level, res.change

    def _record_event(before: int, new_level: int, change: str, history: list[float]) -> None:
        summary = window_summary(history)
        append_event(level_event(
            user_id, "attempt", before, new_level, change,
            rolling_avg=summary["rolling_avg"], window_size=summary["window_size"],
        ))
        log.info("level %s user=%s %d->%d", change, user_id, before, new_level)

    before, new_level, change, history = record_attempt(
        user_id, req.score, _evaluate, DEFAULT_LEVEL, on_level_write=_record_event,
    )
    summary = window_summary(history)
    return {
        "user_id": user_id,
        "new_level": new_level,
        "change": change,
        "attempts": len(history),
        **summary,
    }

@app.get("/users/{user_id}/scores")
def get_scores(user_id: str):
    history = load_scores(user_id)
    return {"user_id": user_id, "scores": history, **window_summary(history)}

@app.get("/users/{user_id}/pro/eligibility")
def pro_eligibility(user_id: str):
    cfg = _promotion_config()
    level = coerce_level(JsonLevelStore().get_level(user_id), DEFAULT_LEVEL)
    history = load_scores(user_id)
    failed_at = _parse_ts(load_user(user_id).get("last_exam_failed_at"))
    now = datetime.now(timezone.utc)
    cooling = in_cooldown(failed_at, now, cfg)
    return {
        "user_id": user_id,
        "level": level,
        "eligible": check_pro_eligibility(level, history, cfg),
        "in_cooldown": cooling,
        "retry_at": exam_retry_at(failed_at, cfg).isoformat() if cooling and failed_at else None,
    }

@app.post("/users/{user_id}/pro/exam")
def pro_exam(user_id: str, req: ExamReq):
    cfg = _promotion_config()
    level = coerce_level(JsonLevelStore().get_level(user_id), DEFAULT_LEVEL)
    history = load_scores(user_id)
    if not check_pro_eligibility(level, history, cfg):
        raise HTTPException(403, "not eligible for the Pro exam")
    failed_at = _parse_ts(load_user(user_id).get("last_exam_failed_at"))
    now = datetime.now(timezone.utc)
    if in_cooldown(failed_at, now, cfg):
        raise HTTPException(403, f"Pro exam cooldown until {exam_retry_at(failed_at, cfg).isoformat()}")

    result = process_pro_exam_result(
        ExamSubmission(passed=req.passed, overall_score=req.overall_score, sub_scores=req.sub_scores),
        cfg,
    )
    updates: dict[str, t.Any] = {"level": result.new_level, "certified": result.certified}
    if not result.certified:
        updates["last_exam_failed_at"] = now.isoformat()
    update_user(user_id, updates)
    change = "promoted" if result.new_level > level else "same"
    append_event(level_event(user_id, "exam", level, result.new_level, change))
    retry_at = None if result.certified else exam_retry_at(now, cfg).isoformat()
    return {
        "user_id": user_id,
        "new_level": result.new_level,
        "certified": result.certified,
        "retry_at": retry_at,
    }

@app.get("/users/{user_id}/sessions/active")
def list_active_sessions(user_id: str):
    sessions = active_sessions_for_user(user_id)
    return {"sessions": sessions}

# ---- Audit ----
@app.get("/users/{user_id}/level-events.json")
def get_events_json(user_id: str):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    return {"user_id": user_id, **audit_to_json(events_for_user(user_id))}


@app.get("/users/{user_id}/level-events.csv")
def get_events_csv(user_id: str):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    body = audit_to_csv(events_for_user(user_id))
    filename = f"{user_id}_level_events.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )
