# level_core/interview.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import random

from .config import DEBUG_SEED
from .content import PlacementContent, load_content
from .evaluator import (
    SpeechCapture,
    capture_speech,
    evaluate_band,
    score_comprehension,
    shuffled_tokens,
)
from .lexical import classify
from .resolver import resolve_level
from .types import (
    LEXICAL_TIERS,
    ComprehensionAttempt,
    LexicalSelection,
    PlacementOutcome,
    ProductionAttempt,
    StatementResponse,
)


log = logging.getLogger(__name__)

STATEMENT_ANSWERS: tuple[str, ...] = ("yes", "partially", "no")
DAILY_GOALS: tuple[str, ...] = ("10", "20", "30", "60")

# kinds whose payload is chosen at runtime from the lexical band
_BAND_BOUND = ("listening", "speaking")


@dataclass(frozen=True)
class Step:
    kind: str
    index: Optional[int] = None
    tier: Optional[str] = None

    @property
    def id(self) -> str:
        if self.tier is not None:
            return f"{self.kind}{self.tier}"
        if self.index is not None:
            return f"{self.kind}{self.index}"
        return self.kind


def build_steps(statement_count: int = 6) -> Tuple[Step, ...]:
    """Base step table; listening/speaking carry no band until the lexical steps are passed."""

    steps: List[Step] = [
        Step("language"),
        Step("why"),
        Step("occupation"),
        Step("tier"),
    ]
    steps.extend(Step("statement", index=i) for i in range(statement_count))
    steps.extend(Step("lexical", tier=t) for t in LEXICAL_TIERS)
    steps.extend([
        Step("goal"),
        Step("notification"),
        Step("listening"),
        Step("speaking"),
        Step("results"),
    ])
    return tuple(steps)


def bind_steps(base: Sequence[Step], band: int) -> Tuple[Step, ...]:
    return tuple(replace(s, index=band) if s.kind in _BAND_BOUND else s for s in base)


@dataclass
class InterviewAnswers:
    language: str = "en"
    why: List[str] = field(default_factory=list)
    occupation_category: Optional[str] = None
    occupation_job: Optional[str] = None
    tier: Optional[str] = None
    statements: List[Optional[str]] = field(default_factory=list)
    lexical: LexicalSelection = field(default_factory=LexicalSelection)
    goal: Optional[str] = None
    notifications: Optional[bool] = None
    listening: Dict[int, ComprehensionAttempt] = field(default_factory=dict)
    speaking: Dict[int, ProductionAttempt] = field(default_factory=dict)


class PlacementInterview:
    """Finite step sequencer for the onboarding placement.

    The cursor only moves forward through steps whose ``can_advance`` holds;
    ``back`` is unconditional. Crossing from the last lexical step into the
    rest of the interview classifies the A/B/C selections and binds the
    listening and speaking steps to that band. Nothing is persisted here:
    ``finalize`` returns the outcome and the caller writes the level.
    """

    def __init__(
        self,
        content: Optional[PlacementContent] = None,
        *,
        seed: Optional[int] = None,
        capture: Optional[SpeechCapture] = None,
    ):
        self.content = content or load_content()
        statements = self.content.get_statements()
        self._statement_ids = [s.id for s in statements]
        self._base = build_steps(len(statements))
        self._table = self._base
        self._band: Optional[int] = None
        self._idx = 0
        self.answers = InterviewAnswers(statements=[None] * len(statements))
        self.capture = capture
        if seed is None:
            seed = DEBUG_SEED
        self.rng = random.Random(seed) if seed is not None else random.Random()
        self._presented: Dict[int, List[str]] = {}
        self._last_lexical = max(i for i, s in enumerate(self._base) if s.kind == "lexical")

    # ---- cursor ----
    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._table

    @property
    def index(self) -> int:
        return self._idx

    @property
    def current(self) -> Step:
        return self._table[self._idx]

    @property
    def band(self) -> Optional[int]:
        return self._band

    @property
    def progress(self) -> float:
        return max(0.0, min(1.0, (self._idx + 1) / len(self._table)))

    @property
    def is_complete(self) -> bool:
        return self.current.kind == "results"

    def can_advance(self) -> bool:
        step = self.current
        a = self.answers
        kind = step.kind
        if kind == "language": return True
        if kind == "why": return len(a.why) > 0
        if kind == "occupation": return bool(a.occupation_category) and bool(a.occupation_job)
        if kind == "tier": return a.tier is not None
        if kind == "statement": return a.statements[step.index] is not None
        if kind == "lexical": return True
        if kind == "goal": return a.goal is not None
        if kind == "notification": return True
        if kind in _BAND_BOUND: return True
        return False

    def advance(self) -> bool:
        if not self.can_advance():
            log.debug("advance blocked at step=%s", self.current.id)
            return False
        if self._idx == self._last_lexical:
            self._bind_band()
        self._idx += 1
        return True

    def back(self) -> bool:
        if self._idx == 0:
            return False
        self._idx -= 1
        return True

    def _bind_band(self) -> None:
        sel = self.answers.lexical
        band = classify(sel.A, sel.B, sel.C)
        if band != self._band:
            log.debug("binding listening/speaking steps to band=%d (was %s)", band, self._band)
        self._band = band
        self._table = bind_steps(self._base, band)

    # ---- answers ----
    def answer(self, value: object) -> None:
        """Record the answer for the current step; the cursor does not move."""

        step = self.current
        a = self.answers
        kind = step.kind
        if kind == "language":
            a.language = str(value)
        elif kind == "why":
            a.why = [str(v) for v in _as_list(value)]
        elif kind == "occupation":
            if not isinstance(value, dict):
                raise ValueError("occupation expects {'category': ..., 'job': ...}")
            a.occupation_category = value.get("category") or None
            a.occupation_job = value.get("job") or None
        elif kind == "tier":
            a.tier = None if value is None else str(value)
        elif kind == "statement":
            if value is not None and value not in STATEMENT_ANSWERS:
                raise ValueError(f"statement answer must be one of {STATEMENT_ANSWERS}")
            a.statements[step.index] = value  # type: ignore[assignment]
        elif kind == "lexical":
            self.select_words(step.tier, _as_list(value))
        elif kind == "goal":
            if value is not None and str(value) not in DAILY_GOALS:
                raise ValueError(f"daily goal must be one of {DAILY_GOALS}")
            a.goal = None if value is None else str(value)
        elif kind == "notification":
            a.notifications = bool(value)
        elif kind == "listening":
            self.answer_listening([str(v) for v in _as_list(value)])
        elif kind == "speaking":
            if isinstance(value, dict):
                self.answer_speaking(
                    bool(value.get("completed")),
                    capability_available=bool(value.get("available", True)),
                )
            else:
                self.answer_speaking(bool(value))
        else:
            raise ValueError(f"step {step.id} takes no answer")

    def select_words(self, tier: str, words: Sequence[object]) -> None:
        catalog = set(self.content.get_vocabulary(tier))
        picked = [str(w) for w in words if str(w) in catalog]
        if len(picked) != len(words):
            log.debug("dropped %d words outside the %s catalog", len(words) - len(picked), tier)
        setattr(self.answers.lexical, tier, picked)

    def presented_tokens(self) -> List[str]:
        band = self._require_band()
        if band not in self._presented:
            self._presented[band] = shuffled_tokens(self.content.get_listening_item(band), self.rng)
        return list(self._presented[band])

    def answer_listening(self, produced_order: Sequence[str]) -> None:
        band = self._require_band()
        self.answers.listening[band] = ComprehensionAttempt(band=band, produced_order=list(produced_order))

    def answer_speaking(self, completed: bool, *, capability_available: bool = True) -> None:
        band = self._require_band()
        if not capability_available:
            # no capture mechanism on the client: fail open like capture_speech
            completed = True
        self.answers.speaking[band] = ProductionAttempt(
            band=band, completed=bool(completed), capability_available=capability_available
        )

    def record_speech(self, capture: Optional[SpeechCapture] = None) -> ProductionAttempt:
        band = self._require_band()
        sentence = self.content.get_speaking_item(band).sentence
        attempt = capture_speech(capture if capture is not None else self.capture, sentence, band)
        self.answers.speaking[band] = attempt
        return attempt

    def _require_band(self) -> int:
        if self._band is None:
            raise RuntimeError("lexical steps not completed; listening/speaking band is unbound")
        return self._band

    # ---- outcome ----
    def finalize(self) -> PlacementOutcome:
        if not self.is_complete:
            raise RuntimeError(f"placement not finished; current step is {self.current.id}")
        band = self._require_band()
        a = self.answers
        listen_ok = score_comprehension(self.content.get_listening_item(band), a.listening.get(band))
        speak = a.speaking.get(band)
        speak_done = bool(speak and speak.completed)
        final_band = evaluate_band(band, listen_ok, speak_done)
        level = resolve_level(final_band, a.tier, None)
        log.info("placement complete band=%d final_band=%d tier=%s level=%d", band, final_band, a.tier, level)
        return PlacementOutcome(
            band=band,
            listen_correct=listen_ok,
            speak_done=speak_done,
            speech_capability_available=bool(speak.capability_available) if speak else True,
            final_band=final_band,
            tier=a.tier,
            level=level,
            statements=[
                StatementResponse(id=sid, answer=ans)  # type: ignore[arg-type]
                for sid, ans in zip(self._statement_ids, a.statements)
                if ans is not None
            ],
            profile={
                "language": a.language,
                "why": list(a.why),
                "occupation": {"category": a.occupation_category, "job": a.occupation_job},
                "goal": a.goal,
                "notifications": a.notifications,
            },
        )

    def step_payload(self) -> Dict[str, object]:
        """JSON-friendly view of the current step for clients."""

        step = self.current
        out: Dict[str, object] = {
            "id": step.id,
            "kind": step.kind,
            "position": self._idx,
            "total": len(self._table),
            "progress": round(self.progress, 3),
            "can_advance": self.can_advance(),
        }
        if step.kind == "statement":
            st = self.content.get_statements()[step.index]
            out.update({"statement_id": st.id, "key": st.key, "text": st.text,
                        "answer": self.answers.statements[step.index]})
        elif step.kind == "lexical":
            out.update({"tier": step.tier, "words": self.content.get_vocabulary(step.tier),
                        "selected": list(self.answers.lexical.for_tier(step.tier))})
        elif step.kind == "listening":
            item = self.content.get_listening_item(step.index)
            out.update({"band": step.index, "sentence": item.sentence, "tokens": self.presented_tokens()})
        elif step.kind == "speaking":
            item = self.content.get_speaking_item(step.index)
            out.update({"band": step.index, "sentence": item.sentence})
        return out


def _as_list(value: object) -> List[object]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]
