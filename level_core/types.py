
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Literal
StatementAnswer = Literal["yes","partially","no"]
SelfReportTier = Literal["freeze","basic","smalltalk","meeting","present"]
LexicalTier = Literal["A","B","C"]
PhraseBand = Literal["easy","medium","hard"]
LevelChange = Literal["promoted","demoted","same"]
LevelEventSource = Literal["placement","attempt","exam"]
SELF_REPORT_TIERS: tuple[str, ...] = ("freeze","basic","smalltalk","meeting","present")
LEXICAL_TIERS: tuple[str, ...] = ("A","B","C")
@dataclass
class Statement:
    id: str; key: str; text: str
@dataclass
class StatementResponse:
    id: str; answer: StatementAnswer
@dataclass
class PhraseItem:
    id: str; text: str; band: PhraseBand
@dataclass
class ListeningItem:
    id: str; band: int; sentence: str
    tokens: List[str] = field(default_factory=list)
@dataclass
class SpeakingItem:
    id: str; band: int; sentence: str
@dataclass
class LexicalSelection:
    A: List[str] = field(default_factory=list)
    B: List[str] = field(default_factory=list)
    C: List[str] = field(default_factory=list)
    def for_tier(self, tier: str) -> List[str]:
        return getattr(self, tier)
@dataclass
class ComprehensionAttempt:
    band: int
    produced_order: List[str] = field(default_factory=list)
@dataclass
class ProductionAttempt:
    band: int
    completed: bool
    capability_available: bool = True
@dataclass
class LevelChangeResult:
    new_level: int
    change: LevelChange
@dataclass
class ExamSubmission:
    passed: bool
    overall_score: Optional[float] = None
    sub_scores: Optional[List[float]] = None
@dataclass
class ProExamResult:
    new_level: int
    certified: bool
@dataclass
class PlacementOutcome:
    band: int
    listen_correct: bool
    speak_done: bool
    speech_capability_available: bool
    final_band: int
    tier: Optional[str]
    level: int
    statements: List[StatementResponse] = field(default_factory=list)
    profile: Dict[str, object] = field(default_factory=dict)
