from __future__ import annotations
import json, importlib.resources as ir
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from .types import Statement, PhraseItem, ListeningItem, SpeakingItem


@dataclass
class PlacementContent:
    """Read-only catalog backing the placement interview."""

    statements: List[Statement]
    vocabulary: Dict[str, List[str]]
    listening: Dict[int, ListeningItem]
    speaking: Dict[int, SpeakingItem]
    phrases: List[PhraseItem] = field(default_factory=list)

    def get_statements(self) -> List[Statement]:
        return list(self.statements)

    def get_vocabulary(self, tier: str) -> List[str]:
        return list(self.vocabulary[tier])

    def get_listening_item(self, band: int) -> ListeningItem:
        return self.listening[int(band)]

    def get_speaking_item(self, band: int) -> SpeakingItem:
        return self.speaking[int(band)]


def parse_content(raw: dict) -> PlacementContent:
    listening = [ListeningItem(**r) for r in raw.get("listening", [])]
    speaking = [SpeakingItem(**r) for r in raw.get("speaking", [])]
    return PlacementContent(
        statements=[Statement(**r) for r in raw.get("statements", [])],
        vocabulary={k: list(v) for k, v in (raw.get("vocabulary") or {}).items()},
        listening={it.band: it for it in listening},
        speaking={it.band: it for it in speaking},
        phrases=[PhraseItem(**r) for r in raw.get("phrases", [])],
    )


def load_content(path: Optional[Path] = None) -> PlacementContent:
    if path is None:
        data = ir.files(__package__).joinpath("data/placement.json").read_text(encoding="utf-8")
    else:
        data = path.read_text(encoding="utf-8")
    return parse_content(json.loads(data))
