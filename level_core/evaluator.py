# level_core/evaluator.py
from __future__ import annotations

import logging
import random
from typing import List, Optional, Protocol, Sequence

from .config import BAND_MIN
from .types import ComprehensionAttempt, ListeningItem, ProductionAttempt


log = logging.getLogger(__name__)


class SpeechCapture(Protocol):
    """Collaborator that records the user reading a sentence aloud."""

    available: bool

    def capture(self, sentence: str) -> bool: ...


class UnavailableCapture:
    """Stand-in for clients without a speech recognizer."""

    available = False

    def capture(self, sentence: str) -> bool:
        return True


def shuffled_tokens(item: ListeningItem, rng: Optional[random.Random] = None) -> List[str]:
    """Presentation order for the re-ordering task; the item itself is never touched."""

    rng = rng or random.Random()
    out = list(item.tokens)
    rng.shuffle(out)
    return out


def listen_correct(item: ListeningItem, produced_order: Sequence[str]) -> bool:
    return list(produced_order) == list(item.tokens)


def score_comprehension(item: ListeningItem, attempt: Optional[ComprehensionAttempt]) -> bool:
    if attempt is None:
        return False
    return listen_correct(item, attempt.produced_order)


def capture_speech(capture: Optional[SpeechCapture], sentence: str, band: int) -> ProductionAttempt:
    """Run the capture collaborator; a missing recognizer fails open as completed."""

    if capture is None or not getattr(capture, "available", False):
        log.info("speech capture unavailable; treating band %d speaking step as completed", band)
        return ProductionAttempt(band=band, completed=True, capability_available=False)
    try:
        done = bool(capture.capture(sentence))
    except Exception:
        # recognizer errors count as a finished attempt, as a missing recognizer does
        log.warning("speech capture raised; treating band %d speaking step as completed", band, exc_info=True)
        return ProductionAttempt(band=band, completed=True, capability_available=True)
    return ProductionAttempt(band=band, completed=done, capability_available=True)


def evaluate_band(band: int, listening_ok: bool, speaking_done: bool) -> int:
    """Keep the band when both tasks pass, otherwise drop one step (floor 0)."""

    final_band = int(band) if (listening_ok and speaking_done) else max(BAND_MIN, int(band) - 1)
    log.debug(
        "band_eval band=%d listen=%s speak=%s final=%d",
        band,
        int(listening_ok),
        int(speaking_done),
        final_band,
    )
    return final_band
