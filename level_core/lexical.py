# level_core/lexical.py
from __future__ import annotations
import logging
from typing import Iterable, Sequence
from .types import PhraseItem

log = logging.getLogger(__name__)

_PHRASE_BANDS = {"easy": 0, "medium": 1, "hard": 2}


def classify(selected_a: Sequence[str], selected_b: Sequence[str], selected_c: Sequence[str]) -> int:
    """Coarse band from the A/B/C word pickers: any C -> 2, any B -> 1, else 0."""

    if len(selected_c) > 0: band = 2
    elif len(selected_b) > 0: band = 1
    else: band = 0
    log.debug("lexical_band a=%d b=%d c=%d band=%d", len(selected_a), len(selected_b), len(selected_c), band)
    return band


def classify_phrases(selected_ids: Iterable[str], catalog: Sequence[PhraseItem]) -> int:
    """Band for the single-list phrase picker; ids missing from the catalog are ignored."""

    chosen = set(selected_ids)
    bands = [_PHRASE_BANDS.get(it.band, 0) for it in catalog if it.id in chosen]
    return max(bands, default=0)
