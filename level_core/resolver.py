from __future__ import annotations
import logging
from typing import Optional
from .config import (
    BAND_MIN,
    BAND_MAX,
    BAND_WIDTH,
    OFFSET_MAX,
    PLACEMENT_LEVEL_MIN,
    PLACEMENT_LEVEL_MAX,
    TIER_OFFSETS,
    TIER_OFFSET_DEFAULT,
)

log = logging.getLogger(__name__)


def tier_offset(tier: Optional[str]) -> int:
    if tier is None:
        return TIER_OFFSET_DEFAULT
    return TIER_OFFSETS.get(tier, TIER_OFFSET_DEFAULT)


def _nudge(final_band: int, hint: Optional[int]) -> int:
    # at most one step toward the hint; no hint and an equal hint are the same case
    if hint is None or hint == final_band:
        return final_band
    if hint > final_band:
        return min(BAND_MAX, final_band + 1)
    return max(BAND_MIN, final_band - 1)


def resolve_level(final_band: int, tier: Optional[str], lexical_band_hint: Optional[int] = None) -> int:
    """Placement level 0..8: three levels per band, self-report tier picks the slot."""

    offset = tier_offset(tier)
    band = _nudge(int(final_band), lexical_band_hint)
    level = band * BAND_WIDTH + min(OFFSET_MAX, offset)
    level = max(PLACEMENT_LEVEL_MIN, min(PLACEMENT_LEVEL_MAX, level))
    log.debug(
        "resolve_level final_band=%d hint=%s tier=%s offset=%d band=%d level=%d",
        final_band, lexical_band_hint, tier, offset, band, level,
    )
    return level
