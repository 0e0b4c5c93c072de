# app/services/roll_service.py

import logging
import math
import random
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..models.title import BoostLevel, CatalogEntry, RollOutcome

logger = logging.getLogger("api_logger")

DEFAULT_BOOST_LEVELS = (
    BoostLevel(threshold=10, multiplier=10),
    BoostLevel(threshold=100, multiplier=50),
    BoostLevel(threshold=300, multiplier=100),
    BoostLevel(threshold=1000, multiplier=1000),
    BoostLevel(threshold=10000, multiplier=10000),
)

_system_random = random.SystemRandom()


class RollError(Exception):
    pass


class NoEligibleEntries(RollError):
    """Raised when no catalog entry survives validity and reachability filtering."""

    def __init__(self, boost: float, candidates: int):
        self.boost = boost
        self.candidates = candidates
        super().__init__(f"No eligible titles among {candidates} candidates at boost x{boost:g}")


def compute_boost(roll_count: int, levels: Sequence[BoostLevel] = DEFAULT_BOOST_LEVELS) -> float:
    """
    Maps completed rolls to the multiplier for the upcoming roll.

    The upcoming roll is number `roll_count + 1`. Levels are checked from the
    largest threshold down, so a roll hitting both 10 and 300 gets the
    300-tier multiplier. Returns 1 when no milestone is hit.
    """
    if roll_count < 0:
        raise ValueError("roll_count cannot be negative")

    upcoming = roll_count + 1
    for level in sorted(levels, key=lambda lvl: lvl.threshold, reverse=True):
        if upcoming % level.threshold == 0:
            return level.multiplier
    return 1


def _check_boost(boost: float) -> None:
    if not math.isfinite(boost) or boost < 1:
        raise ValueError(f"boost must be a finite number >= 1, got {boost!r}")


def is_valid_ratio(chance_ratio: float) -> bool:
    return math.isfinite(chance_ratio) and chance_ratio > 0


def eligible_entries(
    entries: Iterable[CatalogEntry],
    boost: float = 1,
    prune_unreachable: bool = True,
) -> List[CatalogEntry]:
    """
    Filters out invalid ratios and, on boosted rolls, titles with
    chance_ratio < boost. A ratio equal to the boost stays eligible.
    """
    eligible = []
    for entry in entries:
        if not is_valid_ratio(entry.chance_ratio):
            logger.debug(f"Skipping title {entry.id!r}: invalid chance_ratio {entry.chance_ratio!r}")
            continue
        if prune_unreachable and boost > 1 and entry.chance_ratio < boost:
            continue
        eligible.append(entry)
    return eligible


def boosted_weights(entries: Sequence[CatalogEntry], boost: float = 1) -> List[Tuple[CatalogEntry, float]]:
    """Pairs each (already eligible) entry with its log-dampened boosted weight."""
    base_weights = [1 / entry.chance_ratio for entry in entries]
    if not base_weights:
        return []
    max_weight = max(base_weights)

    weighted = []
    for entry, weight in zip(entries, base_weights):
        rarity_factor = math.log(max_weight / weight + 1)
        weighted.append((entry, weight * (1 + rarity_factor * (boost - 1))))
    return weighted


def selection_odds(
    entries: Iterable[CatalogEntry],
    boost: float = 1,
    prune_unreachable: bool = True,
) -> Dict[Union[int, str], float]:
    _check_boost(boost)
    weighted = boosted_weights(eligible_entries(entries, boost, prune_unreachable), boost)
    total = sum(weight for _, weight in weighted)
    return {entry.id: weight / total for entry, weight in weighted}


def select_entry(
    entries: Iterable[CatalogEntry],
    boost: float = 1,
    rng: Optional[random.Random] = None,
    prune_unreachable: bool = True,
) -> CatalogEntry:
    _check_boost(boost)
    entries = list(entries)
    candidates = eligible_entries(entries, boost, prune_unreachable)
    if not candidates:
        raise NoEligibleEntries(boost, len(entries))

    weighted = boosted_weights(candidates, boost)
    total_weight = sum(weight for _, weight in weighted)

    r = (rng or _system_random).random() * total_weight
    for entry, weight in weighted:
        r -= weight
        if r <= 0:
            return entry

    # Rounding can leave a sliver of r after the last subtraction.
    return weighted[-1][0]


def roll(
    entries: Iterable[CatalogEntry],
    roll_count: int,
    levels: Sequence[BoostLevel] = DEFAULT_BOOST_LEVELS,
    rng: Optional[random.Random] = None,
    prune_unreachable: bool = True,
    fallback_to_base: bool = False,
) -> RollOutcome:
    """
    One full roll: pick the boost for this roll number, then draw a title.

    With `fallback_to_base`, a boosted roll that prunes every title is
    retried once at boost 1 and the outcome reports that boost.
    """
    entries = list(entries)
    boost = compute_boost(roll_count, levels)

    try:
        entry = select_entry(entries, boost, rng, prune_unreachable)
    except NoEligibleEntries:
        if not fallback_to_base or boost == 1:
            raise
        logger.warning(f"Boost x{boost:g} left no eligible titles for roll {roll_count + 1}; rolling unboosted.")
        boost = 1
        entry = select_entry(entries, boost, rng, prune_unreachable)

    return RollOutcome(entry=entry, boost=boost, roll_count=roll_count + 1)
