# app/routers/dependencies.py

import random
from typing import List

from ..core.config import settings
from ..models.title import BoostLevel

_rng = random.SystemRandom()

def get_rng() -> random.Random:
    """Random source for rolls. Tests override this with a seeded generator."""
    return _rng

def get_boost_levels() -> List[BoostLevel]:
    return [
        BoostLevel(threshold=threshold, multiplier=multiplier)
        for threshold, multiplier in settings.boost_levels_list
    ]
