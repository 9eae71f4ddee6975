"""
Combination generator for extracted timetables.

Timetables read from several images usually overlap. Each attempt shuffles
the items and greedily keeps every item that does not clash with what was
already kept; distinct results are returned, largest first.
"""
import logging
import random
from typing import List, Optional, Sequence

from config.settings import Config
from src.availability.models import ScheduleItem

logger = logging.getLogger(__name__)


def combination_signature(items: Sequence[ScheduleItem]) -> str:
    return "||".join(sorted(item.signature for item in items))


def is_conflict_free(items: Sequence[ScheduleItem]) -> bool:
    for i, item in enumerate(items):
        for other in items[i + 1:]:
            if item.conflicts_with(other):
                return False
    return True


class CombinationGenerator:
    """Randomized but reproducible: pass `seed` or an `rng` for fixed output"""

    def __init__(self, max_combinations: Optional[int] = None, max_attempts: Optional[int] = None,
                 seed: Optional[int] = None, rng: Optional[random.Random] = None):
        limits = Config.get_combination_config()
        self.max_combinations = limits["max_combinations"] if max_combinations is None else max_combinations
        self.max_attempts = limits["max_attempts"] if max_attempts is None else max_attempts
        self.rng = rng if rng is not None else random.Random(seed)

    def _greedy_pick(self, items: List[ScheduleItem]) -> List[ScheduleItem]:
        shuffled = list(items)
        self.rng.shuffle(shuffled)
        picked: List[ScheduleItem] = []
        for item in shuffled:
            if not any(item.conflicts_with(kept) for kept in picked):
                picked.append(item)
        return picked

    def generate(self, items: Sequence[ScheduleItem]) -> List[List[ScheduleItem]]:
        """
        Up to `max_combinations` distinct conflict-free combinations.

        Falls back to the original items as the single combination when no
        attempt produced anything. Ordering is by size, largest first, and
        stable among equal sizes.
        """
        items = list(items)

        seen = set()
        combinations: List[List[ScheduleItem]] = []
        for _ in range(self.max_attempts):
            if len(combinations) >= self.max_combinations:
                break
            picked = self._greedy_pick(items)
            if not picked:
                continue
            signature = combination_signature(picked)
            if signature in seen:
                continue
            seen.add(signature)
            # Keep each combination in timetable order
            combinations.append(sorted(picked, key=lambda i: (i.weekdays, i.start, i.end, i.title)))

        if not combinations:
            logger.warning("No combination produced, returning the original items")
            return [items]

        combinations.sort(key=len, reverse=True)
        logger.info(f"🧩 {len(combinations)} combination(s) from {len(items)} item(s) "
                    f"(largest {len(combinations[0])})")
        return combinations
