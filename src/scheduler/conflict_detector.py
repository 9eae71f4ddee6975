"""
Conflict detection between a candidate interval and stored commitments
"""
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from src.availability.models import Candidate, Slot
from src.availability.slot_model import same_commitment
from src.availability.time_utils import DAY_MINUTES, overlaps

logger = logging.getLogger(__name__)


@dataclass
class ConflictResult:
    """Outcome of one conflict check; an exact duplicate is reported, never raised"""
    has_conflict: bool
    conflicts: List[Slot] = field(default_factory=list)
    duplicate: Optional[Slot] = None

    @property
    def is_duplicate(self) -> bool:
        return self.duplicate is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasConflict": self.has_conflict,
            "isDuplicate": self.is_duplicate,
            "conflicts": [c.to_dict() for c in self.conflicts],
        }


def _project(slot: Slot, candidate: Candidate) -> Optional[Tuple[int, int]]:
    """Range of `slot` in minutes relative to the candidate's midnight, if it touches that span"""
    day = candidate.day
    if slot.applies_to(day):
        return slot.start, slot.end
    # Candidates may run past midnight; the next day's slots then sit at +1440
    if candidate.end_minutes > DAY_MINUTES and slot.applies_to(day + timedelta(days=1)):
        return slot.start + DAY_MINUTES, slot.end + DAY_MINUTES
    return None


def detect_conflict(candidate: Candidate, existing: Iterable[Slot],
                    exclude: Optional[Slot] = None) -> ConflictResult:
    """
    Check a candidate against every commitment that applies to its date.

    Weekday-anchored commitments are projected onto the candidate's date. A
    commitment with the same start, end and title is an exact duplicate and
    short-circuits the check. Otherwise every overlapping commitment is
    returned, ordered by start then end.
    """
    start = candidate.start_minutes
    end = candidate.end_minutes
    found: List[Tuple[int, int, Slot]] = []

    for slot in existing:
        if exclude is not None and same_commitment(slot, exclude):
            continue
        projected = _project(slot, candidate)
        if projected is None:
            continue
        slot_start, slot_end = projected

        if (slot_start, slot_end, slot.title) == (start, end, candidate.title):
            logger.info(f"🔁 Duplicate of existing '{slot.title}' at {slot.start_text}-{slot.end_text}")
            return ConflictResult(has_conflict=True, conflicts=[slot], duplicate=slot)

        if overlaps(start, end, slot_start, slot_end):
            found.append((slot_start, slot_end, slot))

    found.sort(key=lambda item: (item[0], item[1]))
    conflicts = [slot for _, _, slot in found]
    if conflicts:
        logger.info(f"⚠️  '{candidate.title}' overlaps {len(conflicts)} commitment(s) "
                    f"on {candidate.day.isoformat()}")
    return ConflictResult(has_conflict=bool(conflicts), conflicts=conflicts)
