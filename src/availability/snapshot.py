"""
Schedule snapshot: the caller-owned context object the engine reads and returns
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from src.availability.errors import FormatError
from src.availability.models import (
    DEFAULT_PRIORITY,
    Candidate,
    Slot,
    SlotKind,
    WeekdayAnchor,
    parse_priority,
    parse_weekday_base,
)
from src.availability.slot_merger import merge
from src.availability.slot_model import (
    events_from_candidate,
    expand_recurring_record,
    is_date_blocked,
)

logger = logging.getLogger(__name__)


def _is_instant(value: Any) -> bool:
    return isinstance(value, str) and "T" in value


def _exception_slots(data: Dict[str, Any], base: int) -> List[Slot]:
    if _is_instant(data.get("startTime")) or data.get("startDateTime"):
        priority = data.get("priority")
        return events_from_candidate(
            Candidate.from_dict(data),
            priority=DEFAULT_PRIORITY[SlotKind.EVENT] if priority is None else parse_priority(priority),
            location=data.get("location"),
            slot_id=None if data.get("id") is None else str(data["id"]),
        )
    return [Slot.from_dict(data, SlotKind.EVENT, base)]


def _personal_slots(data: Dict[str, Any], base: int) -> List[Slot]:
    # Stored form carries one anchor; intent form carries a weekday list and may wrap midnight.
    if data.get("dayOfWeek") is not None:
        return [Slot.from_dict(data, SlotKind.PERSONAL, base)]
    return expand_recurring_record(data, SlotKind.PERSONAL, base)


def _records(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    records = data.get(key) or []
    if not isinstance(records, list):
        raise FormatError(records, f"'{key}' to be a list")
    return records


@dataclass
class ScheduleSnapshot:
    """
    Everything the engine knows about one profile for the duration of a call.

    recurring_slots: weekday-anchored availability
    date_overrides: date-anchored availability and holiday blocks
    exceptions: one-off events
    personal_times: blocked personal time (sleep, commute, classes)
    """
    recurring_slots: List[Slot] = field(default_factory=list)
    date_overrides: List[Slot] = field(default_factory=list)
    exceptions: List[Slot] = field(default_factory=list)
    personal_times: List[Slot] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScheduleSnapshot":
        data = data or {}
        base = parse_weekday_base(data.get("weekdayBase"))
        slots: List[Slot] = []
        for record in _records(data, "recurringSlots"):
            slots.append(Slot.from_dict(record, SlotKind.AVAILABILITY, base))
        for record in _records(data, "dateOverrides"):
            slots.append(Slot.from_dict(record, SlotKind.AVAILABILITY, base))
        for record in _records(data, "exceptions"):
            slots.extend(_exception_slots(record, base))
        for record in _records(data, "personalTimes"):
            slots.extend(_personal_slots(record, base))
        snapshot = cls.from_slots(slots)
        logger.debug(f"Snapshot loaded: {snapshot.summary()}")
        return snapshot

    @classmethod
    def from_slots(cls, slots: Iterable[Slot]) -> "ScheduleSnapshot":
        """Partition a flat slot list by kind and anchor"""
        snapshot = cls()
        for slot in slots:
            if slot.kind == SlotKind.EVENT:
                snapshot.exceptions.append(slot)
            elif slot.kind == SlotKind.PERSONAL:
                snapshot.personal_times.append(slot)
            elif isinstance(slot.anchor, WeekdayAnchor):
                snapshot.recurring_slots.append(slot)
            else:
                snapshot.date_overrides.append(slot)
        return snapshot

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recurringSlots": [s.to_dict() for s in self.recurring_slots],
            "dateOverrides": [s.to_dict() for s in self.date_overrides],
            "exceptions": [s.to_dict() for s in self.exceptions],
            "personalTimes": [s.to_dict() for s in self.personal_times],
        }

    def all_slots(self) -> List[Slot]:
        return self.recurring_slots + self.date_overrides + self.exceptions + self.personal_times

    def availability_slots(self) -> List[Slot]:
        return self.recurring_slots + self.date_overrides

    def with_availability(self, slots: Iterable[Slot]) -> "ScheduleSnapshot":
        """Copy with the availability lists replaced by `slots`"""
        fresh = ScheduleSnapshot.from_slots(slots)
        return replace(self, recurring_slots=fresh.recurring_slots, date_overrides=fresh.date_overrides)

    def with_exceptions(self, slots: Iterable[Slot]) -> "ScheduleSnapshot":
        return replace(self, exceptions=list(slots))

    def with_personal_times(self, slots: Iterable[Slot]) -> "ScheduleSnapshot":
        return replace(self, personal_times=list(slots))

    def is_holiday(self, day: date) -> bool:
        return is_date_blocked(self.date_overrides, day)

    def availability_on(self, day: date) -> List[Slot]:
        """
        Availability that applies to a concrete date.

        Date overrides replace the weekly pattern for their date; a holiday
        leaves nothing available.
        """
        if self.is_holiday(day):
            return []
        overrides = [s for s in self.date_overrides if s.applies_to(day)]
        if overrides:
            return merge(overrides)
        return merge(s for s in self.recurring_slots if s.applies_to(day))

    def commitments(self, on_date: Optional[date] = None,
                    include_availability: bool = False) -> List[Slot]:
        """
        Slots that block a new event: exceptions, personal times and holiday blocks.

        Holiday ticks are folded into one all-day slot per date. Declared
        availability only blocks when `include_availability` is set.
        """
        holidays = [s for s in self.date_overrides if s.is_holiday]
        blocking = self.exceptions + self.personal_times + merge(holidays)
        if include_availability:
            blocking += [s for s in self.availability_slots() if not s.is_holiday]
        if on_date is not None:
            blocking = [s for s in blocking if s.applies_to(on_date)]
        return blocking

    def summary(self) -> Dict[str, int]:
        return {
            "recurringSlots": len(self.recurring_slots),
            "dateOverrides": len(self.date_overrides),
            "exceptions": len(self.exceptions),
            "personalTimes": len(self.personal_times),
        }
