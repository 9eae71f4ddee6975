"""
Slot model operations: priority cycling, overnight splitting, holiday blocks
and storage-level insert/delete rules
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from config.settings import Config
from src.availability.errors import InvalidRangeError
from src.availability.models import (
    DEFAULT_PRIORITY,
    PRIORITY_TRANSITIONS,
    Anchor,
    Candidate,
    DateAnchor,
    Priority,
    Slot,
    SlotKind,
    WeekdayAnchor,
    parse_priority,
    parse_weekdays,
)
from src.availability.time_utils import (
    DAY_MINUTES,
    format_date,
    parse_date,
    format_time_of_day,
    next_tick,
    parse_end_time,
    parse_time_of_day,
)

logger = logging.getLogger(__name__)

HOLIDAY_TITLE = "Holiday"


def cycle_priority(current: Priority) -> Priority:
    """Next priority for a clicked slot; REMOVED means delete the slot"""
    return PRIORITY_TRANSITIONS[parse_priority(current)]


def tick_slot(anchor: Anchor, start: int, priority: Priority = Priority.PREFERRED,
              kind: SlotKind = SlotKind.AVAILABILITY, title: str = "") -> Slot:
    """A single tick-sized slot starting at `start`"""
    return Slot(anchor=anchor, start=start, end=next_tick(start), priority=priority, kind=kind, title=title)


def overnight_split(anchor: Anchor, start: int, end: int, *, priority: Priority = Priority.NORMAL,
                    kind: SlotKind = SlotKind.PERSONAL, title: str = "",
                    location: Optional[str] = None, slot_id: Optional[str] = None) -> List[Slot]:
    """
    Store a range that may wrap past midnight without ever wrapping.

    22:00-08:00 becomes [22:00, 23:50] and [00:00, 08:00] on the same anchor.
    Non-wrapping ranges come back as a single slot.
    """
    fields = dict(priority=priority, kind=kind, title=title, location=location, slot_id=slot_id)
    if end > start:
        return [Slot(anchor=anchor, start=start, end=end, **fields)]

    evening_end = parse_time_of_day(Config.OVERNIGHT_SPLIT_END)
    pieces = []
    if start < evening_end:
        pieces.append(Slot(anchor=anchor, start=start, end=evening_end, **fields))
    if end > 0:
        pieces.append(Slot(anchor=anchor, start=0, end=end, **fields))
    if not pieces:
        raise InvalidRangeError(format_time_of_day(start), format_time_of_day(end),
                                "empty after overnight split")

    logger.debug(f"🌙 Overnight range {format_time_of_day(start)}-{format_time_of_day(end)} "
                 f"split into {len(pieces)} piece(s) for {anchor}")
    return pieces


def holiday_ticks(day: date) -> List[Slot]:
    """Tick-sized holiday slots covering 00:00-24:00"""
    anchor = DateAnchor(day)
    return [
        tick_slot(anchor, minute, priority=Priority.REMOVED, kind=SlotKind.HOLIDAY, title=HOLIDAY_TITLE)
        for minute in range(0, DAY_MINUTES, Config.TICK_MINUTES)
    ]


def is_date_blocked(slots: Iterable[Slot], day: date) -> bool:
    anchor = DateAnchor(day)
    return any(s.is_holiday and s.anchor == anchor for s in slots)


def apply_holiday_block(slots: Iterable[Slot], day: date) -> List[Slot]:
    """
    Toggle the holiday block for a date.

    A blocked date loses every slot anchored to it; an unblocked date loses
    every slot anchored to it and gains a full day of holiday ticks. The date
    always ends up fully blocked or fully unblocked.
    """
    slots = list(slots)
    anchor = DateAnchor(day)
    remaining = [s for s in slots if s.anchor != anchor]
    cleared = len(slots) - len(remaining)

    if is_date_blocked(slots, day):
        logger.info(f"📅 Holiday block lifted for {format_date(day)} ({cleared} slots removed)")
        return remaining

    logger.info(f"🏖️  Holiday block set for {format_date(day)} ({cleared} existing slots replaced)")
    return remaining + holiday_ticks(day)


def uncovered_ranges(start: int, end: int, occupied: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Parts of [start, end) not covered by any occupied range"""
    pieces = []
    cursor = start
    for busy_start, busy_end in sorted(occupied):
        if busy_end <= cursor or busy_start >= end:
            continue
        if busy_start > cursor:
            pieces.append((cursor, busy_start))
        cursor = max(cursor, busy_end)
        if cursor >= end:
            break
    if cursor < end:
        pieces.append((cursor, end))
    return pieces


def insert_slot(slots: Iterable[Slot], new_slot: Slot) -> List[Slot]:
    """
    Insert a slot while keeping same-kind slots on one anchor disjoint.

    Only the part of `new_slot` not already covered by an existing slot of the
    same kind and anchor is stored.
    """
    slots = list(slots)
    occupied = [(s.start, s.end) for s in slots
                if s.anchor == new_slot.anchor and s.kind == new_slot.kind]
    pieces = uncovered_ranges(new_slot.start, new_slot.end, occupied)

    if not pieces:
        logger.info(f"Slot {new_slot.start_text}-{new_slot.end_text} already covered, nothing inserted")
        return slots
    if len(pieces) > 1 or pieces[0] != (new_slot.start, new_slot.end):
        logger.debug(f"Slot {new_slot.start_text}-{new_slot.end_text} trimmed to {len(pieces)} uncovered piece(s)")

    return slots + [new_slot.with_range(piece_start, piece_end) for piece_start, piece_end in pieces]


def same_commitment(a: Slot, b: Slot) -> bool:
    """Identity check: ids when both sides carry one, value equality otherwise"""
    if a.slot_id is not None and b.slot_id is not None:
        return a.slot_id == b.slot_id
    return a == b


def remove_slot(slots: Iterable[Slot], target: Slot) -> List[Slot]:
    return [s for s in slots if not same_commitment(s, target)]


def find_slot(slots: Iterable[Slot], slot_id: str) -> List[Slot]:
    """Every stored piece carrying the given id (overnight splits share one id)"""
    return [s for s in slots if s.slot_id == slot_id]


def delete_date_range(slots: Iterable[Slot], start_date: date, end_date: date) -> List[Slot]:
    """Drop every date-anchored slot in [start_date, end_date]; recurring slots stay"""
    if end_date < start_date:
        raise InvalidRangeError(format_date(start_date), format_date(end_date))

    slots = list(slots)
    kept = [s for s in slots
            if not (isinstance(s.anchor, DateAnchor) and start_date <= s.anchor.day <= end_date)]
    logger.info(f"🗑️  Deleted {len(slots) - len(kept)} slots between "
                f"{format_date(start_date)} and {format_date(end_date)}")
    return kept


def expand_recurring_record(record: Dict[str, Any], kind: SlotKind = SlotKind.PERSONAL,
                            base: int = 0) -> List[Slot]:
    """
    Turn an intent record {title, startTime, endTime, weekdays} into stored slots.

    One slot per weekday (two when the range runs past midnight). Records with a
    specificDate and no weekdays are anchored to that date.
    """
    start = parse_time_of_day(record.get("startTime"))
    end = parse_end_time(record.get("endTime"))
    weekdays = parse_weekdays(record.get("weekdays", record.get("days")), base)
    priority = record.get("priority")
    fields = dict(
        priority=DEFAULT_PRIORITY[kind] if priority is None else parse_priority(priority),
        kind=kind,
        title=record.get("title") or "",
        location=record.get("location"),
        slot_id=None if record.get("id") is None else str(record["id"]),
    )

    anchors: Sequence[Anchor]
    if weekdays:
        anchors = [WeekdayAnchor(d) for d in weekdays]
    elif record.get("specificDate"):
        anchors = [DateAnchor(parse_date(record["specificDate"]))]
    else:
        anchors = []
    if not anchors:
        raise InvalidRangeError(record.get("startTime"), record.get("endTime"),
                                "record needs weekdays or a specificDate")

    slots: List[Slot] = []
    for anchor in anchors:
        slots.extend(overnight_split(anchor, start, end, **fields))
    return slots


def events_from_candidate(candidate: Candidate, priority: Priority = Priority.PREFERRED,
                          location: Optional[str] = None, slot_id: Optional[str] = None) -> List[Slot]:
    """Date-anchored EVENT slots for an accepted candidate, split at midnight if needed"""
    fields = dict(priority=priority, kind=SlotKind.EVENT, title=candidate.title,
                  location=location, slot_id=slot_id)
    day = candidate.day
    start = candidate.start_minutes
    end = candidate.end_minutes
    if end <= DAY_MINUTES:
        return [Slot(anchor=DateAnchor(day), start=start, end=end, **fields)]
    if end - DAY_MINUTES > DAY_MINUTES:
        raise InvalidRangeError(candidate.start, candidate.end, "events may span at most one midnight")
    return [
        Slot(anchor=DateAnchor(day), start=start, end=DAY_MINUTES, **fields),
        Slot(anchor=DateAnchor(day + timedelta(days=1)), start=0, end=end - DAY_MINUTES, **fields),
    ]
