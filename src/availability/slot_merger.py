"""
Slot merge/split engine.

Slots are created one tick (10 minutes) at a time; for storage and display
adjacent ticks that share anchor, kind, title and priority are folded into one
range. Mutating part of a folded range re-expands it to ticks, changes the
ticks and folds again.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from config.settings import Config
from src.availability.errors import InvalidRangeError
from src.availability.models import Anchor, Priority, Slot, SlotKind, sort_slots
from src.availability.slot_model import cycle_priority, tick_slot
from src.availability.time_utils import format_time_of_day, overlaps

logger = logging.getLogger(__name__)


def _display_order(slot: Slot) -> Tuple:
    return (slot.anchor.sort_key, slot.start, slot.end, slot.merge_key)


def merge(slots: Iterable[Slot]) -> List[Slot]:
    """Fold strictly adjacent slots with the same merge key; output ordered by anchor then start"""
    merged: List[Slot] = []
    group: Optional[Slot] = None

    for slot in sort_slots(slots):
        if group is not None and group.merge_key == slot.merge_key and group.end == slot.start:
            group = group.with_range(group.start, slot.end)
            continue
        if group is not None:
            merged.append(group)
        group = slot

    if group is not None:
        merged.append(group)

    return sorted(merged, key=_display_order)


def split(slot: Slot, at: int) -> List[Slot]:
    """Cut a slot into [start, at) and [at, end)"""
    if not slot.start < at < slot.end:
        raise InvalidRangeError(slot.start_text, slot.end_text,
                                f"split point {format_time_of_day(at)} must fall strictly inside")
    return [slot.with_range(slot.start, at), slot.with_range(at, slot.end)]


def expand_to_ticks(slot: Slot) -> List[Slot]:
    """Re-expand a merged slot into tick-sized pieces"""
    step = Config.TICK_MINUTES
    return [slot.with_range(start, min(start + step, slot.end))
            for start in range(slot.start, slot.end, step)]


def slot_at(slots: Iterable[Slot], anchor: Anchor, minute: int,
            kind: SlotKind = SlotKind.AVAILABILITY) -> Optional[Slot]:
    """The stored slot of `kind` on `anchor` covering the given minute, if any"""
    for slot in slots:
        if slot.anchor == anchor and slot.kind == kind and slot.start <= minute < slot.end:
            return slot
    return None


def _partition(slots: Iterable[Slot], anchor: Anchor, kind: SlotKind) -> Tuple[List[Slot], List[Slot]]:
    inside, outside = [], []
    for slot in slots:
        (inside if slot.anchor == anchor and slot.kind == kind else outside).append(slot)
    return inside, outside


def set_range_priority(slots: Iterable[Slot], anchor: Anchor, start: int, end: int,
                       priority: Priority, kind: SlotKind = SlotKind.AVAILABILITY,
                       fill: bool = False) -> List[Slot]:
    """
    Set the priority of every tick in [start, end) on one anchor.

    REMOVED deletes those ticks. With `fill`, empty ticks in the range are
    created at `priority` too. Only slots of the same anchor and kind are
    re-merged; everything else is returned untouched.
    """
    if end <= start:
        raise InvalidRangeError(format_time_of_day(start), format_time_of_day(end))

    inside, outside = _partition(slots, anchor, kind)
    ticks: List[Slot] = []
    for slot in inside:
        if overlaps(slot.start, slot.end, start, end):
            ticks.extend(expand_to_ticks(slot))
        else:
            ticks.append(slot)

    updated: List[Slot] = []
    for tick in ticks:
        if start <= tick.start < end:
            if priority != Priority.REMOVED:
                updated.append(Slot(anchor=tick.anchor, start=tick.start, end=tick.end, priority=priority,
                                    kind=tick.kind, title=tick.title, location=tick.location,
                                    slot_id=tick.slot_id))
        else:
            updated.append(tick)

    if fill and priority != Priority.REMOVED:
        taken = {tick.start for tick in updated}
        for minute in range(start, end, Config.TICK_MINUTES):
            if minute not in taken:
                updated.append(tick_slot(anchor, minute, priority=priority, kind=kind))

    logger.debug(f"Range {format_time_of_day(start)}-{format_time_of_day(end)} on {anchor} "
                 f"set to {priority.name}")
    return outside + merge(updated)


def cycle_at(slots: Iterable[Slot], anchor: Anchor, minute: int,
             kind: SlotKind = SlotKind.AVAILABILITY) -> List[Slot]:
    """
    Apply one click on the tick starting at `minute`.

    An empty tick becomes a Preferred tick; an occupied tick moves one step
    along the priority cycle and is deleted after Flexible. A tick only partly
    covered by a stored slot counts as occupied, and only the covered part
    changes.
    """
    slots = list(slots)
    tick_start = minute - (minute % Config.TICK_MINUTES)
    tick_end = tick_start + Config.TICK_MINUTES
    inside, outside = _partition(slots, anchor, kind)
    occupied = sorted((s for s in inside if overlaps(s.start, s.end, tick_start, tick_end)),
                      key=lambda s: s.start)

    if not occupied:
        logger.debug(f"Tick {format_time_of_day(tick_start)} on {anchor} created as PREFERRED")
        return outside + merge(inside + [tick_slot(anchor, tick_start, kind=kind)])

    existing = slot_at(occupied, anchor, minute, kind) or occupied[0]
    next_priority = cycle_priority(existing.priority)
    tick_end = min(tick_end, existing.end)
    tick_start = max(tick_start, existing.start)
    logger.debug(f"Tick {format_time_of_day(tick_start)} on {anchor}: "
                 f"{existing.priority.name} -> {next_priority.name}")
    return set_range_priority(slots, anchor, tick_start, tick_end, next_priority, kind=kind)
