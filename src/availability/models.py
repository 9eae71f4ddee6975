"""
Core data model: priorities, anchors, slots and the ephemeral search types
"""
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum, IntEnum
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from src.availability.errors import FormatError, InvalidRangeError
from src.availability.time_utils import (
    DAY_MINUTES,
    at_minutes,
    format_date,
    format_datetime,
    format_time_of_day,
    minutes_since_midnight,
    overlaps,
    parse_date,
    parse_datetime,
    parse_end_time,
    parse_time_of_day,
)


class Priority(IntEnum):
    REMOVED = 0
    FLEXIBLE = 1
    NORMAL = 2
    PREFERRED = 3


# Click cycling: Preferred -> Normal -> Flexible -> deleted, anything else restarts at Preferred
PRIORITY_TRANSITIONS: Dict[Priority, Priority] = {
    Priority.PREFERRED: Priority.NORMAL,
    Priority.NORMAL: Priority.FLEXIBLE,
    Priority.FLEXIBLE: Priority.REMOVED,
    Priority.REMOVED: Priority.PREFERRED,
}

PRIORITY_DISPLAY: Dict[Priority, Dict[str, str]] = {
    Priority.PREFERRED: {"label": "Preferred", "color": "bg-blue-600"},
    Priority.NORMAL: {"label": "Normal", "color": "bg-blue-400"},
    Priority.FLEXIBLE: {"label": "Flexible", "color": "bg-blue-200"},
    Priority.REMOVED: {"label": "Day off", "color": "bg-gray-400"},
}


def parse_priority(value: Any) -> Priority:
    """Coerce 0..3 (int or numeric string) into a Priority"""
    if isinstance(value, Priority):
        return value
    try:
        return Priority(int(value))
    except (TypeError, ValueError):
        raise FormatError(value, "priority 0 (removed), 1 (flexible), 2 (normal) or 3 (preferred)")


class SlotKind(str, Enum):
    AVAILABILITY = "availability"
    PERSONAL = "personal"
    EVENT = "event"
    HOLIDAY = "holiday"


def parse_kind(value: Any) -> SlotKind:
    if isinstance(value, SlotKind):
        return value
    try:
        return SlotKind(value)
    except ValueError:
        raise FormatError(value, "kind availability, personal, event or holiday")


_KIND_ORDER = {
    SlotKind.AVAILABILITY: 0,
    SlotKind.PERSONAL: 1,
    SlotKind.EVENT: 2,
    SlotKind.HOLIDAY: 3,
}

DEFAULT_PRIORITY: Dict[SlotKind, Priority] = {
    SlotKind.AVAILABILITY: Priority.NORMAL,
    SlotKind.PERSONAL: Priority.NORMAL,
    SlotKind.EVENT: Priority.PREFERRED,
    SlotKind.HOLIDAY: Priority.REMOVED,
}

WEEKDAY_NAMES = {
    "MON": 0, "TUE": 1, "WED": 2, "THU": 3, "FRI": 4, "SAT": 5, "SUN": 6,
    "MONDAY": 0, "TUESDAY": 1, "WEDNESDAY": 2, "THURSDAY": 3,
    "FRIDAY": 4, "SATURDAY": 5, "SUNDAY": 6,
}


def parse_weekday_base(value: Any) -> int:
    """Numbering of incoming weekday fields: 0 when Monday is 0, 1 when Monday is 1"""
    if value is None:
        return 0
    try:
        base = int(value)
    except (TypeError, ValueError):
        raise FormatError(value, "weekdayBase 0 or 1")
    if base not in (0, 1):
        raise FormatError(value, "weekdayBase 0 or 1")
    return base


def parse_weekday(value: Any, base: int = 0) -> int:
    """Weekday number (0 = Monday) from an int in base 0 or 1, or an English day name"""
    if isinstance(value, str) and value.strip().upper() in WEEKDAY_NAMES:
        return WEEKDAY_NAMES[value.strip().upper()]
    try:
        number = int(value) - base
    except (TypeError, ValueError):
        raise FormatError(value, "weekday number or name (MON..SUN)")
    if not 0 <= number <= 6:
        raise FormatError(value, f"weekday in {base}..{base + 6}")
    return number


def parse_weekdays(values: Any, base: int = 0) -> Tuple[int, ...]:
    if values is None:
        return ()
    if isinstance(values, (str, int)):
        values = [values]
    return tuple(sorted({parse_weekday(v, base) for v in values}))


@dataclass(frozen=True)
class WeekdayAnchor:
    """Recurring anchor: every week on the given weekday"""
    weekday: int

    def __post_init__(self):
        if not isinstance(self.weekday, int) or not 0 <= self.weekday <= 6:
            raise FormatError(self.weekday, "weekday 0 (Monday) .. 6 (Sunday)")

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (0, self.weekday)

    def applies_to(self, day: date) -> bool:
        return day.weekday() == self.weekday

    def to_dict(self) -> Dict[str, Any]:
        return {"dayOfWeek": self.weekday}


@dataclass(frozen=True)
class DateAnchor:
    """Override anchor: one specific calendar date"""
    day: date

    @property
    def sort_key(self) -> Tuple[int, int]:
        return (1, self.day.toordinal())

    def applies_to(self, day: date) -> bool:
        return self.day == day

    def to_dict(self) -> Dict[str, Any]:
        return {"specificDate": format_date(self.day)}


Anchor = Union[WeekdayAnchor, DateAnchor]


def anchor_from_dict(data: Dict[str, Any], base: int = 0) -> Anchor:
    if data.get("specificDate"):
        return DateAnchor(parse_date(data["specificDate"]))
    if data.get("dayOfWeek") is not None:
        return WeekdayAnchor(parse_weekday(data["dayOfWeek"], base))
    raise FormatError(data, "an anchor: 'specificDate' (YYYY-MM-DD) or 'dayOfWeek'")


@dataclass(frozen=True)
class Slot:
    """
    One availability/commitment unit anchored to a weekday or a date.

    Events, personal times and holiday blocks are all slots distinguished by
    `kind`, so every consumer reads them through the same fields.
    """
    anchor: Anchor
    start: int
    end: int
    priority: Priority = Priority.NORMAL
    kind: SlotKind = SlotKind.AVAILABILITY
    title: str = ""
    location: Optional[str] = None
    slot_id: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if not (0 <= self.start < DAY_MINUTES and self.start < self.end <= DAY_MINUTES):
            raise InvalidRangeError(self.start, self.end)
        object.__setattr__(self, "priority", parse_priority(self.priority))
        object.__setattr__(self, "kind", parse_kind(self.kind))
        if self.kind in (SlotKind.HOLIDAY, SlotKind.EVENT) and not isinstance(self.anchor, DateAnchor):
            raise FormatError(self.anchor, f"a specificDate anchor for {self.kind.value} slots")
        if self.priority == Priority.REMOVED and self.kind != SlotKind.HOLIDAY:
            raise FormatError(self.priority, "a stored priority of 1..3 (removed slots are deleted)")

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def start_text(self) -> str:
        return format_time_of_day(self.start)

    @property
    def end_text(self) -> str:
        return format_time_of_day(self.end)

    @property
    def is_holiday(self) -> bool:
        return self.kind == SlotKind.HOLIDAY

    @property
    def merge_key(self) -> Tuple[Any, ...]:
        # Slots fold together only when every field but the clock range matches.
        return (self.anchor.sort_key, _KIND_ORDER[self.kind], self.title,
                self.location or "", int(self.priority))

    def applies_to(self, day: date) -> bool:
        return self.anchor.applies_to(day)

    def overlaps(self, other: "Slot") -> bool:
        return self.anchor == other.anchor and overlaps(self.start, self.end, other.start, other.end)

    def with_range(self, start: int, end: int) -> "Slot":
        return replace(self, start=start, end=end)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.slot_id is not None:
            data["id"] = self.slot_id
        if self.title:
            data["title"] = self.title
        data.update(self.anchor.to_dict())
        data.update({
            "startTime": self.start_text,
            "endTime": self.end_text,
            "priority": int(self.priority),
            "kind": self.kind.value,
        })
        if self.location:
            data["location"] = self.location
        if self.is_holiday:
            data["isHoliday"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], default_kind: SlotKind = SlotKind.AVAILABILITY,
                  base: int = 0) -> "Slot":
        """Build a slot from boundary JSON; startTime/endTime may be HH:MM or ISO instants"""
        if data.get("kind"):
            kind = parse_kind(data["kind"])
        elif data.get("isHoliday"):
            kind = SlotKind.HOLIDAY
        else:
            kind = default_kind

        start_raw = data.get("startTime")
        end_raw = data.get("endTime")
        if isinstance(start_raw, str) and "T" in start_raw:
            start_dt = parse_datetime(start_raw)
            end_dt = parse_datetime(end_raw)
            anchor: Anchor = DateAnchor(parse_date(data["specificDate"])) if data.get("specificDate") \
                else DateAnchor(start_dt.date())
            start = minutes_since_midnight(start_dt)
            end = start + int((end_dt - start_dt).total_seconds() // 60)
        else:
            anchor = anchor_from_dict(data, base)
            start = parse_time_of_day(start_raw)
            end = parse_end_time(end_raw)

        priority = data.get("priority")
        return cls(
            anchor=anchor,
            start=start,
            end=end,
            priority=DEFAULT_PRIORITY[kind] if priority is None else parse_priority(priority),
            kind=kind,
            title=data.get("title") or "",
            location=data.get("location"),
            slot_id=None if data.get("id") is None else str(data.get("id")),
        )


# One tagged type for every stored time-bound entity
Commitment = Slot


@dataclass(frozen=True)
class Candidate:
    """A proposed interval coming from the intent layer; never stored as is"""
    start: datetime
    end: datetime
    title: str = ""

    def __post_init__(self):
        if self.end <= self.start:
            raise InvalidRangeError(self.start, self.end, "candidate must have a positive duration")

    @property
    def day(self) -> date:
        return self.start.date()

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def start_minutes(self) -> int:
        return minutes_since_midnight(self.start)

    @property
    def end_minutes(self) -> int:
        # Relative to the start date's midnight; may exceed 1440 for late events
        return self.start_minutes + int(self.duration.total_seconds() // 60)

    def shifted(self, delta: timedelta) -> "Candidate":
        return replace(self, start=self.start + delta, end=self.end + delta)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "startDateTime": format_datetime(self.start),
            "endDateTime": format_datetime(self.end),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Candidate":
        start = data.get("startDateTime") or data.get("startTime")
        end = data.get("endDateTime") or data.get("endTime")
        return cls(parse_datetime(start), parse_datetime(end), data.get("title") or "")

    @classmethod
    def from_slot(cls, slot: Slot, on_date: Optional[date] = None, tz: Optional[tzinfo] = None) -> "Candidate":
        """Project a stored slot onto a concrete date"""
        if isinstance(slot.anchor, DateAnchor):
            day = slot.anchor.day
        elif on_date is not None:
            day = on_date
        else:
            raise FormatError(slot.anchor, "a concrete date to project a recurring slot onto")
        return cls(at_minutes(day, slot.start, tz), at_minutes(day, slot.end, tz), slot.title)


def _parse_offset(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise FormatError(value, "offsetMinutes as a whole number of minutes")


@dataclass(frozen=True)
class Recommendation:
    """A conflict-free alternative offered to the user"""
    start: datetime
    end: datetime
    label: str
    offset_minutes: int = 0

    def to_candidate(self, title: str = "") -> Candidate:
        return Candidate(self.start, self.end, title)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startTime": format_datetime(self.start),
            "endTime": format_datetime(self.end),
            "display": self.label,
            "offsetMinutes": self.offset_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recommendation":
        return cls(
            start=parse_datetime(data.get("startTime")),
            end=parse_datetime(data.get("endTime")),
            label=data.get("display", ""),
            offset_minutes=_parse_offset(data.get("offsetMinutes", 0)),
        )


@dataclass(frozen=True)
class ScheduleItem:
    """One row of an extracted timetable: a time range on a set of weekdays"""
    title: str
    start: int
    end: int
    weekdays: Tuple[int, ...]
    location: Optional[str] = None

    def __post_init__(self):
        if not (0 <= self.start < self.end <= DAY_MINUTES):
            raise InvalidRangeError(self.start, self.end)
        object.__setattr__(self, "weekdays", tuple(sorted(set(self.weekdays))))

    @property
    def signature(self) -> str:
        return f"{self.title}|{format_time_of_day(self.start)}|{','.join(str(d) for d in self.weekdays)}"

    def conflicts_with(self, other: "ScheduleItem") -> bool:
        if not set(self.weekdays) & set(other.weekdays):
            return False
        return overlaps(self.start, self.end, other.start, other.end)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "title": self.title,
            "startTime": format_time_of_day(self.start),
            "endTime": format_time_of_day(self.end),
            "days": list(self.weekdays),
        }
        if self.location:
            data["location"] = self.location
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: int = 0) -> "ScheduleItem":
        days = data.get("days", data.get("weekdays"))
        return cls(
            title=data.get("title") or "",
            start=parse_time_of_day(data.get("startTime")),
            end=parse_end_time(data.get("endTime")),
            weekdays=parse_weekdays(days, base),
            location=data.get("location"),
        )


def sort_slots(slots: Iterable[Slot]) -> List[Slot]:
    return sorted(slots, key=lambda s: (s.merge_key, s.start, s.end))
