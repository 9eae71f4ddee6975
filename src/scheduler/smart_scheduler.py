"""
Smart Scheduler - orchestrator for the availability and conflict-resolution engine.

Every operation takes a ScheduleSnapshot and returns a ScheduleOutcome holding
the new snapshot; nothing is kept between calls.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from config.settings import Config
from src.availability.errors import FormatError, SchedulingError
from src.availability.models import (
    Anchor,
    Candidate,
    DateAnchor,
    Priority,
    Recommendation,
    ScheduleItem,
    Slot,
    SlotKind,
    WeekdayAnchor,
    anchor_from_dict,
    parse_kind,
    parse_priority,
    parse_weekday_base,
    parse_weekdays,
)
from src.availability.slot_merger import cycle_at, merge, set_range_priority
from src.availability.slot_model import (
    apply_holiday_block,
    delete_date_range,
    events_from_candidate,
    expand_recurring_record,
    find_slot,
    insert_slot,
    remove_slot,
)
from src.availability.snapshot import ScheduleSnapshot
from src.availability.time_utils import format_date, parse_date, parse_end_time, parse_time_of_day
from src.scheduler.alternative_search import AlternativeTimeSearch, build_recommendation_message, format_label
from src.scheduler.combination_generator import CombinationGenerator
from src.scheduler.conflict_detector import ConflictResult, detect_conflict
from utils.schedule_logger import ScheduleLogger

logger = logging.getLogger(__name__)


@dataclass
class ScheduleOutcome:
    """Result of one orchestrated operation"""
    status: str
    snapshot: ScheduleSnapshot
    message: str = ""
    conflicts: List[Slot] = field(default_factory=list)
    recommendations: List[Recommendation] = field(default_factory=list)
    reschedule_options: List[Recommendation] = field(default_factory=list)
    added: List[Slot] = field(default_factory=list)
    removed: List[Slot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "message": self.message,
            "conflicts": [s.to_dict() for s in self.conflicts],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "rescheduleOptions": [r.to_dict() for r in self.reschedule_options],
            "added": [s.to_dict() for s in self.added],
            "removed": [s.to_dict() for s in self.removed],
            "snapshot": self.snapshot.to_dict(),
        }


def new_event_id() -> str:
    return uuid.uuid4().hex[:12]


class SmartScheduler:
    """
    Main scheduling coordinator: conflict check, alternative search and
    storage updates for one profile's snapshot
    """

    def __init__(self, search: Optional[AlternativeTimeSearch] = None,
                 availability_blocks_events: Optional[bool] = None):
        self.config = Config()
        self.search = search or AlternativeTimeSearch()
        self.availability_blocks_events = (self.config.AVAILABILITY_BLOCKS_EVENTS
                                           if availability_blocks_events is None
                                           else availability_blocks_events)
        self.schedule_logger = ScheduleLogger()

        logger.info("SmartScheduler initialized")

    def _commitments(self, snapshot: ScheduleSnapshot) -> List[Slot]:
        return snapshot.commitments(include_availability=self.availability_blocks_events)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def check_event(self, snapshot: ScheduleSnapshot, candidate: Candidate) -> ConflictResult:
        """Conflict check only; the snapshot is not changed"""
        return detect_conflict(candidate, self._commitments(snapshot))

    def find_alternatives_with_fallback(self, candidate: Candidate, commitments: Sequence[Slot],
                                        days: Optional[int] = None) -> List[Recommendation]:
        """
        Same-day alternatives first; when none exist, the same clock time on
        each of the following days until one is free.
        """
        recommendations = self.search.find_alternatives(candidate, commitments)
        if recommendations:
            return recommendations

        days = self.config.FALLBACK_SEARCH_DAYS if days is None else days
        for offset in range(1, days + 1):
            probe = candidate.shifted(timedelta(days=offset))
            if detect_conflict(probe, commitments).has_conflict:
                continue
            label = f"{format_date(probe.day)} {format_label(probe.start, probe.end)}"
            logger.info(f"📅 Same-day search empty, fallback found {offset} day(s) later")
            return [Recommendation(probe.start, probe.end, label, offset * self.config.DAY_MINUTES)]

        logger.warning(f"❌ No free time for '{candidate.title}' within {days} day(s)")
        return []

    def _schedule(self, snapshot: ScheduleSnapshot, candidate: Candidate,
                  priority: Priority = Priority.PREFERRED, location: Optional[str] = None,
                  event_id: Optional[str] = None) -> ScheduleOutcome:
        commitments = self._commitments(snapshot)
        self.schedule_logger.log_day_analysis(candidate.day, commitments)

        result = detect_conflict(candidate, commitments)
        if result.is_duplicate:
            return ScheduleOutcome(
                status="duplicate",
                snapshot=snapshot,
                message=f"'{candidate.title}' already exists at that time.",
                conflicts=result.conflicts,
            )

        if result.has_conflict:
            recommendations = self.find_alternatives_with_fallback(candidate, commitments)
            self.schedule_logger.log_recommendations(candidate.title, recommendations)
            return ScheduleOutcome(
                status="conflict",
                snapshot=snapshot,
                message=build_recommendation_message(recommendations),
                conflicts=result.conflicts,
                recommendations=recommendations,
            )

        events = events_from_candidate(candidate, priority=priority, location=location,
                                       slot_id=event_id or new_event_id())
        logger.info(f"✅ Scheduled '{candidate.title}' {format_label(candidate.start, candidate.end)} "
                    f"on {format_date(candidate.day)}")
        return ScheduleOutcome(
            status="scheduled",
            snapshot=snapshot.with_exceptions(snapshot.exceptions + events),
            message=f"'{candidate.title}' has been added.",
            added=events,
        )

    def process_event_request(self, snapshot: ScheduleSnapshot, request: Dict[str, Any]) -> ScheduleOutcome:
        """Add a one-off event, or report conflicts with ranked alternatives"""
        candidate = Candidate.from_dict(request)
        priority = request.get("priority")
        return self._schedule(
            snapshot,
            candidate,
            priority=Priority.PREFERRED if priority is None else parse_priority(priority),
            location=request.get("location"),
            event_id=None if request.get("id") is None else str(request["id"]),
        )

    def accept_recommendation(self, snapshot: ScheduleSnapshot, recommendation: Recommendation,
                              title: str, location: Optional[str] = None) -> ScheduleOutcome:
        """Commit a chosen recommendation as an event, re-checked against the current snapshot"""
        return self._schedule(snapshot, recommendation.to_candidate(title), location=location)

    def delete_event(self, snapshot: ScheduleSnapshot, event_id: str) -> ScheduleOutcome:
        removed = find_slot(snapshot.exceptions, event_id)
        if not removed:
            raise SchedulingError(f"No event with id {event_id!r}")
        remaining = remove_slot(snapshot.exceptions, removed[0])
        logger.info(f"🗑️  Deleted event {event_id} ({len(removed)} piece(s))")
        return ScheduleOutcome(status="deleted", snapshot=snapshot.with_exceptions(remaining),
                               message=f"'{removed[0].title}' has been deleted.", removed=removed)

    def reschedule_existing(self, snapshot: ScheduleSnapshot, request: Dict[str, Any],
                            conflicting_id: str) -> ScheduleOutcome:
        """
        Give the requested time to the new event and offer new times for the
        event it displaces.

        When the request still clashes with something other than the displaced
        event, nothing is removed and the conflict outcome is returned.
        """
        displaced = find_slot(snapshot.exceptions, conflicting_id)
        if not displaced:
            raise SchedulingError(f"No event with id {conflicting_id!r}")

        cleared = snapshot.with_exceptions(remove_slot(snapshot.exceptions, displaced[0]))
        outcome = self.process_event_request(cleared, request)
        if outcome.status != "scheduled":
            outcome.snapshot = snapshot
            return outcome

        options = self.search.find_reschedule_options(displaced[0], self._commitments(outcome.snapshot))
        self.schedule_logger.log_recommendations(displaced[0].title, options)
        outcome.status = "rescheduled"
        outcome.removed = displaced
        outcome.reschedule_options = options
        outcome.message = (f"'{displaced[0].title}' was moved out. "
                           + build_recommendation_message(options))
        return outcome

    # ------------------------------------------------------------------
    # Recurring personal time and timetables
    # ------------------------------------------------------------------

    def _insert_personal(self, snapshot: ScheduleSnapshot, slots: Iterable[Slot]) -> ScheduleOutcome:
        personal = list(snapshot.personal_times)
        added: List[Slot] = []
        for slot in slots:
            before = len(personal)
            personal = insert_slot(personal, slot)
            added.extend(personal[before:])
        return ScheduleOutcome(status="updated", snapshot=snapshot.with_personal_times(personal),
                               message=f"{len(added)} personal time slot(s) added.", added=added)

    def apply_recurring_intent(self, snapshot: ScheduleSnapshot, record: Dict[str, Any],
                               weekday_base: int = 0) -> ScheduleOutcome:
        """Store a recurring personal time record, one slot per weekday"""
        record = dict(record)
        if record.get("id") is None:
            record["id"] = new_event_id()
        slots = expand_recurring_record(record, SlotKind.PERSONAL, weekday_base)
        logger.info(f"🔁 Recurring '{record.get('title', '')}' expands to {len(slots)} slot(s)")
        return self._insert_personal(snapshot, slots)

    def add_preferred_time(self, snapshot: ScheduleSnapshot, record: Dict[str, Any],
                           weekday_base: int = 0) -> ScheduleOutcome:
        """Mark a range as available at one priority, on a date or on a set of weekdays"""
        start = parse_time_of_day(record.get("startTime"))
        end = parse_end_time(record.get("endTime"))
        priority = parse_priority(record.get("priority", Priority.PREFERRED))
        weekdays = parse_weekdays(record.get("weekdays", record.get("days")), weekday_base)
        anchors: List[Anchor] = [WeekdayAnchor(d) for d in weekdays] or [anchor_from_dict(record, weekday_base)]

        availability = snapshot.availability_slots()
        for anchor in anchors:
            self._ensure_not_holiday(snapshot, anchor)
            availability = set_range_priority(availability, anchor, start, end, priority, fill=True)
        return ScheduleOutcome(status="updated", snapshot=snapshot.with_availability(availability),
                               message=f"Availability updated on {len(anchors)} day(s).")

    def generate_combinations(self, items: Sequence[ScheduleItem],
                              seed: Optional[int] = None) -> List[List[ScheduleItem]]:
        return CombinationGenerator(seed=seed).generate(items)

    def apply_combination(self, snapshot: ScheduleSnapshot, combination: Sequence[ScheduleItem]) -> ScheduleOutcome:
        """Store a chosen timetable combination as weekly personal time"""
        slots = [
            Slot(anchor=WeekdayAnchor(day), start=item.start, end=item.end, priority=Priority.NORMAL,
                 kind=SlotKind.PERSONAL, title=item.title, location=item.location,
                 slot_id=new_event_id())
            for item in combination
            for day in item.weekdays
        ]
        logger.info(f"🧩 Applying combination of {len(combination)} item(s) as {len(slots)} slot(s)")
        return self._insert_personal(snapshot, slots)

    # ------------------------------------------------------------------
    # Availability grid
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_not_holiday(snapshot: ScheduleSnapshot, anchor: Anchor):
        if isinstance(anchor, DateAnchor) and snapshot.is_holiday(anchor.day):
            raise SchedulingError(f"{format_date(anchor.day)} is a holiday; lift the block first")

    def cycle_slot(self, snapshot: ScheduleSnapshot, anchor: Anchor, minute: int) -> ScheduleOutcome:
        """One click on a grid tick"""
        self._ensure_not_holiday(snapshot, anchor)
        availability = cycle_at(snapshot.availability_slots(), anchor, minute)
        return ScheduleOutcome(status="updated", snapshot=snapshot.with_availability(availability))

    def toggle_holiday(self, snapshot: ScheduleSnapshot, day: date) -> ScheduleOutcome:
        """Block or lift a whole date; either way nothing else stays anchored to it"""
        slots = snapshot.all_slots()
        updated = ScheduleSnapshot.from_slots(apply_holiday_block(slots, day))
        removed = [s for s in slots if s.anchor == DateAnchor(day) and not s.is_holiday]
        blocked = updated.is_holiday(day)
        return ScheduleOutcome(
            status="updated",
            snapshot=updated,
            message=f"{format_date(day)} is {'now a holiday' if blocked else 'no longer a holiday'}.",
            removed=removed,
        )

    def delete_range(self, snapshot: ScheduleSnapshot, start_date: date, end_date: date,
                     kinds: Optional[Iterable[SlotKind]] = None) -> ScheduleOutcome:
        """Delete date-anchored slots between two dates (inclusive), optionally only some kinds"""
        if isinstance(kinds, str):
            kinds = [kinds]
        kinds = set(SlotKind) if kinds is None else {parse_kind(k) for k in kinds}
        targeted = [s for s in snapshot.all_slots() if s.kind in kinds]
        untouched = [s for s in snapshot.all_slots() if s.kind not in kinds]
        kept = delete_date_range(targeted, start_date, end_date)
        removed = [s for s in targeted if s not in kept]
        return ScheduleOutcome(status="deleted", snapshot=ScheduleSnapshot.from_slots(untouched + kept),
                               message=f"{len(removed)} slot(s) deleted.", removed=removed)

    def merged_view(self, snapshot: ScheduleSnapshot) -> ScheduleSnapshot:
        """Display view with adjacent ticks folded"""
        return ScheduleSnapshot(
            recurring_slots=merge(snapshot.recurring_slots),
            date_overrides=merge(snapshot.date_overrides),
            exceptions=merge(snapshot.exceptions),
            personal_times=merge(snapshot.personal_times),
        )

    # ------------------------------------------------------------------
    # Single entry point
    # ------------------------------------------------------------------

    def process_request(self, request_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Dispatch one structured intent {intent, snapshot, ...} and return the
        outcome as boundary JSON. SchedulingError propagates to the caller.
        """
        intent = request_data.get("intent", "add_event")
        snapshot = ScheduleSnapshot.from_dict(request_data.get("snapshot"))
        base = parse_weekday_base(request_data.get("weekdayBase"))
        logger.info(f"Processing intent '{intent}'")

        if intent == "add_event":
            outcome = self.process_event_request(snapshot, request_data)
        elif intent == "accept_recommendation":
            outcome = self.accept_recommendation(
                snapshot, Recommendation.from_dict(request_data.get("recommendation") or {}),
                request_data.get("title") or "", request_data.get("location"))
        elif intent == "reschedule_existing":
            outcome = self.reschedule_existing(snapshot, request_data, str(request_data.get("conflictingEventId")))
        elif intent in ("delete_event", "delete_specific_event"):
            outcome = self.delete_event(snapshot, str(request_data.get("eventId")))
        elif intent in ("add_recurring_event", "add_personal_time"):
            outcome = self.apply_recurring_intent(snapshot, request_data, base)
        elif intent in ("add_preferred_time", "add_recurring_preferred_time"):
            outcome = self.add_preferred_time(snapshot, request_data, base)
        elif intent == "toggle_holiday":
            outcome = self.toggle_holiday(snapshot, parse_date(request_data.get("date")))
        elif intent == "delete_range":
            outcome = self.delete_range(snapshot, parse_date(request_data.get("startDate")),
                                        parse_date(request_data.get("endDate")), request_data.get("kinds"))
        elif intent == "cycle_slot":
            outcome = self.cycle_slot(snapshot, anchor_from_dict(request_data, base),
                                      parse_time_of_day(request_data.get("time")))
        elif intent == "apply_combination":
            items = [ScheduleItem.from_dict(i, base) for i in request_data.get("combination") or []]
            outcome = self.apply_combination(snapshot, items)
        else:
            raise FormatError(intent, "a supported intent")

        return outcome.to_dict()
