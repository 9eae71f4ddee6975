from datetime import timedelta

from src.availability.models import DateAnchor, Priority, Slot, SlotKind, WeekdayAnchor
from src.scheduler.conflict_detector import detect_conflict


def test_overlapping_commitment_is_reported(make_candidate, review_event):
    result = detect_conflict(make_candidate("14:00", "15:00", "Sync"), [review_event])
    assert result.has_conflict
    assert result.conflicts == [review_event]
    assert not result.is_duplicate


def test_touching_commitment_is_not_a_conflict(make_candidate, review_event):
    assert not detect_conflict(make_candidate("15:30", "16:30"), [review_event]).has_conflict
    assert not detect_conflict(make_candidate("13:30", "14:30"), [review_event]).has_conflict


def test_exact_duplicate_short_circuits(make_candidate, review_event, monday):
    other = Slot(DateAnchor(monday), 840, 900, kind=SlotKind.EVENT, title="Earlier")
    result = detect_conflict(make_candidate("14:30", "15:30", "Design review"), [other, review_event])
    assert result.is_duplicate
    assert result.duplicate == review_event
    assert result.conflicts == [review_event]


def test_same_time_different_title_is_a_plain_conflict(make_candidate, review_event):
    result = detect_conflict(make_candidate("14:30", "15:30", "Other"), [review_event])
    assert result.has_conflict and not result.is_duplicate


def test_weekday_commitments_are_projected_onto_the_date(make_candidate, monday):
    lunch = Slot(WeekdayAnchor(0), 720, 780, Priority.NORMAL, SlotKind.PERSONAL, "Lunch")
    assert detect_conflict(make_candidate("12:30", "13:30"), [lunch]).has_conflict
    tuesday = monday + timedelta(days=1)
    assert not detect_conflict(make_candidate("12:30", "13:30", day=tuesday), [lunch]).has_conflict


def test_conflicts_are_ordered_by_start_then_end(make_candidate, monday):
    anchor = DateAnchor(monday)
    late = Slot(anchor, 660, 720, kind=SlotKind.EVENT, title="late")
    early_long = Slot(anchor, 600, 700, kind=SlotKind.EVENT, title="early long")
    early_short = Slot(anchor, 600, 630, kind=SlotKind.EVENT, title="early short")

    result = detect_conflict(make_candidate("09:00", "12:00"), [late, early_long, early_short])

    assert [c.title for c in result.conflicts] == ["early short", "early long", "late"]


def test_excluded_commitment_is_skipped(make_candidate, review_event):
    result = detect_conflict(make_candidate("14:00", "15:00"), [review_event], exclude=review_event)
    assert not result.has_conflict


def test_candidate_past_midnight_sees_next_day(make_candidate):
    early = Slot(WeekdayAnchor(1), 0, 420, kind=SlotKind.PERSONAL, title="Sleep")
    result = detect_conflict(make_candidate("23:00", "01:00"), [early])
    assert result.conflicts == [early]


def test_result_serializes(make_candidate, review_event):
    data = detect_conflict(make_candidate("14:00", "15:00"), [review_event]).to_dict()
    assert data["hasConflict"] is True
    assert data["isDuplicate"] is False
    assert data["conflicts"][0]["id"] == "e1"
