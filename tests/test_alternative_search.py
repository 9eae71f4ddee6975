from datetime import timedelta

from src.availability.models import DateAnchor, Slot, SlotKind
from src.scheduler.alternative_search import (
    AlternativeTimeSearch,
    build_recommendation_message,
    probe_order,
)

OFFSETS = [-180, -120, -60, 60, 120, 180]


def _event(monday, start, end, title="busy", slot_id=None):
    return Slot(DateAnchor(monday), start, end, kind=SlotKind.EVENT, title=title, slot_id=slot_id)


def _search(**kwargs):
    params = dict(offsets=OFFSETS, min_hour=9, max_hour=22, max_results=5)
    params.update(kwargs)
    return AlternativeTimeSearch(**params)


def test_probe_order_is_nearest_first_earlier_first():
    assert probe_order(OFFSETS) == [-60, 60, -120, 120, -180, 180]


def test_first_alternative_is_one_hour_earlier(make_candidate, review_event):
    results = _search().find_alternatives(make_candidate("14:00", "15:00", "Sync"), [review_event])

    assert results[0].label == "13:00 - 14:00"
    assert results[0].offset_minutes == -60
    assert [r.offset_minutes for r in results] == [-60, -120, 120, -180, 180]


def test_one_hour_later_when_earlier_is_taken(make_candidate, monday):
    commitments = [_event(monday, 780, 840), _event(monday, 870, 885)]
    results = _search().find_alternatives(make_candidate("14:00", "15:00"), commitments)
    assert results[0].label == "15:00 - 16:00"
    assert results[0].offset_minutes == 60


def test_probes_keep_the_duration(make_candidate, review_event):
    for rec in _search().find_alternatives(make_candidate("14:00", "15:00"), [review_event]):
        assert rec.end - rec.start == timedelta(hours=1)


def test_probe_start_must_be_inside_working_hours(make_candidate, monday):
    busy = [_event(monday, 570, 630)]
    results = _search().find_alternatives(make_candidate("09:30", "10:30"), busy)
    assert all(r.start.hour >= 9 for r in results)
    assert [r.offset_minutes for r in results] == [60, 120, 180]

    late = [_event(monday, 1200, 1260)]
    results = _search().find_alternatives(make_candidate("20:00", "21:00"), late)
    assert all(r.start.hour < 22 for r in results)
    assert 120 not in [r.offset_minutes for r in results]


def test_probe_never_moves_to_another_date(make_candidate, monday):
    busy = [_event(monday, 1380, 1410)]
    search = _search(offsets=[-60, 60], min_hour=0, max_hour=24)
    results = search.find_alternatives(make_candidate("23:00", "23:30"), busy)
    assert [r.offset_minutes for r in results] == [-60]


def test_stops_after_max_results(make_candidate, review_event):
    results = _search(max_results=2).find_alternatives(make_candidate("14:00", "15:00"), [review_event])
    assert len(results) == 2


def test_no_free_probe_gives_an_empty_list(make_candidate, monday):
    whole_day = [_event(monday, 0, 1440)]
    assert _search().find_alternatives(make_candidate("14:00", "15:00"), whole_day) == []


def test_search_is_deterministic(make_candidate, review_event):
    candidate = make_candidate("14:00", "15:00")
    search = _search()
    assert search.find_alternatives(candidate, [review_event]) == search.find_alternatives(candidate, [review_event])


def test_reschedule_ignores_the_displaced_event_itself(monday):
    displaced = _event(monday, 840, 930, "Review", slot_id="e1")
    search = _search(offsets=[60])

    options = search.find_reschedule_options(displaced, [displaced])

    assert [o.label for o in options] == ["15:00 - 16:30"]


def test_reschedule_respects_other_commitments(monday):
    displaced = _event(monday, 870, 930, "Review", slot_id="e1")
    urgent = _event(monday, 840, 900, "Urgent", slot_id="n1")

    options = _search().find_reschedule_options(displaced, [displaced, urgent])

    assert options[0].label == "15:30 - 16:30"


def test_recommendation_message(make_candidate, review_event):
    assert build_recommendation_message([]) == "Sorry, there is no time to recommend on that date."

    results = _search(max_results=2).find_alternatives(make_candidate("14:00", "15:00"), [review_event])
    message = build_recommendation_message(results)

    assert message.splitlines()[0] == "That time is already taken. How about one of these?"
    assert message.endswith("1. 13:00 - 14:00\n2. 12:00 - 13:00")
