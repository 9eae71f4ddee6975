from datetime import date, timedelta

from src.availability.slot_model import apply_holiday_block
from utils.availability_analyzer import AvailabilityAnalyzer

MONDAY = date(2025, 3, 3)


def test_day_report(busy_snapshot):
    day = AvailabilityAnalyzer(busy_snapshot).analyze_day(MONDAY)

    assert day["dayOfWeek"] == "Monday"
    assert day["isHoliday"] is False
    assert [c["title"] for c in day["commitments"]] == ["Design review"]
    assert day["freeWorkingMinutes"] == 720
    assert [(f["startTime"], f["endTime"]) for f in day["freeWorkingHours"]] == [("09:00", "14:30"),
                                                                                ("15:30", "22:00")]
    assert day["availableWindows"][0]["label"] == "Preferred"


def test_date_override_is_reported_for_its_date(busy_snapshot):
    tuesday = AvailabilityAnalyzer(busy_snapshot).analyze_day(MONDAY + timedelta(days=1))
    windows = tuesday["availableWindows"]
    assert [(w["free"][0]["startTime"], w["free"][0]["endTime"]) for w in windows] == [("10:00", "12:00")]


def test_holiday_has_no_free_time(busy_snapshot):
    blocked = busy_snapshot.with_availability(apply_holiday_block(busy_snapshot.availability_slots(), MONDAY))
    day = AvailabilityAnalyzer(blocked).analyze_day(MONDAY)
    assert day["isHoliday"] is True
    assert day["freeWorkingMinutes"] == 0
    assert day["availableWindows"] == []


def test_week_report(busy_snapshot):
    analysis = AvailabilityAnalyzer(busy_snapshot).analyze(MONDAY, 7)

    assert analysis["analysis_period"] == {"start": "2025-03-03", "end": "2025-03-09", "days": 7}
    assert analysis["holidays"] == []
    assert analysis["total_free_working_minutes"] == 720 + 6 * 780
    assert len(analysis["days"]) == 7


def test_display_prints_a_summary(busy_snapshot, capsys):
    AvailabilityAnalyzer.display(AvailabilityAnalyzer(busy_snapshot).analyze(MONDAY, 2))
    out = capsys.readouterr().out
    assert "AVAILABILITY SUMMARY" in out
    assert "2025-03-03 (Monday)" in out
