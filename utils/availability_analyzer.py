"""
Availability Analyzer - multi-day report over a schedule snapshot.
Shows commitments, declared availability and the free working-hours ranges
left on each date.
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Tuple

from config.settings import Config
from src.availability.models import PRIORITY_DISPLAY, Slot
from src.availability.slot_model import uncovered_ranges
from src.availability.snapshot import ScheduleSnapshot
from src.availability.time_utils import format_date, format_time_of_day

logger = logging.getLogger(__name__)


def _ranges_to_dicts(ranges: List[Tuple[int, int]]) -> List[Dict[str, Any]]:
    return [
        {"startTime": format_time_of_day(start), "endTime": format_time_of_day(end), "minutes": end - start}
        for start, end in ranges
    ]


class AvailabilityAnalyzer:
    """Analyze a snapshot for the next N days"""

    def __init__(self, snapshot: ScheduleSnapshot, include_availability: bool = False):
        self.config = Config()
        self.snapshot = snapshot
        self.include_availability = include_availability

    def analyze_day(self, day: date) -> Dict[str, Any]:
        commitments = sorted(
            self.snapshot.commitments(on_date=day, include_availability=self.include_availability),
            key=lambda s: (s.start, s.end),
        )
        busy = [(s.start, s.end) for s in commitments]
        working = uncovered_ranges(self.config.WORKING_HOURS_START * 60, self.config.WORKING_HOURS_END * 60, busy)

        available: List[Dict[str, Any]] = []
        for slot in self.snapshot.availability_on(day):
            free = uncovered_ranges(slot.start, slot.end, busy)
            if free:
                available.append({
                    "priority": int(slot.priority),
                    "label": PRIORITY_DISPLAY[slot.priority]["label"],
                    "free": _ranges_to_dicts(free),
                })

        return {
            "date": format_date(day),
            "dayOfWeek": day.strftime("%A"),
            "isHoliday": self.snapshot.is_holiday(day),
            "commitments": [self._describe(s) for s in commitments],
            "freeWorkingHours": _ranges_to_dicts(working),
            "freeWorkingMinutes": sum(end - start for start, end in working),
            "availableWindows": available,
        }

    @staticmethod
    def _describe(slot: Slot) -> Dict[str, Any]:
        return {
            "title": slot.title or slot.kind.value,
            "kind": slot.kind.value,
            "startTime": slot.start_text,
            "endTime": slot.end_text,
        }

    def analyze(self, start_date: date, days: int = 7) -> Dict[str, Any]:
        """Report for `days` consecutive dates starting at `start_date`"""
        report = [self.analyze_day(start_date + timedelta(days=i)) for i in range(days)]
        logger.info(f"📊 Analyzed {days} day(s) from {format_date(start_date)}")
        return {
            "analysis_period": {
                "start": format_date(start_date),
                "end": format_date(start_date + timedelta(days=max(days - 1, 0))),
                "days": days,
            },
            "holidays": [d["date"] for d in report if d["isHoliday"]],
            "total_free_working_minutes": sum(d["freeWorkingMinutes"] for d in report),
            "days": report,
        }

    @staticmethod
    def display(analysis: Dict[str, Any]):
        """Print the report in a readable format"""
        period = analysis["analysis_period"]
        print(f"\n📊 AVAILABILITY SUMMARY")
        print(f"   📅 Period: {period['start']} to {period['end']} ({period['days']} days)")
        print(f"   🏖️  Holidays: {', '.join(analysis['holidays']) or 'None'}")
        print(f"   ✅ Free working minutes: {analysis['total_free_working_minutes']}")

        print(f"\n📅 DAILY BREAKDOWN:")
        for day in analysis["days"]:
            marker = " (holiday)" if day["isHoliday"] else ""
            print(f"   {day['date']} ({day['dayOfWeek']}){marker}: "
                  f"{len(day['commitments'])} commitments, {day['freeWorkingMinutes']} free minutes")
            for item in day["commitments"]:
                print(f"      🕒 {item['startTime']} → {item['endTime']} {item['title']}")
            for free in day["freeWorkingHours"]:
                print(f"      ✅ free {free['startTime']} → {free['endTime']}")
