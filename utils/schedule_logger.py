"""
Day-level logging of commitments and offered alternatives
"""
import logging
from datetime import date
from typing import Dict, List, Sequence

from config.settings import Config
from src.availability.models import Recommendation, Slot

logger = logging.getLogger(__name__)


class ScheduleLogger:
    """Specialized logger for schedule mutations"""

    @staticmethod
    def split_by_working_hours(commitments: Sequence[Slot],
                               start_hour: int = Config.WORKING_HOURS_START,
                               end_hour: int = Config.WORKING_HOURS_END) -> Dict[str, List[Slot]]:
        working, off_hours = [], []
        for slot in commitments:
            if start_hour * 60 <= slot.start < end_hour * 60:
                working.append(slot)
            else:
                off_hours.append(slot)
        return {"working": working, "off_hours": off_hours}

    @staticmethod
    def log_day_analysis(day: date, commitments: Sequence[Slot]):
        """Log the commitments that apply to `day` before it is changed"""
        todays = sorted((s for s in commitments if s.applies_to(day)), key=lambda s: (s.start, s.end))
        logger.info(f"🗓️  DAY ANALYSIS - {day.isoformat()} ({day.strftime('%A')})")
        logger.info(f"   📊 Commitments: {len(todays)}")

        if not todays:
            logger.info(f"   ✅ Nothing booked")
            return

        groups = ScheduleLogger.split_by_working_hours(todays)
        logger.info(f"   🏢 Working hours: {len(groups['working'])}")
        for i, slot in enumerate(groups["working"], 1):
            logger.info(f"      {i}. {slot.title or slot.kind.value} {slot.start_text}-{slot.end_text}")

        if groups["off_hours"]:
            logger.info(f"   🌙 Off hours: {len(groups['off_hours'])}")
            for i, slot in enumerate(groups["off_hours"], 1):
                logger.info(f"      {i}. {slot.title or slot.kind.value} {slot.start_text}-{slot.end_text}")

    @staticmethod
    def log_recommendations(title: str, recommendations: Sequence[Recommendation]):
        if not recommendations:
            logger.warning(f"❌ No alternative found for '{title}'")
            return
        logger.info(f"💡 {len(recommendations)} alternative(s) for '{title}':")
        for i, rec in enumerate(recommendations, 1):
            logger.info(f"   {i}. {rec.start.date().isoformat()} {rec.label} (offset {rec.offset_minutes:+d} min)")
