"""
Configuration settings for the Smart Availability Engine
"""
import os
from datetime import timedelta, timezone
from typing import Any, Dict, List


def _env(name: str, default: str) -> str:
    return os.environ.get(f"SMART_AVAILABILITY_{name}", default)


class Config:
    # Slot granularity
    TICK_MINUTES = 10
    DAY_MINUTES = 24 * 60
    OVERNIGHT_SPLIT_END = "23:50"  # evening half of an overnight range stops here

    # Alternative time search (nearest first, earlier before later)
    SEARCH_OFFSETS: List[int] = [-180, -120, -60, 60, 120, 180]
    WORKING_HOURS_START = 9   # 9 AM
    WORKING_HOURS_END = 22    # 10 PM (exclusive)
    MAX_RECOMMENDATIONS = 5
    FALLBACK_SEARCH_DAYS = 7

    # Timetable combination generation
    MAX_COMBINATIONS = 5
    MAX_COMBINATION_ATTEMPTS = 20

    # Conflict policy
    AVAILABILITY_BLOCKS_EVENTS = False  # declared availability does not block new events

    # Date/Time Formats
    TIMEZONE = "+09:00"
    DATE_FORMAT = "%Y-%m-%d"
    TIME_FORMAT = "%H:%M"
    OUTPUT_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

    # API Configuration
    API_HOST = _env("API_HOST", "0.0.0.0")
    API_PORT = int(_env("API_PORT", "5000"))
    API_TIMEOUT = 10  # seconds
    DEBUG_REQUEST_HISTORY = 50

    # Logging
    LOG_LEVEL = _env("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("SMART_AVAILABILITY_LOG_FILE")

    @classmethod
    def get_search_config(cls) -> Dict[str, Any]:
        """Get the alternative time search parameters"""
        return {
            "offsets": list(cls.SEARCH_OFFSETS),
            "min_hour": cls.WORKING_HOURS_START,
            "max_hour": cls.WORKING_HOURS_END,
            "max_results": cls.MAX_RECOMMENDATIONS,
        }

    @classmethod
    def get_combination_config(cls) -> Dict[str, int]:
        """Get the timetable combination limits"""
        return {
            "max_combinations": cls.MAX_COMBINATIONS,
            "max_attempts": cls.MAX_COMBINATION_ATTEMPTS,
        }

    @classmethod
    def get_timezone(cls) -> timezone:
        """Get the boundary UTC offset as a tzinfo"""
        sign = -1 if cls.TIMEZONE.startswith("-") else 1
        hours, minutes = cls.TIMEZONE.lstrip("+-").split(":")
        return timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))
