"""
Interval utilities: time-of-day parsing, durations and half-open overlap tests
"""
import re
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from config.settings import Config
from src.availability.errors import FormatError, InvalidRangeError

DAY_MINUTES = Config.DAY_MINUTES
TICK_MINUTES = Config.TICK_MINUTES

_TIME_OF_DAY = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')
_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def parse_time_of_day(text: str) -> int:
    """Parse "HH:MM" into minutes since midnight, in [0, 1440)"""
    if not isinstance(text, str):
        raise FormatError(text, "HH:MM")
    match = _TIME_OF_DAY.match(text.strip())
    if not match:
        raise FormatError(text, "HH:MM with 0 <= HH < 24 and 0 <= MM < 60")
    return int(match.group(1)) * 60 + int(match.group(2))


def parse_end_time(text: str) -> int:
    """Like parse_time_of_day, but also accepts "24:00" as the end of the day"""
    if isinstance(text, str) and text.strip() == "24:00":
        return DAY_MINUTES
    return parse_time_of_day(text)


def format_time_of_day(minutes: int) -> str:
    """Render minutes since midnight as zero-padded "HH:MM" ("24:00" for end of day)"""
    if not 0 <= minutes <= DAY_MINUTES:
        raise InvalidRangeError(minutes, minutes, "time of day out of range")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def duration_minutes(start: int, end: int) -> int:
    # Overnight ranges must be split before they get here.
    return end - start


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval test; touching intervals do not overlap"""
    return a_start < b_end and a_end > b_start


def next_tick(minutes: int) -> int:
    """Advance a time of day by one tick"""
    return minutes + TICK_MINUTES


def parse_date(text: str) -> date:
    """Parse a "YYYY-MM-DD" date key"""
    if isinstance(text, date) and not isinstance(text, datetime):
        return text
    if not isinstance(text, str) or not _DATE.match(text.strip()):
        raise FormatError(text, "YYYY-MM-DD")
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        raise FormatError(text, "a real calendar date (YYYY-MM-DD)")


def format_date(value: date) -> str:
    return value.strftime(Config.DATE_FORMAT)


def parse_datetime(text: str) -> datetime:
    """Parse an ISO-8601 instant such as 2025-03-03T14:00:00+09:00"""
    if isinstance(text, datetime):
        return text
    if not isinstance(text, str) or "T" not in text:
        raise FormatError(text, "ISO-8601 datetime (YYYY-MM-DDTHH:MM:SS+HH:MM)")
    value = text.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise FormatError(text, "ISO-8601 datetime (YYYY-MM-DDTHH:MM:SS+HH:MM)")


def minutes_since_midnight(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def at_minutes(day: date, minutes: int, tz: Optional[tzinfo] = None) -> datetime:
    """Datetime for a time of day on a given date (minutes may run past midnight)"""
    return datetime.combine(day, time.min, tzinfo=tz) + timedelta(minutes=minutes)


def format_datetime(moment: datetime) -> str:
    """ISO-8601 with an explicit offset; naive values get the configured offset"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=Config.get_timezone())
    return moment.isoformat(timespec="seconds")
