"""
Exceptions raised by the availability engine
"""


class SchedulingError(Exception):
    """Base class for caller-recoverable engine errors"""


class FormatError(SchedulingError, ValueError):
    """Malformed time-of-day, date or datetime text"""

    def __init__(self, value, expected: str):
        self.value = value
        self.expected = expected
        super().__init__(f"Invalid value {value!r}. Expected: {expected}")


class InvalidRangeError(SchedulingError, ValueError):
    """A range whose end does not come after its start"""

    def __init__(self, start, end, reason: str = "end must be after start"):
        self.start = start
        self.end = end
        super().__init__(f"Invalid range {start!r} - {end!r}: {reason}")
