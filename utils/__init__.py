"""
Utility modules for the Smart Availability Engine
"""

from .logger import SchedulerLogger
from .validators import RequestValidator, DataSanitizer
from .schedule_logger import ScheduleLogger

__all__ = ['SchedulerLogger', 'RequestValidator', 'DataSanitizer', 'ScheduleLogger']
