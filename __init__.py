"""
Smart Availability Engine - availability and conflict resolution for personal scheduling

This package provides:
- Weekly and date-specific availability slots with priority levels
- Tick-level slot merging and splitting for compact storage
- Conflict detection with ranked alternative and reschedule times
- Conflict-free combinations of extracted timetables
"""

__version__ = "1.0.0"
__author__ = "Smart Calendar Team"
